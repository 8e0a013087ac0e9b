"""Files API routes."""
import logging
import mimetypes
import uuid
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File as FastAPIFile
from fastapi.responses import FileResponse

from filebox.config import settings
from filebox.errors import FileTooLargeError, TooManyFilesError
from filebox.schemas.common import OkResponse
from filebox.schemas.file import FileListResponse, FileRecord
from filebox.services.file_storage import (
    FileStorageService,
    build_stored_name,
    get_file_storage,
)
from filebox.services.metadata_store import (
    MetadataStore,
    find_by_id,
    get_metadata_store,
    sort_newest_first,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["files"])

DEFAULT_MIME = "application/octet-stream"
# Left unescaped by encodeURIComponent on top of quote()'s own safe set
_URI_COMPONENT_SAFE = "!~*'()"


@router.post("/upload", response_model=FileListResponse, status_code=201)
async def upload_files(
    files: Optional[list[UploadFile]] = FastAPIFile(None),
    store: MetadataStore = Depends(get_metadata_store),
    storage: FileStorageService = Depends(get_file_storage),
):
    """Store every uploaded part and append one record per part.

    Either every part is committed or none is: on failure the files already
    written by this request are removed and the store is left untouched.
    """
    uploads = files or []
    if len(uploads) > settings.MAX_FILES_PER_UPLOAD:
        e = TooManyFilesError(settings.MAX_FILES_PER_UPLOAD)
        raise HTTPException(status_code=400, detail=str(e))

    now = utc_timestamp()
    written: list[str] = []
    records: list[FileRecord] = []
    try:
        for upload in uploads:
            original_name = upload.filename or "unnamed"
            file_id = str(uuid.uuid4())
            stored_name = build_stored_name(file_id, original_name)
            written.append(stored_name)
            size = await storage.save_upload(upload, stored_name)
            records.append(FileRecord(
                id=file_id,
                original_name=original_name,
                stored_name=stored_name,
                extension=_extension_of(stored_name),
                size=size,
                mime=_mime_for(upload, original_name),
                uploaded_at=now,
            ))
        await store.add(records)
    except FileTooLargeError as e:
        await _discard(storage, written)
        logger.warning(f"Rejected upload of '{e.original_name}': over {e.limit} bytes")
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        await _discard(storage, written)
        logger.error(f"Upload failed: {e}")
        raise HTTPException(status_code=500, detail="Upload failed.")

    logger.info(f"Stored {len(records)} file(s)")
    return {"files": records}


@router.get("/files", response_model=FileListResponse)
async def list_files(store: MetadataStore = Depends(get_metadata_store)):
    """List all files, newest upload first."""
    records = await store.load()
    return {"files": sort_newest_first(records)}


@router.get("/files/{file_id}", response_model=FileRecord)
async def get_file_metadata(
    file_id: str,
    store: MetadataStore = Depends(get_metadata_store),
):
    """Get file metadata by ID."""
    record = find_by_id(await store.load(), file_id)
    if not record:
        raise HTTPException(status_code=404, detail="Not found")
    return record


@router.get("/files/{file_id}/download")
async def download_file(
    file_id: str,
    store: MetadataStore = Depends(get_metadata_store),
    storage: FileStorageService = Depends(get_file_storage),
):
    """Stream a stored file back under its original name."""
    record = find_by_id(await store.load(), file_id)
    if not record:
        raise HTTPException(status_code=404, detail="Not found")
    if not storage.exists(record.stored_name):
        logger.warning(f"Record {file_id} points at missing file {record.stored_name}")
        raise HTTPException(status_code=404, detail="Missing file on disk")

    return FileResponse(
        path=storage.path_for(record.stored_name),
        headers={
            # Set directly so text/* types are not given an extra charset
            "Content-Type": record.mime or DEFAULT_MIME,
            "Content-Disposition": content_disposition(record.original_name),
        },
    )


@router.delete("/files/{file_id}", response_model=OkResponse)
async def delete_file(
    file_id: str,
    store: MetadataStore = Depends(get_metadata_store),
    storage: FileStorageService = Depends(get_file_storage),
):
    """Delete a file and its record. A missing file on disk is not an error."""
    record = find_by_id(await store.load(), file_id)
    if not record:
        raise HTTPException(status_code=404, detail="Not found")

    try:
        await storage.delete(record.stored_name)
    except OSError as e:
        logger.error(f"Failed to delete {record.stored_name}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete")

    try:
        removed = await store.remove(file_id)
    except OSError as e:
        logger.error(f"Failed to remove record {file_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete")
    # Another request may have removed it between the lookup and here
    if removed is None:
        raise HTTPException(status_code=404, detail="Not found")
    return {"ok": True}


def content_disposition(original_name: str) -> str:
    """Attachment header with the name percent-encoded like encodeURIComponent."""
    encoded = quote(original_name, safe=_URI_COMPONENT_SAFE)
    return f'attachment; filename="{encoded}"'


def _extension_of(stored_name: str) -> str:
    dot = stored_name.rfind(".")
    return stored_name[dot:] if dot > 0 else ""


def _mime_for(upload: UploadFile, original_name: str) -> str:
    if upload.content_type:
        return upload.content_type
    guessed, _ = mimetypes.guess_type(original_name)
    return guessed or DEFAULT_MIME


async def _discard(storage: FileStorageService, stored_names: list[str]) -> None:
    for stored_name in stored_names:
        try:
            await storage.delete(stored_name)
        except OSError as e:
            logger.error(f"Could not clean up {stored_name}: {e}")
