"""File storage on local disk. Files are named by id plus a sanitized extension."""
import logging
import os
import re
from pathlib import Path

import aiofiles
from fastapi import UploadFile

from filebox.config import settings
from filebox.errors import FileTooLargeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
_UNSAFE_EXTENSION_CHARS = re.compile(r"[^.a-zA-Z0-9]")


def sanitize_extension(name: str) -> str:
    """Return the final suffix of `name` with everything but [.a-zA-Z0-9] removed."""
    return _UNSAFE_EXTENSION_CHARS.sub("", Path(name).suffix)


def build_stored_name(file_id: str, original_name: str) -> str:
    return f"{file_id}{sanitize_extension(original_name)}"


class FileStorageService:
    """Handles file read/write inside the upload directory."""

    def __init__(self, base_path: Path, max_file_size: int):
        self.base_path = Path(base_path)
        self.max_file_size = max_file_size

    def initialize(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)

    def path_for(self, stored_name: str) -> Path:
        return self.base_path / stored_name

    def exists(self, stored_name: str) -> bool:
        return self.path_for(stored_name).is_file()

    async def save_upload(self, upload: UploadFile, stored_name: str) -> int:
        """Stream an uploaded part to disk. Returns the number of bytes written.

        Raises FileTooLargeError once the part goes over max_file_size; the
        partial file is removed first.
        """
        file_path = self.path_for(stored_name)
        written = 0
        try:
            async with aiofiles.open(file_path, "wb") as f:
                while chunk := await upload.read(CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_file_size:
                        raise FileTooLargeError(self.max_file_size, upload.filename or "")
                    await f.write(chunk)
        except BaseException:
            self._remove(stored_name)
            raise
        return written

    async def delete(self, stored_name: str) -> bool:
        """Delete a stored file. Returns False if it was already gone."""
        return self._remove(stored_name)

    def _remove(self, stored_name: str) -> bool:
        path = self.path_for(stored_name)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        logger.debug("Removed %s", path)
        return True


file_storage = FileStorageService(Path(settings.UPLOAD_DIR), settings.MAX_FILE_SIZE)


def get_file_storage() -> FileStorageService:
    """FastAPI dependency returning the process-wide storage service."""
    return file_storage
