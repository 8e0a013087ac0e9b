"""File record and response schemas."""
from filebox.schemas.base import CamelModel


class FileRecord(CamelModel):
    """One uploaded file. Persisted as-is in the metadata document."""

    id: str
    original_name: str
    stored_name: str
    extension: str = ""
    size: int
    mime: str
    uploaded_at: str


class FileListResponse(CamelModel):
    files: list[FileRecord]
