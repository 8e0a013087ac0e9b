"""Metadata store backed by a single JSON document.

The whole document is the database: every read loads all records and
every write rewrites the file. Mutations go through add()/remove(), which
hold an asyncio.Lock so concurrent requests in one process cannot lose
each other's changes. Nothing protects the file across processes.
"""
import asyncio
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

import aiofiles
from pydantic import TypeAdapter, ValidationError

from filebox.config import settings
from filebox.schemas.file import FileRecord

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[FileRecord])

# Sort key for records whose uploadedAt cannot be parsed
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_newest_first(records: Iterable[FileRecord]) -> list[FileRecord]:
    """Order records by uploadedAt descending. Ties keep their input order."""
    return sorted(records, key=lambda r: _parse_timestamp(r.uploaded_at), reverse=True)


def find_by_id(records: Iterable[FileRecord], file_id: str) -> Optional[FileRecord]:
    """Linear scan for the record with the given id."""
    for record in records:
        if record.id == file_id:
            return record
    return None


class MetadataStore:
    """Reads and rewrites the metadata document."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the parent directory and an empty document if missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            await self._write([])
            logger.info("Created empty metadata document at %s", self.path)

    async def load(self) -> list[FileRecord]:
        """Load every record. A missing or unreadable document resets to []."""
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
            return _records_adapter.validate_json(raw)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Failed to load {self.path}, resetting: {e}")
            await self._write([])
            return []

    async def save(self, records: Iterable[FileRecord]) -> None:
        """Overwrite the document with the given records."""
        payload = [r.model_dump(by_alias=True) for r in records]
        await self._write(payload)

    async def add(self, new_records: list[FileRecord]) -> None:
        """Append records in one load/modify/save cycle."""
        async with self._lock:
            records = await self.load()
            records.extend(new_records)
            await self.save(records)

    async def remove(self, file_id: str) -> Optional[FileRecord]:
        """Drop the record with this id. Returns it, or None if unknown."""
        async with self._lock:
            records = await self.load()
            record = find_by_id(records, file_id)
            if record is None:
                return None
            await self.save([r for r in records if r.id != file_id])
            return record

    async def _write(self, payload: list) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.{uuid.uuid4().hex}.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(payload, indent=2))
        os.replace(tmp_path, self.path)


metadata_store = MetadataStore(settings.metadata_path)


def get_metadata_store() -> MetadataStore:
    """FastAPI dependency returning the process-wide store."""
    return metadata_store
