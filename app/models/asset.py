"""Upload and materialized asset data models."""

import asyncio
import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

ByteReader = Callable[[], Awaitable[bytes]]


class AssetCategory(str, Enum):
    """Caller-declared category of an uploaded file."""

    IMAGE = "image"
    OTHER = "other"


class AssetRepresentation(str, Enum):
    """How a materialized asset is stored."""

    INLINE = "inline"  # base64 data URI
    OBJECT = "object"  # object storage URL
    DEGRADED = "degraded"  # synthetic /downloads/ reference, nothing stored


@dataclass(frozen=True)
class UploadTarget:
    """A file selected by an operator for materialization."""

    name: str
    mime_type: str
    size_bytes: int
    reader: ByteReader = field(repr=False, compare=False)
    category: AssetCategory = AssetCategory.OTHER
    destination_hint: str = "materials"

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    async def read(self) -> bytes:
        return await self.reader()

    @classmethod
    def from_bytes(
        cls,
        name: str,
        data: bytes,
        mime_type: Optional[str] = None,
        category: AssetCategory = AssetCategory.OTHER,
        destination_hint: str = "materials",
    ) -> "UploadTarget":
        """Build a target over an in-memory payload."""

        async def reader() -> bytes:
            return data

        return cls(
            name=name,
            mime_type=mime_type or _guess_mime_type(name),
            size_bytes=len(data),
            reader=reader,
            category=category,
            destination_hint=destination_hint,
        )

    @classmethod
    def from_path(
        cls,
        path: Path,
        mime_type: Optional[str] = None,
        category: AssetCategory = AssetCategory.OTHER,
        destination_hint: str = "materials",
    ) -> "UploadTarget":
        """Build a target over a local file, read lazily in a worker thread."""

        async def reader() -> bytes:
            return await asyncio.to_thread(path.read_bytes)

        return cls(
            name=path.name,
            mime_type=mime_type or _guess_mime_type(path.name),
            size_bytes=path.stat().st_size,
            reader=reader,
            category=category,
            destination_hint=destination_hint,
        )


@dataclass(frozen=True)
class MaterializedAsset:
    """Durable reference to an uploaded file."""

    file_url: str
    file_size_label: str
    representation: AssetRepresentation
    storage_key: Optional[str] = None
    degraded_reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        """True when the reference points at nothing that was actually stored."""
        return self.representation == AssetRepresentation.DEGRADED


def _guess_mime_type(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"
