"""Asset materialization: turn uploaded files into durable references.

Images are inlined as base64 data URIs; every other file goes to object
storage. A failed upload never fails the caller: the asset degrades to a
synthetic /downloads/ reference flagged as degraded.
"""

import base64
import time
from decimal import ROUND_HALF_UP, Decimal
from pathlib import PurePosixPath
from typing import Callable, Optional

import structlog

from app.core.metrics import MetricsCollector
from app.models.asset import AssetRepresentation, MaterializedAsset, UploadTarget
from app.services.storage import ObjectStorage

logger = structlog.get_logger(__name__)

KIB = 1024
MIB = 1024 * 1024

FALLBACK_PREFIX = "/downloads"


class MaterializationError(Exception):
    """Base exception for materialization errors."""

    pass


class AssetReadError(MaterializationError):
    """Raised when an image cannot be read for inline encoding."""

    pass


def _one_decimal(size_bytes: int, unit: int) -> Decimal:
    # Ties round up: 1280 bytes is "1.3 KB"
    return (Decimal(size_bytes) / unit).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def format_size(size_bytes: int) -> str:
    """
    Format a byte count for display.

    Args:
        size_bytes: Size in bytes

    Returns:
        "<n> bytes", "<x.x> KB" or "<x.x> MB"
    """
    if size_bytes < KIB:
        return f"{size_bytes} bytes"
    if size_bytes < MIB:
        return f"{_one_decimal(size_bytes, KIB)} KB"
    return f"{_one_decimal(size_bytes, MIB)} MB"


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class AssetMaterializer:
    """Decides and produces the storage representation of uploaded files."""

    def __init__(
        self,
        storage: ObjectStorage,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """
        Initialize the materializer.

        Args:
            storage: Object storage used for non-image files
            clock: Returns the current time in seconds; defaults to time.time
        """
        self.storage = storage
        self.clock = clock or time.time

    def storage_key(self, file_name: str) -> str:
        """Build a timestamped storage key from the file's base name."""
        millis = int(self.clock() * 1000)
        base_name = PurePosixPath(file_name.replace("\\", "/")).name or "file"
        return f"{millis}-{base_name}"

    async def materialize(self, target: UploadTarget) -> MaterializedAsset:
        """
        Produce a durable reference for an uploaded file.

        Args:
            target: File selected by the operator

        Returns:
            Materialized asset; degraded when the storage upload failed

        Raises:
            AssetReadError: If an image file cannot be read
        """
        size_label = format_size(target.size_bytes)

        if target.is_image:
            asset = await self._inline(target, size_label)
        else:
            asset = await self._store(target, size_label)

        MetricsCollector.record_materialization(asset.representation.value, target.size_bytes)
        return asset

    async def _inline(self, target: UploadTarget, size_label: str) -> MaterializedAsset:
        try:
            data = await target.read()
        except Exception as e:
            logger.error(
                "image_read_failed",
                file_name=target.name,
                mime_type=target.mime_type,
                error=str(e),
            )
            raise AssetReadError(f"Failed to read image '{target.name}': {e}") from e

        logger.info(
            "asset_inlined",
            file_name=target.name,
            mime_type=target.mime_type,
            size_bytes=target.size_bytes,
        )
        return MaterializedAsset(
            file_url=to_data_uri(data, target.mime_type),
            file_size_label=size_label,
            representation=AssetRepresentation.INLINE,
        )

    async def _store(self, target: UploadTarget, size_label: str) -> MaterializedAsset:
        key = self.storage_key(target.name)
        bucket = target.destination_hint

        try:
            data = await target.read()
            await self.storage.upload(bucket, key, data, target.mime_type)
            file_url = self.storage.get_public_url(bucket, key)
        except Exception as e:
            # Never block the operator's save on storage trouble
            logger.warning(
                "asset_upload_degraded",
                file_name=target.name,
                bucket=bucket,
                key=key,
                error_type=type(e).__name__,
                error=str(e),
            )
            return MaterializedAsset(
                file_url=f"{FALLBACK_PREFIX}/{key}",
                file_size_label=size_label,
                representation=AssetRepresentation.DEGRADED,
                storage_key=key,
                degraded_reason=str(e) or type(e).__name__,
            )

        logger.info(
            "asset_stored",
            file_name=target.name,
            bucket=bucket,
            key=key,
            file_url=file_url,
        )
        return MaterializedAsset(
            file_url=file_url,
            file_size_label=size_label,
            representation=AssetRepresentation.OBJECT,
            storage_key=key,
        )
