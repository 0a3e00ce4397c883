"""Object storage backends for non-image uploads.

Three interchangeable backends share the ObjectStorage contract:
- LocalObjectStorage: files under a local directory, served by a static route
- SupabaseObjectStorage: Supabase Storage REST API over httpx
- InMemoryObjectStorage: dict-backed, for tests and ephemeral deployments
"""

import asyncio
import os
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import quote

import httpx
import structlog

from app.core.config import StorageConfig
from app.core.metrics import MetricsCollector

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoredObject:
    """Object written to storage."""

    bucket: str
    key: str
    size: int
    content_type: str


class StorageError(Exception):
    """Exception raised for storage-related errors."""

    pass


def _validate_segment(value: str, label: str) -> None:
    if not value or value.startswith("/") or ".." in value.split("/") or "\\" in value:
        raise StorageError(f"Invalid {label}: {value!r}")


class ObjectStorage(ABC):
    """Abstract object storage collaborator.

    Implementations must be consistent: a public URL is valid as soon as
    upload() returns.
    """

    name: str = "abstract"

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> StoredObject:
        """
        Write an object and record upload metrics.

        Args:
            bucket: Logical bucket / folder name
            key: Object key within the bucket
            data: Object bytes
            content_type: MIME type stored with the object

        Returns:
            The stored object

        Raises:
            StorageError: If the write fails
        """
        _validate_segment(bucket, "bucket")
        _validate_segment(key, "key")

        start_time = time.time()
        try:
            stored = await self._put(bucket, key, data, content_type)
        except StorageError:
            MetricsCollector.record_storage_upload(self.name, "failed", time.time() - start_time)
            raise
        except Exception as e:
            MetricsCollector.record_storage_upload(self.name, "failed", time.time() - start_time)
            raise StorageError(f"Upload to {bucket}/{key} failed: {e}") from e

        duration = time.time() - start_time
        MetricsCollector.record_storage_upload(self.name, "success", duration)
        logger.info(
            "object_uploaded",
            backend=self.name,
            bucket=bucket,
            key=key,
            size_bytes=stored.size,
            duration_ms=int(duration * 1000),
        )
        return stored

    @abstractmethod
    async def _put(self, bucket: str, key: str, data: bytes, content_type: str) -> StoredObject:
        pass

    @abstractmethod
    def get_public_url(self, bucket: str, key: str) -> str:
        """
        Get the public URL of an object.

        Args:
            bucket: Bucket name
            key: Object key

        Returns:
            Absolute HTTP(S) URL
        """
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None


class LocalObjectStorage(ObjectStorage):
    """Stores objects as files under a root directory."""

    name = "local"

    def __init__(self, config: StorageConfig) -> None:
        """Initialize the local storage backend.

        Args:
            config: Storage configuration with root directory and public base URL.
        """
        self.root = Path(config.local_root)
        self.public_base_url = config.public_base_url.rstrip("/")

        logger.debug(
            "local_storage_initialized",
            root=str(self.root),
            public_base_url=self.public_base_url,
        )

    def initialize(self) -> None:
        """Create the root directory and verify it is writable.

        Raises:
            StorageError: If directory creation fails or permissions are insufficient.
        """
        try:
            if not self.root.exists():
                self.root.mkdir(parents=True, exist_ok=True)
                logger.info("storage_directory_created", path=str(self.root))

            # Unique name avoids races between workers
            test_file = self.root / f".write_test_{os.getpid()}_{uuid.uuid4().hex}"
            try:
                test_file.touch()
                test_file.unlink(missing_ok=True)
            except PermissionError as e:
                raise StorageError(
                    f"Insufficient permissions to write to storage directory: {self.root}"
                ) from e

            logger.info("storage_initialized", root=str(self.root), writable=True)

        except OSError as e:
            raise StorageError(f"Failed to initialize storage directory: {e}") from e

    def get_object_path(self, bucket: str, key: str) -> Path:
        """Get the filesystem path of an object, refusing paths outside the root."""
        root = self.root.resolve()
        path = (root / bucket / key).resolve()
        if root not in path.parents:
            raise StorageError(f"Object path escapes storage root: {bucket}/{key}")
        return path

    async def _put(self, bucket: str, key: str, data: bytes, content_type: str) -> StoredObject:
        path = self.get_object_path(bucket, key)

        def write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(write)
        except OSError as e:
            raise StorageError(f"Failed to write {bucket}/{key}: {e}") from e

        return StoredObject(bucket=bucket, key=key, size=len(data), content_type=content_type)

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{quote(bucket)}/{quote(key)}"


class SupabaseObjectStorage(ObjectStorage):
    """Stores objects in Supabase Storage through its REST API."""

    name = "supabase"

    def __init__(
        self,
        config: StorageConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the Supabase backend.

        Args:
            config: Storage configuration with project URL and service key.
            client: Optional preconfigured HTTP client (mainly for tests).

        Raises:
            StorageError: If the project URL or key is missing.
        """
        if not config.supabase_url or not config.supabase_key:
            raise StorageError("Supabase storage requires supabase_url and supabase_key")

        self.base_url = config.supabase_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=config.request_timeout,
            headers={
                "Authorization": f"Bearer {config.supabase_key}",
                "apikey": config.supabase_key,
            },
        )

    async def _put(self, bucket: str, key: str, data: bytes, content_type: str) -> StoredObject:
        url = f"{self.base_url}/storage/v1/object/{quote(bucket)}/{quote(key)}"
        try:
            response = await self._client.post(
                url,
                content=data,
                headers={
                    "Content-Type": content_type or "application/octet-stream",
                    "cache-control": "3600",
                    "x-upsert": "true",
                },
            )
        except httpx.HTTPError as e:
            raise StorageError(f"Supabase upload request failed: {e}") from e

        if response.status_code >= 400:
            raise StorageError(
                f"Supabase upload rejected with HTTP {response.status_code}: {response.text[:200]}"
            )

        return StoredObject(bucket=bucket, key=key, size=len(data), content_type=content_type)

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{quote(bucket)}/{quote(key)}"

    async def close(self) -> None:
        await self._client.aclose()


class InMemoryObjectStorage(ObjectStorage):
    """Keeps objects in a dictionary."""

    name = "memory"

    def __init__(self, public_base_url: str = "memory://objects") -> None:
        self.public_base_url = public_base_url.rstrip("/")
        self.objects: Dict[Tuple[str, str], bytes] = {}

    async def _put(self, bucket: str, key: str, data: bytes, content_type: str) -> StoredObject:
        self.objects[(bucket, key)] = data
        return StoredObject(bucket=bucket, key=key, size=len(data), content_type=content_type)

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{quote(bucket)}/{quote(key)}"


def create_object_storage(config: StorageConfig) -> ObjectStorage:
    """
    Build the storage backend selected by configuration.

    Args:
        config: Storage configuration.

    Returns:
        Initialized ObjectStorage.

    Raises:
        StorageError: If the backend cannot be initialized.
    """
    if config.backend == "supabase":
        return SupabaseObjectStorage(config)
    if config.backend == "memory":
        return InMemoryObjectStorage(config.public_base_url)

    storage = LocalObjectStorage(config)
    storage.initialize()
    return storage


# Global storage instance
_object_storage: Optional[ObjectStorage] = None


def configure_storage(config: StorageConfig) -> ObjectStorage:
    """Configure the global object storage backend.

    Args:
        config: Storage configuration.

    Returns:
        Configured ObjectStorage instance.
    """
    global _object_storage
    _object_storage = create_object_storage(config)
    logger.info("object_storage_configured", backend=_object_storage.name)
    return _object_storage


def get_object_storage() -> ObjectStorage:
    """Get the global object storage instance.

    Raises:
        RuntimeError: If storage is not configured.
    """
    if _object_storage is None:
        raise RuntimeError("Object storage not configured. Call configure_storage() first.")
    return _object_storage
