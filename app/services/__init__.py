"""Service layer implementations."""

from app.services.downloads import (
    InvalidDataUriError,
    decode_data_uri,
    file_extension,
    filename_from_data_uri,
    filename_from_url,
)
from app.services.materializer import (
    AssetMaterializer,
    AssetReadError,
    MaterializationError,
    format_size,
    to_data_uri,
)
from app.services.storage import (
    InMemoryObjectStorage,
    LocalObjectStorage,
    ObjectStorage,
    StorageError,
    StoredObject,
    SupabaseObjectStorage,
    configure_storage,
    create_object_storage,
    get_object_storage,
)

__all__ = [
    # Downloads
    "InvalidDataUriError",
    "decode_data_uri",
    "file_extension",
    "filename_from_data_uri",
    "filename_from_url",
    # Materializer
    "AssetMaterializer",
    "AssetReadError",
    "MaterializationError",
    "format_size",
    "to_data_uri",
    # Storage
    "InMemoryObjectStorage",
    "LocalObjectStorage",
    "ObjectStorage",
    "StorageError",
    "StoredObject",
    "SupabaseObjectStorage",
    "configure_storage",
    "create_object_storage",
    "get_object_storage",
]
