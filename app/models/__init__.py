"""Data models for the application."""

from app.models.asset import (
    AssetCategory,
    AssetRepresentation,
    MaterializedAsset,
    UploadTarget,
)
from app.models.media import MediaKind, MediaSource, Platform, ResolvedMedia, SpotifyKind

__all__ = [
    "AssetCategory",
    "AssetRepresentation",
    "MaterializedAsset",
    "UploadTarget",
    "MediaKind",
    "MediaSource",
    "Platform",
    "ResolvedMedia",
    "SpotifyKind",
]
