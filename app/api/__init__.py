"""API endpoints."""

from app.api import assets, health, media, metrics

__all__ = [
    "assets",
    "health",
    "media",
    "metrics",
]
