"""Suno resolver implementation."""

from typing import Optional

from app.models.media import MediaKind, Platform
from app.resolvers.base import MediaResolver, segment_after


class SunoResolver(MediaResolver):
    """Resolves suno.com song links to the Suno embed player."""

    platform = Platform.SUNO
    kind = MediaKind.AUDIO

    def matches(self, url: str) -> bool:
        return "suno.com" in url

    def extract_id(self, url: str) -> Optional[str]:
        return segment_after(url, "song/") or None

    def build_embed_url(self, url: str, media_id: Optional[str], origin: str = "") -> str:
        if not media_id:
            return url
        return f"https://suno.com/embed/song/{media_id}"
