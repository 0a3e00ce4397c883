"""Vimeo resolver implementation."""

import re
from typing import Optional

from app.models.media import MediaKind, Platform
from app.resolvers.base import MediaResolver


class VimeoResolver(MediaResolver):
    """Resolves vimeo.com links to the player.vimeo.com iframe."""

    platform = Platform.VIMEO
    kind = MediaKind.VIDEO

    VIDEO_ID_PATTERN = re.compile(r"vimeo\.com/(?:video/)?([0-9]+)")

    def matches(self, url: str) -> bool:
        return "vimeo.com" in url

    def extract_id(self, url: str) -> Optional[str]:
        match = self.VIDEO_ID_PATTERN.search(url)
        return match.group(1) if match else None

    def build_embed_url(self, url: str, media_id: Optional[str], origin: str = "") -> str:
        # Empty ID yields a player URL that Vimeo answers with an error page
        return f"https://player.vimeo.com/video/{media_id or ''}"
