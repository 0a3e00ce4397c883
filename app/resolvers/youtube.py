"""YouTube resolver implementation."""

from typing import Optional
from urllib.parse import parse_qs

import structlog

from app.models.media import MediaKind, Platform
from app.resolvers.base import MediaResolver, encode_uri_component, segment_after

logger = structlog.get_logger(__name__)


class YouTubeResolver(MediaResolver):
    """Resolves youtube.com and youtu.be links to the embed player."""

    platform = Platform.YOUTUBE
    kind = MediaKind.VIDEO

    HOST_MARKERS = ("youtube.com", "youtu.be")
    EMBED_TEMPLATE = "https://www.youtube.com/embed/{video_id}?autoplay=0&origin={origin}"

    def matches(self, url: str) -> bool:
        return any(marker in url for marker in self.HOST_MARKERS)

    def extract_id(self, url: str) -> Optional[str]:
        """
        Extract video ID from the watch, short-link and shorts URL shapes.

        Args:
            url: YouTube URL

        Returns:
            Video ID if found, None otherwise
        """
        if "youtube.com/watch" in url:
            parts = url.split("?")
            query = parts[1] if len(parts) > 1 else ""
            values = parse_qs(query).get("v")
            video_id = values[0] if values else None
        elif "youtu.be/" in url:
            video_id = segment_after(url, "youtu.be/")
        elif "youtube.com/shorts/" in url:
            video_id = segment_after(url, "/shorts/")
        else:
            video_id = None

        if video_id:
            logger.debug("Video ID extracted", url=url, video_id=video_id)
        return video_id or None

    def build_embed_url(self, url: str, media_id: Optional[str], origin: str = "") -> str:
        # Autoplay is always off; origin keeps the player working on non-default hosts
        return self.EMBED_TEMPLATE.format(
            video_id=media_id or "",
            origin=encode_uri_component(origin),
        )
