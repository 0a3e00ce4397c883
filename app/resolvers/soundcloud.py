"""SoundCloud resolver implementation."""

from typing import Optional
from urllib.parse import urlparse

from app.models.media import MediaKind, Platform
from app.resolvers.base import MediaResolver, encode_uri_component

# Fixed widget display parameters
PLAYER_PARAMS = (
    "color=%23ff5500"
    "&auto_play=false"
    "&hide_related=false"
    "&show_comments=true"
    "&show_user=true"
    "&show_reposts=false"
    "&show_teaser=true"
    "&visual=true"
)


class SoundCloudResolver(MediaResolver):
    """Wraps any soundcloud.com URL in the w.soundcloud.com widget."""

    platform = Platform.SOUNDCLOUD
    kind = MediaKind.AUDIO

    def matches(self, url: str) -> bool:
        return "soundcloud.com" in url

    def extract_id(self, url: str) -> Optional[str]:
        # The widget identifies tracks by permalink path, e.g. "artist/track"
        try:
            path = urlparse(url).path.strip("/")
        except ValueError:
            return None
        return path or None

    def build_embed_url(self, url: str, media_id: Optional[str], origin: str = "") -> str:
        # The widget takes the full track URL, not the extracted path
        return f"https://w.soundcloud.com/player/?url={encode_uri_component(url)}&{PLAYER_PARAMS}"
