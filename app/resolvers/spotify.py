"""Spotify resolver implementation."""

from typing import Optional, Tuple

import structlog

from app.models.media import MediaKind, Platform, ResolvedMedia, SpotifyKind
from app.resolvers.base import MediaResolver, segment_after
from app.resolvers.exceptions import UnresolvableMediaUrlError

logger = structlog.get_logger(__name__)


class SpotifyResolver(MediaResolver):
    """Resolves Spotify track, album and playlist links to the embed player."""

    platform = Platform.SPOTIFY
    kind = MediaKind.AUDIO

    # Checked in order; a URL carrying several markers resolves to the first
    SUB_KINDS = (SpotifyKind.TRACK, SpotifyKind.ALBUM, SpotifyKind.PLAYLIST)

    def matches(self, url: str) -> bool:
        return "spotify.com" in url

    def extract_resource(self, url: str) -> Tuple[Optional[SpotifyKind], Optional[str]]:
        """
        Find the resource type and ID in a Spotify URL.

        Args:
            url: Spotify URL

        Returns:
            (sub-kind, ID) tuple, or (None, None) when no known marker is present
        """
        for sub_kind in self.SUB_KINDS:
            if f"spotify.com/{sub_kind.value}/" in url:
                return sub_kind, segment_after(url, f"{sub_kind.value}/")
        return None, None

    def extract_id(self, url: str) -> Optional[str]:
        _, resource_id = self.extract_resource(url)
        return resource_id or None

    def build_embed_url(self, url: str, media_id: Optional[str], origin: str = "") -> str:
        sub_kind, resource_id = self.extract_resource(url)
        if sub_kind is None:
            # Unknown shape: naive rewrite, no-op when the marker is absent
            return url.replace("/track/", "/embed/track/")
        return f"https://open.spotify.com/embed/{sub_kind.value}/{resource_id}"

    def resolve(self, url: str, origin: str = "", strict: bool = False) -> ResolvedMedia:
        sub_kind, resource_id = self.extract_resource(url)

        if not resource_id:
            if strict:
                raise UnresolvableMediaUrlError(url, self.platform.value)
            logger.warning("media_id_not_extracted", platform=self.platform.value, url=url)

        return ResolvedMedia(
            raw_url=url,
            kind=self.kind,
            platform=self.platform,
            embed_url=self.build_embed_url(url, resource_id, origin),
            media_id=resource_id or None,
            spotify_kind=sub_kind,
        )
