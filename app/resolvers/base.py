"""Abstract base class for media platform resolvers."""

from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import structlog

from app.models.media import MediaKind, Platform, ResolvedMedia
from app.resolvers.exceptions import UnresolvableMediaUrlError

logger = structlog.get_logger(__name__)

# Characters left unescaped by a browser's encodeURIComponent
_URI_COMPONENT_SAFE = "!~*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode a value exactly as encodeURIComponent does."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def segment_after(url: str, marker: str) -> Optional[str]:
    """
    Return the text following the first occurrence of marker, cut at '?'.

    Args:
        url: URL to search
        marker: Substring preceding the segment

    Returns:
        The segment, or None if marker is absent
    """
    parts = url.split(marker)
    if len(parts) < 2:
        return None
    return parts[1].split("?")[0]


class MediaResolver(ABC):
    """Abstract base class for embeddable media platforms.

    Subclasses declare which platform and media kind they handle and
    implement detection, ID extraction and embed URL synthesis. Resolution
    never fails on malformed input unless strict mode is requested.
    """

    platform: Platform
    kind: MediaKind

    @abstractmethod
    def matches(self, url: str) -> bool:
        """
        Check if URL belongs to this platform.

        Args:
            url: Raw media URL

        Returns:
            True if this resolver handles the URL
        """
        pass

    @abstractmethod
    def extract_id(self, url: str) -> Optional[str]:
        """
        Extract the platform media ID.

        Args:
            url: Raw media URL

        Returns:
            Media ID, or None if it cannot be extracted
        """
        pass

    @abstractmethod
    def build_embed_url(self, url: str, media_id: Optional[str], origin: str = "") -> str:
        """
        Synthesize the iframe URL for a media item.

        Args:
            url: Raw media URL
            media_id: Extracted ID, possibly None
            origin: Origin of the embedding page, may be empty

        Returns:
            URL suitable for an iframe src
        """
        pass

    def resolve(self, url: str, origin: str = "", strict: bool = False) -> ResolvedMedia:
        """
        Resolve a URL already known to match this platform.

        Args:
            url: Raw media URL
            origin: Origin of the embedding page
            strict: Raise instead of returning a best-effort embed URL

        Returns:
            Resolved media descriptor

        Raises:
            UnresolvableMediaUrlError: If strict and no media ID can be extracted
        """
        media_id = self.extract_id(url)

        if not media_id:
            if strict:
                raise UnresolvableMediaUrlError(url, self.platform.value)
            logger.warning(
                "media_id_not_extracted",
                platform=self.platform.value,
                url=url,
            )

        return ResolvedMedia(
            raw_url=url,
            kind=self.kind,
            platform=self.platform,
            embed_url=self.build_embed_url(url, media_id or None, origin),
            media_id=media_id or None,
        )
