"""Media source and resolution data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MediaKind(str, Enum):
    """Kind of media declared by the caller."""

    VIDEO = "video"
    AUDIO = "audio"


class Platform(str, Enum):
    """Media hosting platform detected from a URL."""

    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    SPOTIFY = "spotify"
    SOUNDCLOUD = "soundcloud"
    SUNO = "suno"
    DIRECT = "direct"


class SpotifyKind(str, Enum):
    """Spotify resource types that have an embed player."""

    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"


# Seconds skipped by the forward/backward transport buttons on native players
SKIP_SECONDS = 10

# iframe attributes for platform-controlled players
IFRAME_ALLOW = "autoplay; clipboard-write; encrypted-media; fullscreen; picture-in-picture"
IFRAME_SANDBOX = "allow-scripts allow-same-origin allow-presentation allow-popups"


@dataclass(frozen=True)
class MediaSource:
    """Operator-supplied media URL."""

    raw_url: str
    kind: MediaKind


@dataclass(frozen=True)
class ResolvedMedia:
    """Result of resolving a media URL into a renderable form."""

    raw_url: str
    kind: MediaKind
    platform: Platform
    embed_url: str
    media_id: Optional[str] = None
    spotify_kind: Optional[SpotifyKind] = None

    @property
    def is_embedded(self) -> bool:
        """True when playback is delegated to a platform iframe."""
        return self.platform != Platform.DIRECT

    @property
    def element(self) -> str:
        """HTML element the caller should render."""
        if self.is_embedded:
            return "iframe"
        return self.kind.value

    @property
    def transport_controls(self) -> bool:
        """Whether play/pause/seek/mute can be driven by the caller."""
        return not self.is_embedded
