"""Media platform resolver implementations."""

from app.resolvers.base import MediaResolver, encode_uri_component
from app.resolvers.exceptions import (
    ResolverError,
    UnresolvableMediaUrlError,
    UnsupportedMediaKindError,
)
from app.resolvers.manager import ResolverManager, create_resolver_manager
from app.resolvers.soundcloud import SoundCloudResolver
from app.resolvers.spotify import SpotifyResolver
from app.resolvers.suno import SunoResolver
from app.resolvers.vimeo import VimeoResolver
from app.resolvers.youtube import YouTubeResolver

__all__ = [
    "MediaResolver",
    "ResolverManager",
    "create_resolver_manager",
    "encode_uri_component",
    "YouTubeResolver",
    "VimeoResolver",
    "SpotifyResolver",
    "SoundCloudResolver",
    "SunoResolver",
    "ResolverError",
    "UnresolvableMediaUrlError",
    "UnsupportedMediaKindError",
]
