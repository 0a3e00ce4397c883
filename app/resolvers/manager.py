"""Resolver manager for registration and URL classification."""

from typing import Callable, Dict, List, Optional, Union

import structlog

from app.core.config import EmbedConfig
from app.core.metrics import MetricsCollector
from app.models.media import MediaKind, MediaSource, Platform, ResolvedMedia
from app.resolvers.base import MediaResolver
from app.resolvers.exceptions import UnsupportedMediaKindError
from app.resolvers.soundcloud import SoundCloudResolver
from app.resolvers.spotify import SpotifyResolver
from app.resolvers.suno import SunoResolver
from app.resolvers.vimeo import VimeoResolver
from app.resolvers.youtube import YouTubeResolver

logger = structlog.get_logger(__name__)

OriginProvider = Callable[[], str]


def no_origin() -> str:
    """Origin provider for contexts without an embedding page."""
    return ""


class ResolverManager:
    """Manages media resolver registration and platform selection.

    Resolvers are tried in registration order within their media kind; the
    first one whose URL test matches wins. URLs no enabled resolver claims are
    treated as direct media files.
    """

    def __init__(self, origin_provider: Optional[OriginProvider] = None, strict: bool = False):
        """
        Initialize the resolver manager.

        Args:
            origin_provider: Callable returning the embedding page origin
            strict: Reject recognized URLs whose media ID can't be extracted
        """
        self._resolvers: Dict[MediaKind, List[MediaResolver]] = {kind: [] for kind in MediaKind}
        self._enabled: Dict[Platform, bool] = {}
        self.origin_provider = origin_provider or no_origin
        self.strict = strict

    def register_resolver(self, resolver: MediaResolver, enabled: bool = True) -> None:
        """
        Register a platform resolver.

        Args:
            resolver: Resolver instance
            enabled: Whether the resolver takes part in classification
        """
        self._resolvers[resolver.kind].append(resolver)
        self._enabled[resolver.platform] = enabled

        logger.info(
            "Resolver registered",
            platform=resolver.platform.value,
            kind=resolver.kind.value,
            enabled=enabled,
        )

    def enable_resolver(self, platform: Union[Platform, str]) -> None:
        """
        Enable a registered resolver.

        Raises:
            ValueError: If no resolver is registered for the platform
        """
        platform = self._registered_platform(platform)
        self._enabled[platform] = True
        logger.info("Resolver enabled", platform=platform.value)

    def disable_resolver(self, platform: Union[Platform, str]) -> None:
        """
        Disable a registered resolver.

        Raises:
            ValueError: If no resolver is registered for the platform
        """
        platform = self._registered_platform(platform)
        self._enabled[platform] = False
        logger.info("Resolver disabled", platform=platform.value)

    def is_resolver_enabled(self, platform: Union[Platform, str]) -> bool:
        try:
            return self._enabled.get(Platform(platform), False)
        except ValueError:
            return False

    def list_resolvers(self) -> Dict[str, bool]:
        """
        List all registered resolvers and their status.

        Returns:
            Dictionary mapping platform names to enabled status
        """
        return {platform.value: enabled for platform, enabled in self._enabled.items()}

    def resolve(
        self,
        raw_url: str,
        kind: Union[MediaKind, str],
        origin: Optional[str] = None,
    ) -> ResolvedMedia:
        """
        Classify a URL and produce its renderable form.

        Args:
            raw_url: Operator-supplied URL, any format
            kind: Declared media kind ("video" or "audio")
            origin: Embedding page origin; falls back to the origin provider

        Returns:
            Resolved media descriptor; unrecognized URLs resolve as direct

        Raises:
            UnsupportedMediaKindError: If kind is neither video nor audio
            UnresolvableMediaUrlError: In strict mode, for URLs without an extractable ID
        """
        media_kind = self._coerce_kind(kind)
        if origin is None:
            origin = self.origin_provider()

        resolver = self._select_resolver(raw_url, media_kind)
        if resolver is None:
            resolved = ResolvedMedia(
                raw_url=raw_url,
                kind=media_kind,
                platform=Platform.DIRECT,
                embed_url=raw_url,
            )
        else:
            resolved = resolver.resolve(raw_url, origin=origin, strict=self.strict)

        best_effort = resolved.is_embedded and resolved.media_id is None
        MetricsCollector.record_resolution(
            platform=resolved.platform.value,
            kind=media_kind.value,
            outcome="best_effort" if best_effort else "resolved",
        )
        logger.debug(
            "media_resolved",
            url=raw_url,
            kind=media_kind.value,
            platform=resolved.platform.value,
            embed_url=resolved.embed_url,
        )

        return resolved

    def resolve_source(self, source: MediaSource, origin: Optional[str] = None) -> ResolvedMedia:
        """Resolve a MediaSource value."""
        return self.resolve(source.raw_url, source.kind, origin=origin)

    def _select_resolver(self, url: str, kind: MediaKind) -> Optional[MediaResolver]:
        for resolver in self._resolvers[kind]:
            if not self._enabled.get(resolver.platform, False):
                continue

            try:
                if resolver.matches(url):
                    logger.debug("Resolver selected for URL", platform=resolver.platform.value)
                    return resolver
            except Exception as e:
                # Isolate resolver errors - one broken matcher must not block the others
                logger.warning(
                    "Resolver match error",
                    platform=resolver.platform.value,
                    url=url,
                    error=str(e),
                )
                continue

        return None

    def _registered_platform(self, platform: Union[Platform, str]) -> Platform:
        try:
            platform = Platform(platform)
        except ValueError:
            raise ValueError(f"Resolver '{platform}' is not registered") from None
        if platform not in self._enabled:
            raise ValueError(f"Resolver '{platform.value}' is not registered")
        return platform

    @staticmethod
    def _coerce_kind(kind: Union[MediaKind, str]) -> MediaKind:
        try:
            return MediaKind(kind)
        except ValueError:
            raise UnsupportedMediaKindError(
                f"Unsupported media kind: {kind!r}. Expected 'video' or 'audio'."
            ) from None


def create_resolver_manager(
    config: Optional[EmbedConfig] = None,
    origin_provider: Optional[OriginProvider] = None,
) -> ResolverManager:
    """
    Build a manager with every platform registered in classification order.

    Args:
        config: Embed configuration (strict mode, disabled platforms, default origin)
        origin_provider: Overrides the configured default origin

    Returns:
        Configured ResolverManager
    """
    config = config or EmbedConfig()

    if origin_provider is None:
        default_origin = config.default_origin

        def origin_provider() -> str:
            return default_origin

    manager = ResolverManager(origin_provider=origin_provider, strict=config.strict)

    # Registration order is classification order within each kind
    for resolver in (
        YouTubeResolver(),
        VimeoResolver(),
        SpotifyResolver(),
        SoundCloudResolver(),
        SunoResolver(),
    ):
        enabled = resolver.platform.value not in config.disabled_platforms
        manager.register_resolver(resolver, enabled=enabled)

    return manager
