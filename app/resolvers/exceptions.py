"""Resolver-specific exceptions."""


class ResolverError(Exception):
    """Base exception for media resolver errors."""

    pass


class UnsupportedMediaKindError(ResolverError):
    """Raised when the declared media kind is not video or audio."""

    pass


class UnresolvableMediaUrlError(ResolverError):
    """Raised in strict mode when a recognized platform URL has no extractable ID."""

    def __init__(self, url: str, platform: str):
        self.url = url
        self.platform = platform
        super().__init__(f"Could not extract a {platform} media ID from URL: {url}")
