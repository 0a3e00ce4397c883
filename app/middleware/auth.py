"""API key authentication for the admin endpoints.

Asset uploads and data URI decoding belong to the admin back office and
require an API key. Media resolution, health and metrics stay public so
content pages can call them.
"""

import hashlib
import hmac
from typing import FrozenSet, List, Optional, Set

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

logger = structlog.get_logger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"

# FastAPI security scheme for OpenAPI docs
api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


def hash_api_key(api_key: Optional[str]) -> str:
    """
    Create a safe hash of an API key for logging.

    Args:
        api_key: The API key to hash

    Returns:
        SHA256 hash prefix (first 8 characters), or "none"
    """
    if not api_key:
        return "none"
    return hashlib.sha256(api_key.encode()).hexdigest()[:8]


class APIKeyAuth:
    """API key authentication handler.

    Validates keys against a configured list. An empty list disables
    authentication entirely.
    """

    DEFAULT_PUBLIC_PATHS: FrozenSet[str] = frozenset(
        {
            "/health",
            "/liveness",
            "/readiness",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/metrics",
            "/api/v1/media",
        }
    )

    def __init__(
        self,
        api_keys: Optional[List[str]] = None,
        public_paths: Optional[Set[str]] = None,
    ):
        """
        Initialize API key authentication.

        Args:
            api_keys: Valid API keys. Empty list allows all requests.
            public_paths: Paths (and their sub-paths) that skip authentication.
        """
        self._api_keys: Set[str] = set(api_keys) if api_keys else set()
        self._public_paths = frozenset(public_paths or self.DEFAULT_PUBLIC_PATHS)

        if self.allow_all:
            logger.warning("No API keys configured, authentication is disabled", component="auth")
        else:
            logger.info("API key authentication initialized", num_keys=len(self._api_keys))

    @property
    def allow_all(self) -> bool:
        """Check if authentication is disabled."""
        return not self._api_keys

    @property
    def public_paths(self) -> Set[str]:
        return set(self._public_paths)

    def is_path_public(self, path: str) -> bool:
        """
        Check if a path skips authentication.

        Prefix matches only count at a path separator, so /metrics does not
        open /metrics_admin.
        """
        path = path.rstrip("/") or "/"
        return any(path == public or path.startswith(public + "/") for public in self._public_paths)

    def validate_api_key(self, api_key: Optional[str]) -> bool:
        if self.allow_all:
            return True
        if not api_key:
            return False
        return any(hmac.compare_digest(api_key, valid) for valid in self._api_keys)

    def authenticate(self, request: Request, api_key: Optional[str]) -> None:
        """
        Authenticate a request.

        Args:
            request: The FastAPI request
            api_key: The API key from header

        Raises:
            HTTPException: If authentication fails
        """
        path = request.url.path

        if self.is_path_public(path):
            return

        if self.validate_api_key(api_key):
            logger.debug("API key authentication successful", path=path, key_hash=hash_api_key(api_key))
            return

        logger.warning(
            "API key authentication failed",
            path=path,
            key_hash=hash_api_key(api_key),
            client_ip=request.client.host if request.client else "unknown",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )


# Global auth instance (configured at startup)
_auth_instance: Optional[APIKeyAuth] = None


def configure_auth(api_keys: Optional[List[str]] = None) -> APIKeyAuth:
    """Configure the global auth instance."""
    global _auth_instance
    _auth_instance = APIKeyAuth(api_keys=api_keys)
    return _auth_instance


def get_auth() -> APIKeyAuth:
    """Get the global auth instance, or an open one if none was configured."""
    if _auth_instance is None:
        return APIKeyAuth()
    return _auth_instance


async def get_api_key(
    request: Request,
    api_key: Optional[str] = Depends(api_key_header),  # noqa: B008
) -> Optional[str]:
    """Extract and validate the API key of a request.

    Raises:
        HTTPException: If authentication fails
    """
    get_auth().authenticate(request, api_key)
    return api_key


def require_api_key(
    api_key: Optional[str] = Depends(get_api_key),  # noqa: B008
) -> Optional[str]:
    """Route dependency for admin endpoints.

    Returns the validated key, or None when authentication is disabled.
    """
    return api_key
