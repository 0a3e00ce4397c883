"""Media resolution endpoints.

Public endpoints used by content pages and admin forms to turn a stored
media URL into an embeddable player descriptor.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Header, Query

from app.api.schemas import ResolvedMediaResponse, ResolveRequest
from app.core.errors import APIError, ErrorCode
from app.resolvers.manager import ResolverManager

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/media", tags=["media"])


# Dependency placeholder for resolver manager
async def get_resolver_manager() -> ResolverManager:
    """Get resolver manager instance."""
    raise NotImplementedError("Resolver manager dependency not configured")


def _resolve(
    manager: ResolverManager,
    url: str,
    kind: str,
    origin: Optional[str],
) -> ResolvedMediaResponse:
    # Blank input is rejected; otherwise the URL is resolved exactly as stored
    if not url.strip():
        raise APIError(ErrorCode.INVALID_URL, "Media URL must not be empty")

    resolved = manager.resolve(url, kind, origin=origin)

    logger.info(
        "media_resolve_completed",
        platform=resolved.platform.value,
        kind=resolved.kind.value,
        is_embedded=resolved.is_embedded,
    )
    return ResolvedMediaResponse.from_resolved(resolved)


@router.get(
    "/resolve",
    response_model=ResolvedMediaResponse,
    responses={
        400: {"description": "Empty URL or invalid media kind"},
        422: {"description": "Unresolvable media URL (strict mode only)"},
    },
)
async def resolve_media(
    url: str = Query(..., description="Media URL"),  # noqa: B008
    kind: str = Query(..., description="Media kind: video or audio"),  # noqa: B008
    origin: Optional[str] = Header(None),  # noqa: B008
    manager: ResolverManager = Depends(get_resolver_manager),  # noqa: B008
) -> ResolvedMediaResponse:
    """
    Resolve a media URL into its embeddable form.

    The Origin header of the calling page is used for players that need it
    (YouTube); without it the configured default origin applies.
    """
    logger.info("media_resolve_requested", url=url, kind=kind)
    return _resolve(manager, url, kind, origin)


@router.post(
    "/resolve",
    response_model=ResolvedMediaResponse,
    responses={
        400: {"description": "Empty URL or invalid media kind"},
        422: {"description": "Invalid request or unresolvable media URL"},
    },
)
async def resolve_media_body(
    request: ResolveRequest,
    origin: Optional[str] = Header(None),  # noqa: B008
    manager: ResolverManager = Depends(get_resolver_manager),  # noqa: B008
) -> ResolvedMediaResponse:
    """
    Resolve a media URL supplied in a JSON body.

    An explicit origin in the body wins over the Origin header.
    """
    logger.info("media_resolve_requested", url=request.url, kind=request.kind)
    return _resolve(manager, request.url, request.kind, request.origin or origin)
