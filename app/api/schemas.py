"""Request and response schemas for API endpoints.

This module provides Pydantic models for API request validation
and response serialization with OpenAPI examples.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from app.models.asset import MaterializedAsset
from app.models.media import (
    IFRAME_ALLOW,
    IFRAME_SANDBOX,
    SKIP_SECONDS,
    MediaKind,
    Platform,
    ResolvedMedia,
    SpotifyKind,
)


class ResolveRequest(BaseModel):
    """Request body for the media resolve endpoint."""

    url: str = Field(
        ...,
        description="Media URL as entered by the operator",
        examples=["https://www.youtube.com/watch?v=20-3SconM1k"],
    )
    kind: str = Field(..., description="Declared media kind: video or audio", examples=["video"])
    origin: Optional[str] = Field(
        None,
        description="Origin of the page that will embed the player",
        examples=["https://example-author.com"],
    )


class PlaybackResponse(BaseModel):
    """How a content page should render the media."""

    element: Literal["iframe", "video", "audio"] = Field(..., examples=["iframe"])
    src: str = Field(..., examples=["https://player.vimeo.com/video/824804225"])
    transport_controls: bool = Field(
        ...,
        description="True when play/pause/seek/mute can be driven by the page",
        examples=[False],
    )
    skip_seconds: Optional[int] = Field(None, examples=[SKIP_SECONDS])
    allow: Optional[str] = Field(None, examples=[IFRAME_ALLOW])
    sandbox: Optional[str] = Field(None, examples=[IFRAME_SANDBOX])


class ResolvedMediaResponse(BaseModel):
    """Resolved media descriptor."""

    url: str = Field(..., examples=["https://vimeo.com/824804225"])
    kind: MediaKind = Field(..., examples=["video"])
    platform: Platform = Field(..., examples=["vimeo"])
    embed_url: str = Field(..., examples=["https://player.vimeo.com/video/824804225"])
    is_embedded: bool = Field(..., examples=[True])
    media_id: Optional[str] = Field(None, examples=["824804225"])
    spotify_kind: Optional[SpotifyKind] = Field(None, examples=["track"])
    playback: PlaybackResponse

    @classmethod
    def from_resolved(cls, resolved: ResolvedMedia) -> "ResolvedMediaResponse":
        if resolved.is_embedded:
            playback = PlaybackResponse(
                element="iframe",
                src=resolved.embed_url,
                transport_controls=False,
                allow=IFRAME_ALLOW,
                sandbox=IFRAME_SANDBOX,
            )
        else:
            playback = PlaybackResponse(
                element=resolved.element,
                src=resolved.embed_url,
                transport_controls=True,
                skip_seconds=SKIP_SECONDS,
            )

        return cls(
            url=resolved.raw_url,
            kind=resolved.kind,
            platform=resolved.platform,
            embed_url=resolved.embed_url,
            is_embedded=resolved.is_embedded,
            media_id=resolved.media_id,
            spotify_kind=resolved.spotify_kind,
            playback=playback,
        )


class MaterializedAssetResponse(BaseModel):
    """Durable reference to an uploaded file."""

    file_url: str = Field(
        ...,
        description="data: URI, object storage URL, or /downloads/ reference when degraded",
        examples=["https://cdn.example.com/materials/1717171717171-activity-sheet.pdf"],
    )
    file_size: str = Field(..., examples=["1.2 MB"])
    representation: Literal["inline", "object", "degraded"] = Field(..., examples=["object"])
    storage_key: Optional[str] = Field(None, examples=["1717171717171-activity-sheet.pdf"])
    degraded: bool = Field(
        ...,
        description="True when the upload failed and file_url references nothing",
        examples=[False],
    )
    degraded_reason: Optional[str] = Field(None, examples=["Supabase upload rejected with HTTP 403"])

    @classmethod
    def from_asset(cls, asset: MaterializedAsset) -> "MaterializedAssetResponse":
        return cls(
            file_url=asset.file_url,
            file_size=asset.file_size_label,
            representation=asset.representation.value,
            storage_key=asset.storage_key,
            degraded=asset.degraded,
            degraded_reason=asset.degraded_reason,
        )


class DecodeRequest(BaseModel):
    """Request body for turning a stored data URI back into a file."""

    file_url: str = Field(..., examples=["data:image/png;base64,iVBORw0KGgo="])
    file_name: Optional[str] = Field(None, examples=["cover.png"])


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    details: Optional[Dict[str, Any]] = Field(default=None, examples=[{"backend": "local"}])


class HealthResponse(BaseModel):
    """Detailed health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    timestamp: str = Field(..., examples=["2025-12-25T10:30:00Z"])
    version: str = Field(..., examples=["1.0.0"])
    uptime_seconds: float = Field(..., examples=[3600.5])
    components: Dict[str, ComponentHealth]


class LivenessResponse(BaseModel):
    """Simple liveness check response for container orchestration."""

    status: Literal["alive"] = Field(..., examples=["alive"])


class ReadinessResponse(BaseModel):
    """Readiness check response for load balancer integration."""

    status: Literal["ready", "not_ready"] = Field(..., examples=["ready"])
    ready: bool = Field(..., examples=[True])
    message: Optional[str] = Field(default=None, examples=["Object storage not configured"])


class ErrorDetail(BaseModel):
    """Structured error response.

    All API errors follow this format with machine-readable error codes
    and optional suggestions for resolution.
    """

    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["INVALID_URL", "UNRESOLVABLE_MEDIA_URL", "FILE_TOO_LARGE"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Could not extract a vimeo media ID from URL: https://vimeo.com/channels"],
    )
    details: Optional[str] = Field(None, description="Additional error context")
    timestamp: str = Field(..., examples=["2025-12-25T10:30:00Z"])
    request_id: Optional[str] = Field(
        None,
        description="Request ID for tracing",
        examples=["req_550e8400e29b"],
    )
    suggestion: Optional[str] = Field(
        None,
        description="Suggested action to resolve the error",
        examples=["Use kind=video or kind=audio"],
    )
