"""Asset upload endpoints for the admin back office.

Uploaded images come back as data URIs; other files are written to object
storage. Both endpoints require an API key.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response

from app.api.schemas import DecodeRequest, MaterializedAssetResponse
from app.core.config import StorageConfig
from app.core.errors import APIError, ErrorCode
from app.middleware.auth import require_api_key
from app.models.asset import AssetCategory, UploadTarget
from app.services.downloads import content_disposition, decode_data_uri, filename_from_data_uri
from app.services.materializer import AssetMaterializer, format_size

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/v1/assets",
    tags=["assets"],
    dependencies=[Depends(require_api_key)],
)

DESTINATION_PATTERN = r"^[a-z0-9_-]+$"


def _too_large(file_name: str, size: int, limit: int) -> APIError:
    return APIError(
        ErrorCode.FILE_TOO_LARGE,
        f"File '{file_name}' is {format_size(size)}",
        details=f"Maximum upload size is {format_size(limit)}",
    )


# Dependency placeholders
async def get_materializer() -> AssetMaterializer:
    """Get asset materializer instance."""
    raise NotImplementedError("Asset materializer dependency not configured")


async def get_storage_config() -> StorageConfig:
    """Get storage configuration."""
    raise NotImplementedError("Storage configuration dependency not configured")


@router.post(
    "",
    response_model=MaterializedAssetResponse,
    responses={
        401: {"description": "Invalid or missing API key"},
        413: {"description": "File exceeds the maximum upload size"},
        422: {"description": "Image could not be read"},
    },
)
async def upload_asset(
    file: UploadFile = File(...),  # noqa: B008
    category: AssetCategory = Form(AssetCategory.OTHER),  # noqa: B008
    destination: Optional[str] = Form(None, pattern=DESTINATION_PATTERN),  # noqa: B008
    materializer: AssetMaterializer = Depends(get_materializer),  # noqa: B008
    storage_config: StorageConfig = Depends(get_storage_config),  # noqa: B008
) -> MaterializedAssetResponse:
    """
    Upload a file and get back a durable reference to it.

    A storage failure does not fail the request: the response is flagged
    as degraded and file_url points at a /downloads/ path that holds nothing.
    """
    file_name = file.filename or "file"
    limit = storage_config.max_upload_size

    if file.size is not None and file.size > limit:
        raise _too_large(file_name, file.size, limit)

    # Never buffer more than one byte past the limit
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise _too_large(file_name, len(data), limit)

    target = UploadTarget.from_bytes(
        name=file_name,
        data=data,
        mime_type=file.content_type or None,
        category=category,
        destination_hint=destination or storage_config.default_bucket,
    )

    logger.info(
        "asset_upload_requested",
        file_name=target.name,
        mime_type=target.mime_type,
        size_bytes=target.size_bytes,
        category=target.category.value,
        destination=target.destination_hint,
    )

    asset = await materializer.materialize(target)
    return MaterializedAssetResponse.from_asset(asset)


@router.post(
    "/decode",
    response_class=Response,
    responses={
        200: {"description": "Decoded file as an attachment"},
        400: {"description": "Not a base64 data URI"},
        401: {"description": "Invalid or missing API key"},
    },
)
async def decode_asset(request: DecodeRequest) -> Response:
    """
    Turn an inline data URI back into a downloadable file.

    Object storage URLs are already downloadable and are rejected here.
    """
    if not request.file_url.startswith("data:"):
        raise APIError(
            ErrorCode.INVALID_URL,
            "Only data: URIs can be decoded",
            suggestion="Download object storage URLs directly",
        )

    mime_type, data = decode_data_uri(request.file_url)
    file_name = request.file_name or filename_from_data_uri(request.file_url)

    logger.info("asset_decoded", mime_type=mime_type, size_bytes=len(data), file_name=file_name)

    return Response(
        content=data,
        media_type=mime_type,
        headers={"Content-Disposition": content_disposition(file_name)},
    )
