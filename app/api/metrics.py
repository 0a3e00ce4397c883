"""Prometheus scrape endpoint.

Serves the default registry in whichever exposition format the scraper asks
for: classic Prometheus text, or OpenMetrics when the Accept header names it.
"""

from typing import Optional

from fastapi import APIRouter, Header
from fastapi.responses import Response
from prometheus_client import REGISTRY
from prometheus_client.exposition import choose_encoder

router = APIRouter(tags=["monitoring"])


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics",
    description="Resolution, materialization, storage and HTTP metrics. "
    "No API key is required.",
)
async def metrics(accept: Optional[str] = Header(None)) -> Response:  # noqa: B008
    encoder, content_type = choose_encoder(accept or "")
    return Response(content=encoder(REGISTRY), media_type=content_type)
