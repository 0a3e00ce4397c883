"""Middleware package for the API."""

from app.middleware.auth import APIKeyAuth, get_api_key, require_api_key
from app.middleware.request_context import RequestContextMiddleware

__all__ = [
    "APIKeyAuth",
    "get_api_key",
    "require_api_key",
    "RequestContextMiddleware",
]
