"""Pytest configuration and shared fixtures"""

import os
from typing import Iterator

import pytest

from app.middleware import auth as auth_module
from app.services import storage as storage_module


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables before each test"""
    # Clear any APP_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("APP_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_globals() -> Iterator[None]:
    """Reset module-level singletons configured at startup"""
    yield
    auth_module._auth_instance = None
    storage_module._object_storage = None
