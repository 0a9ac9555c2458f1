"""Shared fixtures for cargox tests."""

import pytest

from common import http_client
from constants import Constants


@pytest.fixture(autouse=True)
def _isolate_runtime(monkeypatch):
    """Keep env and Constants tweaks from leaking between tests."""
    for name in (Constants.ENV_INSTALL_DIR, Constants.ENV_REGISTRY_URL,
                 Constants.ENV_CONFIG, Constants.ENV_LOG_LEVEL):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(Constants, "REQUEST_TIMEOUT", Constants.REQUEST_TIMEOUT)
    monkeypatch.setattr(Constants, "HTTP_RETRY_MAX", Constants.HTTP_RETRY_MAX)
    http_client.clear_cache()
    yield
    http_client.clear_cache()


@pytest.fixture
def install_root(tmp_path):
    """An existing, empty managed install root."""
    root = tmp_path / "cargox-root"
    root.mkdir()
    return root
