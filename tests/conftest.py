"""Test bootstrap.

Ensures `src/` is importable, isolates config and logging per test, and
provides a fake HTTP layer for the fetcher.
"""

from __future__ import annotations

import contextlib
import copy
import io
import json
import sys
import tempfile
from pathlib import Path

import pytest
import requests
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _close_handlers(logger_mod):
    for handler in list(logger_mod.app_logger.handlers):
        logger_mod.app_logger.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()


def pytest_configure():
    """Redirect session logging to a temporary folder before test collection."""
    from iiif_images_core import logger as logger_mod
    from iiif_images_core.config_manager import get_config_manager

    session_logs_dir = Path(tempfile.mkdtemp(prefix="iiif-images-pytest-logs-")) / "logs"
    session_logs_dir.mkdir(parents=True, exist_ok=True)
    get_config_manager().data.setdefault("paths", {})["logs_dir"] = str(session_logs_dir)

    logger_mod.LOG_BASE_DIR = session_logs_dir
    _close_handlers(logger_mod)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Reset settings to defaults and rebuild the cached handler for every test."""
    from iiif_images_core import logger as logger_mod
    from iiif_images_core.config_manager import DEFAULT_CONFIG_JSON, get_config_manager
    from iiif_images_core.image_handler import get_image_handler

    cm = get_config_manager()
    original = copy.deepcopy(cm.data)
    cm.data.clear()
    cm.data.update(copy.deepcopy(DEFAULT_CONFIG_JSON))
    cm.data["paths"]["logs_dir"] = str(tmp_path / "logs")

    _close_handlers(logger_mod)
    monkeypatch.setattr(logger_mod, "LOG_BASE_DIR", tmp_path / "logs")
    logger_mod.setup_logging()

    get_image_handler.cache_clear()
    yield
    get_image_handler.cache_clear()
    cm.data.clear()
    cm.data.update(original)


def make_response(
    url: str,
    status: int = 200,
    *,
    body: bytes | str | None = None,
    json_body=None,
    content_type: str | None = None,
    reason: str = "",
) -> requests.Response:
    """Build a real `requests.Response` without touching the network."""
    response = requests.Response()
    response.url = url
    response.status_code = status
    response.reason = reason or ("OK" if status < 400 else "Error")
    if json_body is not None:
        body = json.dumps(json_body)
        content_type = content_type or "application/json"
    if isinstance(body, str):
        body = body.encode("utf-8")
    response._content = body or b""
    response.encoding = "utf-8"
    if content_type:
        response.headers["Content-Type"] = content_type
    return response


def jpeg_bytes(width: int = 8, height: int = 6) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (200, 180, 120)).save(buf, format="JPEG", quality=80)
    return buf.getvalue()


class FakeHTTP:
    """Route table standing in for `requests.get` inside the fetcher."""

    def __init__(self):
        self.routes: dict[str, requests.Response | Exception] = {}
        self.calls: list[str] = []

    def add(self, url: str, **kwargs) -> None:
        self.routes[url] = make_response(url, **kwargs)

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    def get(self, url, timeout=None, **_kwargs):
        self.calls.append(url)
        outcome = self.routes.get(url)
        if outcome is None:
            return make_response(url, 404, body="not found", reason="Not Found")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_http(monkeypatch):
    """Replace outbound GETs with a `FakeHTTP` route table."""
    fake = FakeHTTP()
    monkeypatch.setattr("iiif_images_core.fetcher.requests.get", fake.get)
    return fake
