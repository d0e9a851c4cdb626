"""Network boundary: `info.json` descriptors, image bytes, and manifests.

Each call is a single blocking GET. Nothing is retried; the first failure is
raised to the caller.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Final

import requests
from requests import RequestException

from .errors import MalformedDescriptor, TransportError
from .logger import get_logger, summarize_for_debug
from .request_builder import normalize_base_uri

logger = get_logger(__name__)

DEFAULT_IMAGE_CONTENT_TYPE: Final = "image/jpeg"


@dataclass(frozen=True)
class ImageData:
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


def http_get(url: str, *, timeout_s: float | None = None) -> requests.Response:
    """GET `url` once and raise `TransportError` unless the status is 2xx."""
    logger.debug("GET %s", url)
    try:
        response = requests.get(url, timeout=timeout_s)
    except RequestException as exc:
        logger.error("Request to %s failed: %s", url, exc)
        raise TransportError(f"Request failed: {exc}") from exc

    if not response.ok:
        logger.error("HTTP %s from %s", response.status_code, url)
        raise TransportError(f"HTTP {response.status_code}: {response.reason}", status=response.status_code)
    return response


def native_dimensions(info: dict[str, Any]) -> tuple[int, int]:
    """Return the declared `(width, height)` of a descriptor as integers."""
    try:
        width = int(info.get("width") or 0)
        height = int(info.get("height") or 0)
    except (TypeError, ValueError) as exc:
        raise MalformedDescriptor(f"Invalid width or height in info.json: {exc}") from exc

    if not width or not height:
        raise MalformedDescriptor("Missing width or height in info.json")
    return width, height


def descriptor_url(base_uri: str) -> str:
    return f"{normalize_base_uri(base_uri)}/info.json"


def fetch_descriptor(base_uri: str, *, timeout_s: float | None = None) -> dict[str, Any]:
    """Fetch and decode `{base_uri}/info.json`.

    Raises `MalformedDescriptor` when the body is not a JSON object or does
    not declare a non-zero `width` and `height`.
    """
    url = descriptor_url(base_uri)
    response = http_get(url, timeout_s=timeout_s)

    try:
        info = response.json()
    except ValueError as exc:
        logger.debug("Descriptor preview: %s", summarize_for_debug(response.text))
        raise MalformedDescriptor(f"Invalid JSON in info.json: {exc}") from exc

    if not isinstance(info, dict):
        raise MalformedDescriptor("Invalid JSON in info.json: expected an object")
    width, height = native_dimensions(info)
    logger.info("Fetched descriptor %s (%sx%s)", url, width, height)
    return info


def fetch_image_bytes(image_url: str, *, timeout_s: float | None = None) -> ImageData:
    """Download the image at `image_url`, trusting the server's content type."""
    try:
        response = http_get(image_url, timeout_s=timeout_s)
    except TransportError as exc:
        raise TransportError(f"Failed to fetch image: {exc}", status=exc.status) from exc

    content_type = response.headers.get("content-type") or DEFAULT_IMAGE_CONTENT_TYPE
    image = ImageData(content_type=content_type, data=response.content)
    logger.info("Fetched %s bytes (%s) from %s", image.size, content_type, image_url)
    return image
