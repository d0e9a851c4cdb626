"""Presentation manifest retrieval with a light structural check.

This is not a Presentation API validator: it only confirms the document
declares a presentation `@context` and a Manifest type.
"""

from __future__ import annotations

from typing import Any, Final

from .errors import InvalidManifest, MissingParameter
from .fetcher import http_get
from .logger import get_logger, summarize_for_debug

logger = get_logger(__name__)

PRESENTATION_CONTEXT_PREFIX: Final = "http://iiif.io/api/presentation/"


def _has_presentation_context(context: Any) -> bool:
    if isinstance(context, str):
        return context.startswith(PRESENTATION_CONTEXT_PREFIX)
    if isinstance(context, list):
        return any(isinstance(ctx, str) and ctx.startswith(PRESENTATION_CONTEXT_PREFIX) for ctx in context)
    return False


def validate_manifest(document: Any) -> dict[str, Any]:
    """Return `document` unchanged when it looks like a IIIF v2 or v3 manifest."""
    if not isinstance(document, dict):
        raise InvalidManifest("Invalid IIIF manifest: expected a JSON object")

    context = document.get("@context")
    if not context:
        raise InvalidManifest("Invalid IIIF manifest: missing @context property")
    if not _has_presentation_context(context):
        raise InvalidManifest("Invalid IIIF manifest: @context must contain a IIIF presentation API URL")

    if document.get("@type") != "sc:Manifest" and document.get("type") != "Manifest":
        raise InvalidManifest("Invalid IIIF manifest: must have @type of 'sc:Manifest' or type of 'Manifest'")
    return document


def fetch_manifest(url: str, *, timeout_s: float | None = None) -> dict[str, Any]:
    """Fetch a presentation manifest and run `validate_manifest` on it."""
    if not url:
        raise MissingParameter("URL parameter is required")

    response = http_get(url, timeout_s=timeout_s)

    content_type = response.headers.get("content-type")
    if not content_type or "application/json" not in content_type:
        logger.warning("Content-Type is %s, expected application/json (%s)", content_type, url)

    try:
        document = response.json()
    except ValueError as exc:
        logger.debug("Manifest preview: %s", summarize_for_debug(response.text))
        raise InvalidManifest(f"Invalid JSON: {exc}") from exc

    return validate_manifest(document)
