"""MCP tool surface over the IIIF image resolution engine.

Tools:
- fetch_iiif_manifest: fetch and sanity-check a presentation manifest
- fetch_iiif_image: fetch a whole image, scaled to fit the configured ceiling
- fetch_iiif_image_region: fetch a `pct:` region, scaled the same way

Blocking HTTP calls run in worker threads, one per tool invocation.
"""

from __future__ import annotations

import json
from functools import partial
from typing import Final

import anyio
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import BlobResourceContents, EmbeddedResource, TextContent

from iiif_images_core.errors import IIIFImageError, MissingParameter
from iiif_images_core.image_handler import ImageResolution, get_image_handler
from iiif_images_core.logger import get_logger
from iiif_images_core.manifest import fetch_manifest

logger = get_logger(__name__)

SERVER_NAME: Final = "mcp-iiif-images"

_MANIFEST_PREFIX: Final = "Failed to fetch IIIF manifest"
_IMAGE_PREFIX: Final = "Failed to fetch IIIF image"
_REGION_PREFIX: Final = "Failed to fetch IIIF image region"


def _as_tool_error(prefix: str, exc: IIIFImageError) -> ToolError:
    logger.warning("%s: %s", prefix, exc)
    return ToolError(f"{prefix}: {exc}")


def _image_resource(result: ImageResolution) -> EmbeddedResource:
    image = result.image_data
    if image is None:
        raise ValueError("resolution carries no image bytes")
    return EmbeddedResource(
        type="resource",
        resource=BlobResourceContents(uri=result.image_url, mimeType=image.content_type, blob=image.base64),
    )


async def fetch_iiif_manifest(url: str) -> TextContent:
    """Fetch and validate a IIIF manifest from a URL."""
    try:
        fetch = partial(fetch_manifest, url, timeout_s=get_image_handler().timeout_s)
        document = await anyio.to_thread.run_sync(fetch)
    except IIIFImageError as exc:
        raise _as_tool_error(_MANIFEST_PREFIX, exc) from exc
    return TextContent(type="text", text=json.dumps(document, indent=2, ensure_ascii=False))


async def fetch_iiif_image(baseUri: str) -> EmbeddedResource:  # noqa: N803
    """Retrieve a IIIF image from a base URI, scaled to the configured long-edge ceiling."""
    try:
        resolve = partial(get_image_handler().generate_image_url, baseUri, fetch_image=True)
        result = await anyio.to_thread.run_sync(resolve)
    except IIIFImageError as exc:
        raise _as_tool_error(_IMAGE_PREFIX, exc) from exc
    return _image_resource(result)


async def fetch_iiif_image_region(baseUri: str, region: str) -> EmbeddedResource:  # noqa: N803
    """Retrieve a percentage region of a IIIF image, scaled to the configured ceiling."""
    try:
        if not region:
            raise MissingParameter("region parameter is required")
        resolve = partial(get_image_handler().generate_image_region_url, baseUri, region, fetch_image=True)
        result = await anyio.to_thread.run_sync(resolve)
    except IIIFImageError as exc:
        raise _as_tool_error(_REGION_PREFIX, exc) from exc
    return _image_resource(result)


def _ceiling_text() -> str:
    return f"{get_image_handler().config.max_dimension}px"


def create_server() -> FastMCP:
    """Build the FastMCP server and register the three IIIF tools."""
    mcp = FastMCP(SERVER_NAME)
    ceiling = _ceiling_text()

    mcp.tool(
        name="fetch_iiif_manifest",
        description="Fetch and validate a IIIF manifest from a URL",
        output_schema=None,
    )(fetch_iiif_manifest)
    mcp.tool(
        name="fetch_iiif_image",
        description=(
            "Retrieve a IIIF image from a base URI (without /info.json), fetching info.json and "
            f"returning the image data up to {ceiling} on the long edge"
        ),
        output_schema=None,
    )(fetch_iiif_image)
    mcp.tool(
        name="fetch_iiif_image_region",
        description=(
            "Retrieve a specific region of a IIIF image using percentage coordinates "
            "(e.g. 'pct:20,20,50,50' for x,y,width,height), with the region scaled to fit within "
            f"{ceiling} on the long edge. Use this to fetch regions of interest at higher detail "
            "for more accurate image description and analysis."
        ),
        output_schema=None,
    )(fetch_iiif_image_region)
    return mcp


def run_server(*, http: bool = False, host: str = "127.0.0.1", port: int = 3000) -> None:
    """Serve over stdio, or over HTTP/SSE when `http` is set."""
    mcp = create_server()
    if http:
        logger.info("MCP IIIF Images server listening on http://%s:%s/sse", host, port)
        mcp.run(transport="sse", host=host, port=port, show_banner=False)
    else:
        mcp.run(show_banner=False)
