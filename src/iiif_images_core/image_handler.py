from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from .config_manager import get_config_manager
from .constraints import API_V3, ConstraintSet, HandlerConfig, detect_api_version, resolve_constraints
from .errors import MissingParameter
from .fetcher import ImageData, fetch_descriptor, fetch_image_bytes, native_dimensions
from .logger import get_logger
from .region import FULL_REGION, PixelSize, parse_region, region_dimensions
from .request_builder import build_request_path, normalize_base_uri
from .sizing import fit_dimensions

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageResolution:
    """Outcome of one resolution call: the request URL and how it was derived."""

    image_url: str
    original: PixelSize
    region: PixelSize
    final: PixelSize
    api_version: str
    region_param: str
    size_param: str
    constraints: ConstraintSet
    image_data: ImageData | None = None

    def to_dict(self) -> dict[str, Any]:
        """Summarize the resolution as a JSON-ready mapping (image bytes excluded)."""
        summary: dict[str, Any] = {
            "imageUrl": self.image_url,
            "info": {
                "originalDimensions": {"width": self.original.width, "height": self.original.height},
                "regionDimensions": {"width": self.region.width, "height": self.region.height},
                "finalDimensions": {"width": self.final.width, "height": self.final.height},
                "apiVersion": self.api_version,
                "regionParam": self.region_param,
                "sizeParam": self.size_param,
                "constraints": self.constraints.to_dict(),
            },
        }
        if self.image_data is not None:
            summary["image"] = {"contentType": self.image_data.content_type, "size": self.image_data.size}
        return summary


class IIIFImageHandler:
    """Resolve IIIF Image API requests that respect server and caller size limits.

    The handler holds only its immutable `HandlerConfig`, so one instance can
    serve concurrent calls.
    """

    def __init__(self, config: HandlerConfig | None = None, *, timeout_s: float | None = None):
        self.config = config or HandlerConfig()
        self.timeout_s = timeout_s

    def generate_image_url(self, base_uri: str, fetch_image: bool = False) -> ImageResolution:
        """Resolve the full image, scaled to fit."""
        return self.generate_image_region_url(base_uri, FULL_REGION, fetch_image)

    def generate_image_region_url(
        self, base_uri: str, region: str | None = FULL_REGION, fetch_image: bool = False
    ) -> ImageResolution:
        """Resolve a `full` or `pct:x,y,w,h` region of the image at `base_uri`."""
        if not base_uri:
            raise MissingParameter("baseUri parameter is required")

        parsed_region = parse_region(region)
        clean_base = normalize_base_uri(base_uri)

        info = fetch_descriptor(clean_base, timeout_s=self.timeout_s)
        width, height = native_dimensions(info)
        api_version = detect_api_version(info)
        is_v3 = api_version == API_V3

        region_size = region_dimensions(parsed_region, width, height)
        constraints = resolve_constraints(info, region_size.width, region_size.height, is_v3, self.config)
        final = fit_dimensions(region_size.width, region_size.height, constraints, is_v3)
        request = build_request_path(
            clean_base, final.width, final.height, region_size.width, region_size.height, parsed_region, is_v3
        )
        logger.info(
            "Resolved %s [%s] region=%sx%s -> %s",
            clean_base,
            api_version,
            region_size.width,
            region_size.height,
            request.size_param,
        )

        image_data = fetch_image_bytes(request.path, timeout_s=self.timeout_s) if fetch_image else None

        return ImageResolution(
            image_url=request.path,
            original=PixelSize(width, height),
            region=region_size,
            final=final,
            api_version=api_version,
            region_param=request.region_param,
            size_param=request.size_param,
            constraints=constraints,
            image_data=image_data,
        )


@lru_cache(maxsize=1)
def get_image_handler() -> IIIFImageHandler:
    """Get the handler configured from `config.json`."""
    cm = get_config_manager()
    timeout = cm.get_setting("network.timeout_s")
    return IIIFImageHandler(HandlerConfig.from_config(cm), timeout_s=float(timeout) if timeout else None)
