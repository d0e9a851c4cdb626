"""Size-aware IIIF Image API request resolution."""

__version__ = "1.0.0"

from .constraints import ConstraintSet, HandlerConfig, detect_api_version, resolve_constraints  # noqa: E402
from .errors import (  # noqa: E402
    IIIFImageError,
    InvalidManifest,
    InvalidRegionBounds,
    InvalidRegionSyntax,
    MalformedDescriptor,
    MissingParameter,
    TransportError,
)
from .image_handler import IIIFImageHandler, ImageResolution, get_image_handler  # noqa: E402
from .region import Region, parse_region, region_dimensions  # noqa: E402
from .request_builder import build_request_path  # noqa: E402
from .sizing import fit_dimensions  # noqa: E402

__all__ = [
    "ConstraintSet",
    "HandlerConfig",
    "IIIFImageError",
    "IIIFImageHandler",
    "ImageResolution",
    "InvalidManifest",
    "InvalidRegionBounds",
    "InvalidRegionSyntax",
    "MalformedDescriptor",
    "MissingParameter",
    "Region",
    "TransportError",
    "__version__",
    "build_request_path",
    "detect_api_version",
    "fit_dimensions",
    "get_image_handler",
    "parse_region",
    "region_dimensions",
    "resolve_constraints",
]
