"""IIIF Image API request path assembly.

`{base}/{region}/{size}/{rotation}/{quality}.{format}`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .region import Region

FULL_SIZE_V2: Final = "full"
FULL_SIZE_V3: Final = "max"
ROTATION: Final = "0"
QUALITY_FORMAT: Final = "default.jpg"


@dataclass(frozen=True)
class ImageRequest:
    size_param: str
    region_param: str
    path: str


def size_parameter(target_width: int, target_height: int, native_width: int, native_height: int, is_v3: bool) -> str:
    """Use the full-size keyword only when no scaling happened, else a forced `w,h` pair."""
    if target_width == native_width and target_height == native_height:
        return FULL_SIZE_V3 if is_v3 else FULL_SIZE_V2
    return f"{target_width},{target_height}"


def normalize_base_uri(base_uri: str) -> str:
    """Strip trailing separators so `{base}/info.json` never doubles the slash."""
    return (base_uri or "").strip().rstrip("/")


def build_request_path(
    base_uri: str,
    target_width: int,
    target_height: int,
    native_width: int,
    native_height: int,
    region: Region,
    is_v3: bool,
) -> ImageRequest:
    """Assemble the region, size and full request path for one image.

    `native_width`/`native_height` are the pixel extent of the *region*, so a
    small region requested unscaled still gets the full-size keyword.
    """
    region_param = region.to_param()
    size_param = size_parameter(target_width, target_height, native_width, native_height, is_v3)
    path = "/".join((normalize_base_uri(base_uri), region_param, size_param, ROTATION, QUALITY_FORMAT))
    return ImageRequest(size_param=size_param, region_param=region_param, path=path)
