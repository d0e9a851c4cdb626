"""Region selector parsing and region pixel extents."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from .errors import InvalidRegionBounds, InvalidRegionSyntax

FULL_REGION: Final = "full"
PCT_PREFIX: Final = "pct:"

_REAL_NUMBER_RE: Final = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Region:
    """A parsed region selector.

    `kind` is either `"full"` or `"pct"`; percentage fields are only
    meaningful for the `"pct"` kind.
    """

    kind: str = FULL_REGION
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0

    @property
    def is_full(self) -> bool:
        return self.kind == FULL_REGION

    def to_param(self) -> str:
        """Render the IIIF region parameter from the parsed coordinates."""
        if self.is_full:
            return FULL_REGION
        coords = ",".join(_format_pct(v) for v in (self.x, self.y, self.width, self.height))
        return f"{PCT_PREFIX}{coords}"


@dataclass(frozen=True)
class PixelSize:
    width: int
    height: int


def _format_pct(value: float) -> str:
    # Shortest round-trip digits, always fixed-point: IIIF has no exponent syntax
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _parse_coordinate(token: str) -> float:
    cleaned = token.strip()
    if not _REAL_NUMBER_RE.match(cleaned):
        raise InvalidRegionSyntax(
            'Invalid pct: region format. Expected "pct:x,y,width,height" with numeric values'
        )
    return float(cleaned)


def parse_region(selector: str | None) -> Region:
    """Parse `full` or `pct:x,y,width,height` into a `Region`.

    An empty or missing selector means the full image.
    """
    text = (selector or "").strip()
    if not text or text == FULL_REGION:
        return Region()

    if not text.startswith(PCT_PREFIX):
        raise InvalidRegionSyntax('Region must be "full" or in "pct:" format (e.g., "pct:20,20,50,50")')

    tokens = text[len(PCT_PREFIX) :].split(",")
    if len(tokens) != 4:
        raise InvalidRegionSyntax(
            'Invalid pct: region format. Expected "pct:x,y,width,height" with numeric values'
        )
    x, y, width, height = (_parse_coordinate(t) for t in tokens)

    if x < 0 or y < 0 or width <= 0 or height <= 0:
        raise InvalidRegionBounds("Region coordinates must be non-negative and width/height must be positive")
    if x + width > 100 or y + height > 100:
        raise InvalidRegionBounds("Region extends beyond image boundaries (coordinates must not exceed 100%)")

    return Region(kind="pct", x=x, y=y, width=width, height=height)


def region_dimensions(region: Region, image_width: int, image_height: int) -> PixelSize:
    """Return the pixel extent covered by `region` on an image of the given size."""
    if region.is_full:
        return PixelSize(image_width, image_height)

    width = math.floor((region.width / 100) * image_width)
    height = math.floor((region.height / 100) * image_height)
    return PixelSize(width, height)
