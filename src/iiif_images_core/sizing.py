"""Proportional downscaling of a region to fit a `ConstraintSet`."""

from __future__ import annotations

import math

from .constraints import ConstraintSet
from .region import PixelSize


def fit_dimensions(width: int, height: int, constraints: ConstraintSet, is_v3: bool) -> PixelSize:
    """Return the largest proportional size within `constraints`, never upscaling.

    Width and height are fitted with one linear scale, truncated. On Image
    API 3 an area bound is then enforced with a second `sqrt` correction,
    truncated again. API 2 has no area semantics, so the second pass is
    skipped there even if a figure is present.
    """
    if width <= 0 or height <= 0:
        return PixelSize(0, 0)

    scale = min(constraints.max_width / width, constraints.max_height / height, 1.0)
    scale = max(scale, 0.0)
    target_width = math.floor(width * scale)
    target_height = math.floor(height * scale)

    if is_v3 and constraints.max_area is not None:
        current_area = target_width * target_height
        if current_area > 0 and current_area > constraints.max_area:
            area_scale = math.sqrt(max(constraints.max_area, 0) / current_area)
            target_width = math.floor(target_width * area_scale)
            target_height = math.floor(target_height * area_scale)

    return PixelSize(target_width, target_height)
