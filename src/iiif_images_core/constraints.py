"""Size-limit negotiation between an image server and the caller's ceiling.

IIIF Image API 3 declares `maxWidth`/`maxHeight`/`maxArea` at the top level
of `info.json`; API 2 carries the same fields inside an extension object of
the `profile` list. Both shapes are normalized into `ServerLimits` by one
extractor per API version, then merged with the `HandlerConfig` ceiling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from .config_manager import ConfigManager

API_V2: Final = "v2"
API_V3: Final = "v3"
DEFAULT_MAX_DIMENSION: Final = 2000

_V3_MARKER: Final = "/image/3/"
_LIMIT_KEYS: Final = ("maxWidth", "maxHeight", "maxArea")


@dataclass(frozen=True)
class HandlerConfig:
    """Caller ceiling, fixed for the lifetime of one handler."""

    max_dimension: int = DEFAULT_MAX_DIMENSION
    max_area: int | None = None

    @classmethod
    def from_config(cls, cm: ConfigManager) -> HandlerConfig:
        """Build the ceiling from `images.*` settings of a `ConfigManager`."""
        max_dimension = cm.get_optional_int("images.max_dimension")
        return cls(
            max_dimension=DEFAULT_MAX_DIMENSION if max_dimension is None else max_dimension,
            max_area=cm.get_optional_int("images.max_area"),
        )


@dataclass(frozen=True)
class ServerLimits:
    """Limits declared by the image server; `None` means "not declared"."""

    max_width: int | None = None
    max_height: int | None = None
    max_area: int | None = None


@dataclass(frozen=True)
class ConstraintSet:
    max_width: int
    max_height: int
    max_area: int | None = None

    def to_dict(self) -> dict[str, int | None]:
        return {"maxWidth": self.max_width, "maxHeight": self.max_height, "maxArea": self.max_area}


def _mentions_v3(value: Any) -> bool:
    if isinstance(value, str):
        return _V3_MARKER in value
    if isinstance(value, list):
        return any(isinstance(item, str) and _V3_MARKER in item for item in value)
    return False


def detect_api_version(info: dict[str, Any]) -> str:
    """Return `v3` when `@context` (or, failing that, `profile`) names Image API 3."""
    marker = info.get("@context") or info.get("profile")
    return API_V3 if _mentions_v3(marker) else API_V2


def _limits_from_mapping(node: dict[str, Any]) -> ServerLimits:
    return ServerLimits(
        max_width=node.get("maxWidth"),
        max_height=node.get("maxHeight"),
        max_area=node.get("maxArea"),
    )


def _v3_limits(info: dict[str, Any]) -> ServerLimits:
    return _limits_from_mapping(info)


def _v2_limits(info: dict[str, Any]) -> ServerLimits:
    profile = info.get("profile")
    entries = profile if isinstance(profile, list) else [profile]
    found: dict[str, Any] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        for key in _LIMIT_KEYS:
            if key not in found and entry.get(key) is not None:
                found[key] = entry[key]
    return _limits_from_mapping(found)


_EXTRACTORS: Final = {
    API_V3: _v3_limits,
    API_V2: _v2_limits,
}


def extract_server_limits(info: dict[str, Any], is_v3: bool) -> ServerLimits:
    """Read the declared size limits using the shape of the given API version."""
    return _EXTRACTORS[API_V3 if is_v3 else API_V2](info)


def _apply_server_limits(
    limits: ServerLimits, max_width: int, max_height: int, max_area: int
) -> tuple[int, int, int]:
    if limits.max_width is not None:
        max_width = min(max_width, limits.max_width)

    if limits.max_height is not None:
        max_height = min(max_height, limits.max_height)
    elif limits.max_width is not None:
        # An absent maxHeight means "same as maxWidth"
        max_height = min(max_height, limits.max_width)

    if limits.max_area is not None:
        max_area = min(max_area, limits.max_area)

    return max_width, max_height, max_area


def _apply_caller_ceiling(
    config: HandlerConfig, max_width: int, max_height: int, max_area: int, server_area: int | None
) -> tuple[int, int, int | None]:
    max_width = min(max_width, config.max_dimension)
    max_height = min(max_height, config.max_dimension)

    if config.max_area is None and server_area is None:
        return max_width, max_height, None
    if config.max_area is not None:
        max_area = min(max_area, config.max_area)
    return max_width, max_height, max_area


def resolve_constraints(
    info: dict[str, Any],
    region_width: int,
    region_height: int,
    is_v3: bool,
    config: HandlerConfig,
) -> ConstraintSet:
    """Merge region size, server limits, and the caller ceiling into one `ConstraintSet`.

    Values are not validated: zero or negative limits flow through and yield
    degenerate sizes downstream.
    """
    limits = extract_server_limits(info, is_v3)
    max_width, max_height, max_area = _apply_server_limits(
        limits, region_width, region_height, region_width * region_height
    )
    max_width, max_height, final_area = _apply_caller_ceiling(config, max_width, max_height, max_area, limits.max_area)
    return ConstraintSet(max_width=max_width, max_height=max_height, max_area=final_area)
