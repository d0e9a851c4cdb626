"""Error taxonomy shared by the resolution engine and the tool surface."""

from __future__ import annotations


class IIIFImageError(Exception):
    """Base class for every error raised while resolving an IIIF request."""


class MissingParameter(IIIFImageError, ValueError):
    """Raised when a required input (base URI, manifest URL) is absent."""


class InvalidRegionSyntax(IIIFImageError, ValueError):
    """Raised when a region selector is neither `full` nor `pct:x,y,w,h`."""


class InvalidRegionBounds(IIIFImageError, ValueError):
    """Raised when a percentage region is negative, empty, or exceeds 100%."""


class TransportError(IIIFImageError, RuntimeError):
    """Raised on a non-success HTTP status or a failed request.

    `status` is the numeric HTTP status, or `None` when no response arrived.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class MalformedDescriptor(IIIFImageError, ValueError):
    """Raised when `info.json` is not JSON or lacks native width/height."""


class InvalidManifest(IIIFImageError, ValueError):
    """Raised when a presentation manifest is not JSON or fails the structure check."""
