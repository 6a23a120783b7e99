"""
Exceptions raised by the rectification pipeline.

Every core failure aborts the current job only. Callers that batch many
images catch ``RectificationError`` and keep going.
"""


class RectificationError(Exception):
    """Base class for all rectification failures."""


class UnusableImageError(RectificationError):
    """The binarized image has no dark pixel to anchor a corner on."""


class DegenerateGeometryError(RectificationError):
    """Control points are collinear or the projection solve is ill-conditioned."""


class InvalidGeometryError(RectificationError):
    """Output dimensions came out non-positive after the size policy."""
