"""Legal translation intervals for scaled content inside a viewport."""
from __future__ import annotations

from dataclasses import dataclass

from core.affine import AffineTransform2D
from core.geometry import Point, Size

__all__ = [
    "TranslationBounds",
    "clamp_translation",
    "initial_centering_offset",
    "legal_translation_bounds",
    "is_degenerate",
]

PIN_EPSILON = 1e-9


@dataclass(frozen=True)
class TranslationBounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def is_pinned_x(self) -> bool:
        return abs(self.max_x - self.min_x) < PIN_EPSILON

    @property
    def is_pinned_y(self) -> bool:
        return abs(self.max_y - self.min_y) < PIN_EPSILON

    def clamp(self, tx: float, ty: float) -> tuple[float, float]:
        """Clamp a translation into the interval; pinned axes snap to their value."""
        if self.is_pinned_x:
            x = self.min_x
        else:
            x = min(max(tx, self.min_x), self.max_x)
        if self.is_pinned_y:
            y = self.min_y
        else:
            y = min(max(ty, self.min_y), self.max_y)
        return x, y

    def contains(self, tx: float, ty: float, tol: float = 1e-9) -> bool:
        return (
            self.min_x - tol <= tx <= self.max_x + tol
            and self.min_y - tol <= ty <= self.max_y + tol
        )


def is_degenerate(content_size: Size | None) -> bool:
    return content_size is None or content_size.is_empty


def initial_centering_offset(content_size: Size, viewport_size: Size) -> Point:
    """Where the untransformed content's origin sits when laid out centered."""
    return Point(
        (viewport_size.width - content_size.width) / 2.0,
        (viewport_size.height - content_size.height) / 2.0,
    )


def _axis_bounds(content: float, viewport: float, scale: float, offset: float) -> tuple[float, float]:
    slack = viewport - content * scale
    if slack >= 0:
        pinned = slack / 2.0 - offset
        return pinned, pinned
    return slack - offset, -offset


def legal_translation_bounds(
    content_size: Size,
    viewport_size: Size,
    scale: float,
    *,
    centering: bool = True,
) -> TranslationBounds:
    """Return the translation interval keeping content legal at ``scale``.

    On each axis, content that fits is pinned to the single translation that
    centers it; overflowing content may move until its far edge meets the
    viewport edge. With ``centering`` the content's own centered layout offset
    is folded in, so the bounds are relative to the centered layout frame;
    without it they are relative to the viewport origin.
    """
    if centering:
        offset = initial_centering_offset(content_size, viewport_size)
    else:
        offset = Point(0.0, 0.0)
    min_x, max_x = _axis_bounds(content_size.width, viewport_size.width, scale, offset.x)
    min_y, max_y = _axis_bounds(content_size.height, viewport_size.height, scale, offset.y)
    return TranslationBounds(min_x, max_x, min_y, max_y)


def clamp_translation(transform: AffineTransform2D, bounds: TranslationBounds) -> AffineTransform2D:
    """Return ``transform`` with its translation clamped into ``bounds``; scale is untouched."""
    tx, ty = bounds.clamp(transform.tx, transform.ty)
    return transform.with_translation(tx, ty)
