"""Minimal 2D affine transform used by the zoom/pan engine.

Coefficients follow the CoreGraphics/``QTransform`` layout::

    x' = a * x + c * y + tx
    y' = b * x + d * y + ty

so a value can be handed to ``QtGui.QTransform(a, b, c, d, tx, ty)`` as is.
Composition is done on the equivalent 3x3 column-vector matrix::

    [[a, c, tx],
     [b, d, ty],
     [0, 0, 1 ]]

``t.composed(u)`` is ``t`` applied after ``u`` (``p -> t(u(p))``), i.e. the
matrix product ``t @ u``. ``scaled`` and ``translated`` act in the transform's
own (pre-transform) space: ``t.translated(dx, dy) == t.composed(translation(dx, dy))``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from core.geometry import Point

__all__ = ["AffineTransform2D", "anchored_rescale"]


@dataclass(frozen=True)
class AffineTransform2D:
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    # ----- constructors -----

    @classmethod
    def identity(cls) -> "AffineTransform2D":
        return cls()

    @classmethod
    def translation(cls, dx: float, dy: float) -> "AffineTransform2D":
        return cls(tx=float(dx), ty=float(dy))

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> "AffineTransform2D":
        return cls(a=float(sx), d=float(sx if sy is None else sy))

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "AffineTransform2D":
        m = np.asarray(matrix, dtype=float)
        if m.shape != (3, 3):
            raise ValueError("expected a 3x3 matrix")
        return cls(
            a=float(m[0, 0]),
            b=float(m[1, 0]),
            c=float(m[0, 1]),
            d=float(m[1, 1]),
            tx=float(m[0, 2]),
            ty=float(m[1, 2]),
        )

    @classmethod
    def anchored_rescale(
        cls, factor: float, anchor: Point, basis: "AffineTransform2D"
    ) -> "AffineTransform2D":
        return anchored_rescale(factor, anchor, basis)

    # ----- algebra -----

    def as_matrix(self) -> np.ndarray:
        return np.array(
            [
                [self.a, self.c, self.tx],
                [self.b, self.d, self.ty],
                [0.0, 0.0, 1.0],
            ],
            dtype=float,
        )

    def composed(self, other: "AffineTransform2D") -> "AffineTransform2D":
        """Return ``self`` applied after ``other``."""
        return AffineTransform2D.from_matrix(self.as_matrix() @ other.as_matrix())

    def scaled(self, sx: float, sy: float | None = None) -> "AffineTransform2D":
        return self.composed(AffineTransform2D.scaling(sx, sy))

    def translated(self, dx: float, dy: float) -> "AffineTransform2D":
        return self.composed(AffineTransform2D.translation(dx, dy))

    def with_translation(self, tx: float, ty: float) -> "AffineTransform2D":
        return AffineTransform2D(self.a, self.b, self.c, self.d, float(tx), float(ty))

    def inverted(self) -> "AffineTransform2D":
        det = self.a * self.d - self.b * self.c
        if det == 0 or not math.isfinite(det):
            raise ValueError("transform is not invertible")
        return AffineTransform2D.from_matrix(np.linalg.inv(self.as_matrix()))

    def apply(self, point: Point) -> Point:
        return Point(
            self.a * point.x + self.c * point.y + self.tx,
            self.b * point.x + self.d * point.y + self.ty,
        )

    # ----- decomposition -----

    def effective_scale_x(self) -> float:
        return math.hypot(self.a, self.c)

    def effective_scale_y(self) -> float:
        return math.hypot(self.b, self.d)

    @property
    def scale(self) -> float:
        """Uniform scale; ``a == d`` and no shear for every transform the engine builds."""
        return self.effective_scale_x()

    @property
    def translation_point(self) -> Point:
        return Point(self.tx, self.ty)

    def is_close(self, other: "AffineTransform2D", tol: float = 1e-9) -> bool:
        return bool(np.allclose(self.as_matrix(), other.as_matrix(), rtol=0.0, atol=tol))

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.as_matrix())))

    def as_tuple(self) -> tuple[float, float, float, float, float, float]:
        return self.a, self.b, self.c, self.d, self.tx, self.ty


def anchored_rescale(factor: float, anchor: Point, basis: AffineTransform2D) -> AffineTransform2D:
    """Rescale ``basis`` by ``factor`` keeping the content under ``anchor`` in place.

    ``anchor`` is expressed in the frame ``basis`` maps into. The content point
    currently under the anchor is ``(anchor - translation) / scale``; the result
    is ``basis . T(p) . S(factor) . T(-p)``. No clamping is done here.

    ``basis`` must have a non-zero scale on both axes; anything else is a
    precondition violation and the result is undefined.
    """
    offset = anchor - basis.translation_point
    anchor_content = Point(offset.x / basis.a, offset.y / basis.d)
    local = (
        AffineTransform2D.translation(anchor_content.x, anchor_content.y)
        .composed(AffineTransform2D.scaling(factor))
        .composed(AffineTransform2D.translation(-anchor_content.x, -anchor_content.y))
    )
    return basis.composed(local)
