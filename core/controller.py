"""Gesture state machine converting pinch/pan/tap input into clamped transforms."""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, replace
from typing import Protocol

from core.affine import AffineTransform2D, anchored_rescale
from core.bounds import (
    TranslationBounds,
    clamp_translation,
    initial_centering_offset,
    is_degenerate,
    legal_translation_bounds,
)
from core.geometry import Point, Size

__all__ = [
    "AnchorBasis",
    "GestureState",
    "NullPresentationSink",
    "PresentationSink",
    "SCALE_EPSILON",
    "ZoomConfiguration",
    "ZoomPanController",
]

LOG = logging.getLogger(__name__)

SCALE_EPSILON = 1e-9


class GestureState(enum.Enum):
    IDLE = "idle"
    PINCH_ACTIVE = "pinch"
    PAN_ACTIVE = "pan"


class AnchorBasis(str, enum.Enum):
    """Frame the transform acts in.

    ``CENTERED``: content is laid out at its natural size centered in the
    viewport and the transform is applied around that layout, so bounds, gesture
    anchors and focus all account for the centering offset.
    ``ORIGIN``: content is laid out at the viewport origin; no offset anywhere.
    """

    CENTERED = "centered"
    ORIGIN = "origin"


@dataclass(frozen=True)
class ZoomConfiguration:
    viewport_size: Size
    min_scale: float = 1.0
    max_scale: float = 3.0
    double_tap_scale: float = 2.0
    anchor_basis: AnchorBasis = AnchorBasis.CENTERED

    def __post_init__(self) -> None:
        for name in ("min_scale", "max_scale", "double_tap_scale"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite")
        if self.min_scale < 1.0:
            raise ValueError("min_scale must be >= 1")
        if self.min_scale > self.max_scale:
            raise ValueError("min_scale must not exceed max_scale")
        if self.double_tap_scale <= 0:
            raise ValueError("double_tap_scale must be positive")
        if not isinstance(self.viewport_size, Size):
            raise ValueError("viewport_size must be a Size")
        object.__setattr__(self, "anchor_basis", AnchorBasis(self.anchor_basis))

    def clamp_scale(self, scale: float) -> float:
        return min(max(scale, self.min_scale), self.max_scale)

    def with_viewport(self, viewport_size: Size) -> "ZoomConfiguration":
        return replace(self, viewport_size=viewport_size)


class PresentationSink(Protocol):
    """Outbound events for the rendering/feedback collaborator."""

    def on_transform_changed(self, transform: AffineTransform2D, settled: bool) -> None: ...

    def on_scale_limit_reached(self, reached: bool) -> None: ...

    def on_gesture_completed(self) -> None: ...


class NullPresentationSink:
    def on_transform_changed(self, transform: AffineTransform2D, settled: bool) -> None:
        return None

    def on_scale_limit_reached(self, reached: bool) -> None:
        return None

    def on_gesture_completed(self) -> None:
        return None


def _require_finite_point(name: str, point: Point) -> None:
    if not point.is_finite():
        raise ValueError(f"{name} must be finite")


class ZoomPanController:
    """Owns the live and settled transforms of one zoomable content element.

    Every live update is derived from ``settled_transform``; a gesture that is
    interrupted by another kind of gesture simply loses its uncommitted
    transform. Translation is only clamped when a transform is committed, which
    lets the live transform rubber-band past the edges while a finger is down.
    Until a non-empty content size is known every gesture is ignored and the
    transform stays at identity.
    """

    def __init__(
        self,
        configuration: ZoomConfiguration,
        *,
        content_size: Size | None = None,
        sink: PresentationSink | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = configuration
        self._sink: PresentationSink = sink or NullPresentationSink()
        self._log = logger or LOG
        self._content_size: Size | None = None
        self._state = GestureState.IDLE
        self._settled = AffineTransform2D.identity()
        self._current = self._settled
        self._at_scale_limit = False
        self._focus_point: Point | None = None
        if content_size is not None:
            self.set_content_size(content_size)

    # ----- properties -----

    @property
    def configuration(self) -> ZoomConfiguration:
        return self._config

    @property
    def content_size(self) -> Size | None:
        return self._content_size

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def current_transform(self) -> AffineTransform2D:
        return self._current

    @property
    def settled_transform(self) -> AffineTransform2D:
        return self._settled

    @property
    def at_scale_limit(self) -> bool:
        return self._at_scale_limit

    @property
    def focus_point(self) -> Point | None:
        return self._focus_point

    @focus_point.setter
    def focus_point(self, point: Point | None) -> None:
        # One-shot: the request is consumed as soon as it is applied.
        self._focus_point = point
        if point is not None:
            try:
                self.focus_on(point)
            finally:
                self._focus_point = None

    @property
    def has_content(self) -> bool:
        return not is_degenerate(self._content_size)

    # ----- inbound layout -----

    def set_content_size(self, size: Size | None) -> None:
        self._content_size = size
        if is_degenerate(size):
            self._debug("content size %s is empty; holding identity", size)
            self._state = GestureState.IDLE
            self._settled = AffineTransform2D.identity()
            self._current = self._settled
            self._set_scale_limit(False)
            self._emit(settled=True)
            return
        self._resettle()

    def set_configuration(self, configuration: ZoomConfiguration) -> None:
        self._config = configuration
        if self.has_content:
            self._resettle()

    def set_viewport_size(self, size: Size) -> None:
        self.set_configuration(self._config.with_viewport(size))

    # ----- pinch -----

    def on_pinch_changed(self, magnification: float, anchor: Point) -> AffineTransform2D:
        if not self.has_content:
            return self._current
        proposed, transform = self._pinch_transform(magnification, anchor)
        self._state = GestureState.PINCH_ACTIVE
        self._current = transform
        self._set_scale_limit(proposed != self._config.clamp_scale(proposed))
        self._emit(settled=False)
        return self._current

    def on_pinch_ended(self, magnification: float, anchor: Point) -> AffineTransform2D:
        if not self.has_content:
            self._state = GestureState.IDLE
            return self._current
        _, transform = self._pinch_transform(magnification, anchor)
        self._set_scale_limit(False)
        self._commit(transform)
        return self._settled

    def _pinch_transform(self, magnification: float, anchor: Point) -> tuple[float, AffineTransform2D]:
        if not math.isfinite(magnification) or magnification <= 0:
            raise ValueError("magnification must be a positive finite number")
        _require_finite_point("anchor", anchor)
        base_scale = self._settled.scale
        proposed = base_scale * magnification
        ratio = self._config.clamp_scale(proposed) / base_scale
        transform = anchored_rescale(ratio, self._to_layout(anchor), self._settled)
        return proposed, transform

    # ----- pan -----

    def on_pan_changed(self, delta: Point) -> AffineTransform2D:
        _require_finite_point("delta", delta)
        if not self.has_content:
            return self._current
        if self._state is GestureState.PINCH_ACTIVE:
            self._debug("pan interrupted a live pinch; discarding it")
            self._set_scale_limit(False)
        # Drag deltas are viewport pixels; translated() works pre-scale.
        sx = self._settled.effective_scale_x()
        sy = self._settled.effective_scale_y()
        self._state = GestureState.PAN_ACTIVE
        self._current = self._settled.translated(delta.x / sx, delta.y / sy)
        self._emit(settled=False)
        return self._current

    def on_pan_ended(self) -> AffineTransform2D:
        if not self.has_content:
            self._state = GestureState.IDLE
            return self._current
        if self._state is GestureState.PAN_ACTIVE:
            source = self._current
        else:
            source = self._settled
        self._commit(source)
        return self._settled

    # ----- taps & programmatic focus -----

    def on_double_tap(self, location: Point) -> AffineTransform2D:
        _require_finite_point("location", location)
        if not self.has_content:
            return self._current
        scale = self._settled.scale
        # Rest scale is 1.0 unless min_scale lifts it.
        rest = self._config.clamp_scale(1.0)
        if abs(scale - rest) > SCALE_EPSILON:
            target = rest
        else:
            target = self._config.clamp_scale(self._config.double_tap_scale)
        self._debug("double tap at %s: scale %.4f -> %.4f", location, scale, target)
        transform = anchored_rescale(target / scale, self._to_layout(location), self._settled)
        self._set_scale_limit(False)
        self._commit(transform)
        self._sink.on_gesture_completed()
        return self._settled

    def focus_on(self, point: Point) -> AffineTransform2D:
        """Center ``point`` (content-local coordinates) in the viewport at the current scale."""
        _require_finite_point("point", point)
        if not self.has_content:
            self._debug("focus request %s ignored; content size unknown", point)
            return self._current
        scale = self._settled.scale
        center = self._to_layout(self._config.viewport_size.center)
        candidate = self._settled.with_translation(
            center.x - scale * point.x,
            center.y - scale * point.y,
        )
        self._commit(candidate)
        return self._settled

    def cancel_gesture(self) -> AffineTransform2D:
        if self._state is not GestureState.IDLE:
            self._state = GestureState.IDLE
            self._current = self._settled
            self._set_scale_limit(False)
            self._emit(settled=True)
        return self._current

    def reset(self) -> AffineTransform2D:
        if not self.has_content:
            return self._current
        self._commit(self._legal_scale(AffineTransform2D.identity()))
        return self._settled

    # ----- clamping -----

    def translation_bounds(self, scale: float | None = None) -> TranslationBounds:
        if not self.has_content:
            return TranslationBounds(0.0, 0.0, 0.0, 0.0)
        return legal_translation_bounds(
            self._content_size,
            self._config.viewport_size,
            self._settled.scale if scale is None else scale,
            centering=self._config.anchor_basis is AnchorBasis.CENTERED,
        )

    def limit_transform(self, transform: AffineTransform2D) -> AffineTransform2D:
        """Clamp the translation of ``transform`` to the bounds at its own scale.

        The scale is expected to be inside the configured range already.
        """
        if not self.has_content:
            return AffineTransform2D.identity()
        return clamp_translation(transform, self.translation_bounds(transform.scale))

    # ----- queries -----

    def is_at_min_scale(self) -> bool:
        return abs(self._current.scale - self._config.min_scale) <= SCALE_EPSILON

    def is_at_default_scale(self) -> bool:
        return abs(self._current.scale - 1.0) <= SCALE_EPSILON

    def layout_origin(self) -> Point:
        """Viewport position of the untransformed content's origin."""
        if self._config.anchor_basis is AnchorBasis.CENTERED and self.has_content:
            return initial_centering_offset(self._content_size, self._config.viewport_size)
        return Point(0.0, 0.0)

    def viewport_to_content(self, point: Point) -> Point:
        return self._current.inverted().apply(self._to_layout(point))

    def content_to_viewport(self, point: Point) -> Point:
        return self._current.apply(point) + self.layout_origin()

    # ----- internals -----

    def _to_layout(self, point: Point) -> Point:
        return point - self.layout_origin()

    def _legal_scale(self, transform: AffineTransform2D) -> AffineTransform2D:
        scale = transform.scale
        clamped = self._config.clamp_scale(scale)
        if clamped == scale:
            return transform
        center = self._to_layout(self._config.viewport_size.center)
        return anchored_rescale(clamped / scale, center, transform)

    def _resettle(self) -> None:
        self._settled = self.limit_transform(self._legal_scale(self._settled))
        if self._state is GestureState.IDLE:
            self._current = self._settled
        self._emit(settled=self._state is GestureState.IDLE)

    def _commit(self, transform: AffineTransform2D) -> None:
        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug(
                "content: %s viewport: %s", self._content_size, self._config.viewport_size
            )
            self._log.debug("transform before clamping: %s", transform)
        limited = self.limit_transform(transform)
        self._debug("transform after clamping: %s", limited)
        self._settled = limited
        self._current = limited
        self._state = GestureState.IDLE
        self._emit(settled=True)

    def _set_scale_limit(self, reached: bool) -> None:
        if reached == self._at_scale_limit:
            return
        self._at_scale_limit = reached
        self._sink.on_scale_limit_reached(reached)

    def _emit(self, *, settled: bool) -> None:
        self._sink.on_transform_changed(self._current, settled)

    def _debug(self, msg: str, *args) -> None:
        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug(msg, *args)
