"""Qt widget hosting a single zoomable pixmap driven by ``ZoomPanController``."""
from __future__ import annotations

import logging

from PySide6 import QtCore, QtGui, QtWidgets

from core.affine import AffineTransform2D
from core.controller import ZoomConfiguration, ZoomPanController
from core.geometry import Point, Size

LOG = logging.getLogger(__name__)

WHEEL_STEP_MAGNIFICATION = 1.25


def _point(pos: QtCore.QPointF | QtCore.QPoint) -> Point:
    return Point(float(pos.x()), float(pos.y()))


def _interpolate(
    start: AffineTransform2D, end: AffineTransform2D, progress: float
) -> AffineTransform2D:
    return AffineTransform2D(
        *(s + (e - s) * progress for s, e in zip(start.as_tuple(), end.as_tuple()))
    )


def to_qtransform(transform: AffineTransform2D) -> QtGui.QTransform:
    return QtGui.QTransform(
        transform.a, transform.b, transform.c, transform.d, transform.tx, transform.ty
    )


class QtPresentationSink(QtCore.QObject):
    """Re-emit controller events as Qt signals."""

    transformChanged = QtCore.Signal(object, bool)
    scaleLimitReached = QtCore.Signal(bool)
    gestureCompleted = QtCore.Signal()

    def on_transform_changed(self, transform: AffineTransform2D, settled: bool) -> None:
        self.transformChanged.emit(transform, settled)

    def on_scale_limit_reached(self, reached: bool) -> None:
        self.scaleLimitReached.emit(reached)

    def on_gesture_completed(self) -> None:
        self.gestureCompleted.emit()


class ZoomableView(QtWidgets.QWidget):
    """Aspect-fit a pixmap into the widget and let the user pinch, drag and double-click it.

    Live gesture updates are painted immediately; settled transforms are eased
    in over ``animation_duration_ms``. Mouse drags pan, the wheel zooms about
    the cursor, a double click toggles zoom and touch pinches zoom about their
    starting midpoint.
    """

    transformChanged = QtCore.Signal(object)
    scaleLimitReached = QtCore.Signal(bool)
    gestureCompleted = QtCore.Signal()

    def __init__(
        self,
        configuration: ZoomConfiguration,
        *,
        pixmap: QtGui.QPixmap | None = None,
        animation_duration_ms: int = 300,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setAttribute(QtCore.Qt.WA_AcceptTouchEvents, True)
        self.grabGesture(QtCore.Qt.PinchGesture)
        self.setMouseTracking(False)

        self._pixmap = pixmap or QtGui.QPixmap()
        self._sink = QtPresentationSink(self)
        self._sink.transformChanged.connect(self._on_transform_changed)
        self._sink.scaleLimitReached.connect(self.scaleLimitReached)
        self._sink.gestureCompleted.connect(self.gestureCompleted)

        self._controller = ZoomPanController(configuration, sink=self._sink, logger=LOG)
        self._displayed = self._controller.current_transform
        self._animation_start = self._displayed
        self._animation_target = self._displayed
        self._drag_origin: QtCore.QPointF | None = None
        self._pinch_anchor: Point | None = None

        self._animation = QtCore.QVariantAnimation(self)
        self._animation.setStartValue(0.0)
        self._animation.setEndValue(1.0)
        self._animation.setDuration(max(0, int(animation_duration_ms)))
        self._animation.setEasingCurve(QtCore.QEasingCurve.OutCubic)
        self._animation.valueChanged.connect(self._on_animation_step)

        self._sync_geometry()

    # ----- public API -----

    def controller(self) -> ZoomPanController:
        return self._controller

    def displayed_transform(self) -> AffineTransform2D:
        return self._displayed

    def pixmap(self) -> QtGui.QPixmap:
        return self._pixmap

    def set_pixmap(self, pixmap: QtGui.QPixmap) -> None:
        self._pixmap = pixmap
        self._sync_geometry()
        self.update()

    def set_focus_point(self, point: QtCore.QPointF | Point) -> None:
        """Center a point given in fitted-content coordinates."""
        if not isinstance(point, Point):
            point = _point(point)
        self._controller.focus_point = point

    def content_size(self) -> Size:
        if self._pixmap.isNull():
            return Size()
        natural = Size(float(self._pixmap.width()), float(self._pixmap.height()))
        return natural.fitted_into(self._viewport_size())

    # ----- geometry -----

    def _viewport_size(self) -> Size:
        return Size(float(max(0, self.width())), float(max(0, self.height())))

    def _sync_geometry(self) -> None:
        self._controller.set_viewport_size(self._viewport_size())
        self._controller.set_content_size(self.content_size())

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        self._sync_geometry()

    # ----- painting -----

    def _on_transform_changed(self, transform: AffineTransform2D, settled: bool) -> None:
        if settled and self._animation.duration() > 0 and self.isVisible():
            self._animation.stop()
            self._animation_start = self._displayed
            self._animation_target = transform
            self._animation.start()
        else:
            self._animation.stop()
            self._displayed = transform
            self.update()
        self.transformChanged.emit(transform)

    def _on_animation_step(self, value) -> None:
        self._displayed = _interpolate(self._animation_start, self._animation_target, float(value))
        self.update()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # noqa: N802 - Qt override
        painter = QtGui.QPainter(self)
        try:
            painter.setRenderHint(QtGui.QPainter.SmoothPixmapTransform, True)
            painter.setClipRect(self.rect())
            if self._pixmap.isNull():
                return
            content = self.content_size()
            origin = self._controller.layout_origin()
            painter.translate(origin.x, origin.y)
            painter.setTransform(to_qtransform(self._displayed), True)
            painter.drawPixmap(
                QtCore.QRectF(0.0, 0.0, content.width, content.height),
                self._pixmap,
                QtCore.QRectF(self._pixmap.rect()),
            )
        finally:
            painter.end()

    # ----- input -----

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: N802 - Qt override
        if event.button() == QtCore.Qt.LeftButton:
            self._drag_origin = event.position()
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: N802 - Qt override
        if self._drag_origin is None:
            super().mouseMoveEvent(event)
            return
        delta = event.position() - self._drag_origin
        self._controller.on_pan_changed(_point(delta))
        event.accept()

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: N802 - Qt override
        if event.button() == QtCore.Qt.LeftButton and self._drag_origin is not None:
            self._drag_origin = None
            self._controller.on_pan_ended()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: N802 - Qt override
        if event.button() != QtCore.Qt.LeftButton:
            super().mouseDoubleClickEvent(event)
            return
        self._drag_origin = None
        self._controller.on_double_tap(_point(event.position()))
        event.accept()

    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:  # noqa: N802 - Qt override
        steps = event.angleDelta().y() / 120.0
        if steps == 0:
            super().wheelEvent(event)
            return
        magnification = WHEEL_STEP_MAGNIFICATION ** steps
        self._controller.on_pinch_ended(magnification, _point(event.position()))
        event.accept()

    def event(self, event: QtCore.QEvent) -> bool:
        if event.type() == QtCore.QEvent.Gesture:
            pinch = event.gesture(QtCore.Qt.PinchGesture)
            if pinch is not None:
                self._handle_pinch(pinch)
                event.accept()
                return True
        return super().event(event)

    def _handle_pinch(self, pinch: QtWidgets.QPinchGesture) -> None:
        if self._pinch_anchor is None:
            center = self.mapFromGlobal(pinch.startCenterPoint().toPoint())
            self._pinch_anchor = _point(center)
        magnification = float(pinch.totalScaleFactor()) or 1.0
        state = pinch.state()
        if state in (QtCore.Qt.GestureFinished, QtCore.Qt.GestureCanceled):
            anchor = self._pinch_anchor
            self._pinch_anchor = None
            if state == QtCore.Qt.GestureCanceled:
                self._controller.cancel_gesture()
            else:
                self._controller.on_pinch_ended(magnification, anchor)
            return
        self._controller.on_pinch_changed(magnification, self._pinch_anchor)
