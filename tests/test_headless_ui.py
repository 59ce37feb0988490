from __future__ import annotations

import os

import pytest

try:  # pragma: no cover - environment-dependent import guard
    from PySide6 import QtCore, QtGui, QtWidgets
except ImportError as exc:  # pragma: no cover - skip when Qt dependencies missing
    pytest.skip(f"PySide6 import failed: {exc}", allow_module_level=True)

from config import ViewerConfig
from core.affine import AffineTransform2D
from core.geometry import Point, Size


# Ensure the tests run with Qt's offscreen platform.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qt_app():
    """Provide a global QApplication for headless UI tests."""

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app
    app.quit()


def _process_events(app: QtWidgets.QApplication) -> None:
    app.processEvents(QtCore.QEventLoop.AllEvents, 100)


def _mouse_event(kind, x: float, y: float, buttons=QtCore.Qt.LeftButton):
    pos = QtCore.QPointF(x, y)
    return QtGui.QMouseEvent(
        kind, pos, pos, QtCore.Qt.LeftButton, buttons, QtCore.Qt.NoModifier
    )


@pytest.fixture
def view(qt_app):
    from ui.zoomable_view import ZoomableView

    pixmap = QtGui.QPixmap(100, 50)
    pixmap.fill(QtGui.QColor("steelblue"))
    config = ViewerConfig().zoom_configuration(Size(200.0, 200.0))
    widget = ZoomableView(config, pixmap=pixmap, animation_duration_ms=0)
    widget.resize(200, 200)
    widget.show()
    _process_events(qt_app)
    yield widget
    widget.close()
    _process_events(qt_app)


def test_view_fits_pixmap_into_viewport(view):
    assert view.content_size() == Size(200.0, 100.0)
    controller = view.controller()
    assert controller.content_size == Size(200.0, 100.0)
    assert controller.layout_origin() == Point(0.0, 50.0)
    assert view.displayed_transform() == AffineTransform2D.identity()


def test_drag_rubber_bands_and_settles(qt_app, view):
    view.mousePressEvent(_mouse_event(QtCore.QEvent.MouseButtonPress, 50.0, 50.0))
    view.mouseMoveEvent(_mouse_event(QtCore.QEvent.MouseMove, 110.0, 80.0))
    live = view.displayed_transform()
    assert live.tx == pytest.approx(60.0)
    assert live.ty == pytest.approx(30.0)

    view.mouseReleaseEvent(
        _mouse_event(QtCore.QEvent.MouseButtonRelease, 110.0, 80.0, QtCore.Qt.NoButton)
    )
    _process_events(qt_app)
    assert view.displayed_transform() == AffineTransform2D.identity()


def test_double_click_toggles_zoom_and_signals(qt_app, view):
    completed: list[bool] = []
    transforms: list[AffineTransform2D] = []
    view.gestureCompleted.connect(lambda: completed.append(True))
    view.transformChanged.connect(transforms.append)

    view.mouseDoubleClickEvent(_mouse_event(QtCore.QEvent.MouseButtonDblClick, 100.0, 100.0))
    _process_events(qt_app)

    settled = view.controller().settled_transform
    assert settled.scale == pytest.approx(2.0)
    assert settled.tx == pytest.approx(-100.0)
    assert settled.ty == pytest.approx(-50.0)
    assert view.displayed_transform() == settled
    assert completed == [True]
    assert transforms and transforms[-1] == settled

    view.mouseDoubleClickEvent(_mouse_event(QtCore.QEvent.MouseButtonDblClick, 100.0, 100.0))
    assert view.controller().settled_transform.scale == 1.0


def test_wheel_zooms_about_cursor(view):
    pos = QtCore.QPointF(100.0, 100.0)
    event = QtGui.QWheelEvent(
        pos,
        pos,
        QtCore.QPoint(0, 0),
        QtCore.QPoint(0, 120),
        QtCore.Qt.NoButton,
        QtCore.Qt.NoModifier,
        QtCore.Qt.NoScrollPhase,
        False,
    )
    view.wheelEvent(event)

    settled = view.controller().settled_transform
    assert settled.scale == pytest.approx(1.25)
    assert settled.tx == pytest.approx(-25.0)
    assert settled.ty == pytest.approx(-12.5)
    assert view.displayed_transform() == settled


def test_scale_limit_signal_relayed(view):
    reached: list[bool] = []
    view.scaleLimitReached.connect(reached.append)
    controller = view.controller()

    controller.on_pinch_changed(10.0, Point(100.0, 100.0))
    controller.on_pinch_ended(10.0, Point(100.0, 100.0))
    assert reached == [True, False]
    assert controller.settled_transform.scale == pytest.approx(3.0)


def test_focus_point_request(view):
    controller = view.controller()
    controller.on_pinch_ended(2.0, Point(100.0, 100.0))
    view.set_focus_point(QtCore.QPointF(150.0, 50.0))
    assert controller.focus_point is None
    assert controller.settled_transform.tx == pytest.approx(-200.0)


def test_qtransform_matches_engine_mapping():
    from ui.zoomable_view import to_qtransform

    transform = AffineTransform2D(a=2.0, d=2.0, tx=-30.0, ty=12.0)
    mapped = to_qtransform(transform).map(QtCore.QPointF(5.0, 7.0))
    expected = transform.apply(Point(5.0, 7.0))
    assert (mapped.x(), mapped.y()) == pytest.approx((expected.x, expected.y))


def test_view_paints(view):
    view.controller().on_pinch_ended(2.0, Point(100.0, 100.0))
    image = view.grab()
    assert not image.isNull()
    assert image.width() == view.width()
