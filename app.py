import logging
import sys

from PySide6 import QtWidgets, QtGui

from config import ViewerConfig
from core.geometry import Size
from ui.zoomable_view import ZoomableView


def _select_file_dialog(parent=None):
    dlg = QtWidgets.QFileDialog(parent)
    dlg.setWindowTitle("Select image")
    dlg.setFileMode(QtWidgets.QFileDialog.ExistingFile)
    dlg.setNameFilters([
        "Images (*.png *.jpg *.jpeg *.bmp *.gif)",
        "All Files (*)",
    ])
    if dlg.exec() == QtWidgets.QDialog.Accepted:
        files = dlg.selectedFiles()
        return files[0] if files else None
    return None


def main(
    path=None,
    *,
    config_path: str | None = None,
    max_scale: float | None = None,
    double_tap_scale: float | None = None,
    log_level: str = "WARNING",
):
    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.WARNING))
    cfg = ViewerConfig.load(config_path)
    if max_scale is not None:
        cfg.max_scale = max_scale
    if double_tap_scale is not None:
        cfg.double_tap_scale = double_tap_scale
    app = QtWidgets.QApplication(sys.argv)

    if not path:
        path = _select_file_dialog()
        if not path:
            return

    pixmap = QtGui.QPixmap(path)
    if pixmap.isNull():
        logging.getLogger(__name__).error("Could not load image %s", path)
        return

    viewport = Size(float(cfg.window_width), float(cfg.window_height))
    w = ZoomableView(
        cfg.zoom_configuration(viewport),
        pixmap=pixmap,
        animation_duration_ms=cfg.animation_duration_ms,
    )
    w.setWindowTitle(path)
    w.resize(cfg.window_width, cfg.window_height)
    w.show()
    app.exec()

if __name__ == "__main__":
    import argparse
    p = argparse.ArgumentParser()
    p.add_argument("image_path", nargs="?")
    p.add_argument("--config")
    p.add_argument("--max-scale", type=float)
    p.add_argument("--double-tap-scale", type=float)
    p.add_argument("--log-level", default="WARNING")
    args = p.parse_args()
    main(
        args.image_path,
        config_path=args.config,
        max_scale=args.max_scale,
        double_tap_scale=args.double_tap_scale,
        log_level=args.log_level,
    )
