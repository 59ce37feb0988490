from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.controller import AnchorBasis, ZoomConfiguration
from core.geometry import Size


@dataclass
class ViewerConfig:
    min_scale: float = 1.0
    max_scale: float = 3.0
    double_tap_scale: float = 2.0
    anchor_basis: str = AnchorBasis.CENTERED.value
    animation_duration_ms: int = 300
    window_width: int = 900
    window_height: int = 700
    ini_path: Path | None = None

    @classmethod
    def load(cls, ini_path: str | Path | None = None) -> "ViewerConfig":
        cfg = cls()
        path = Path(ini_path or "config.ini")
        if path.exists():
            import configparser

            parser = configparser.ConfigParser()
            parser.read(path)
            zoom_section = parser["zoom"] if "zoom" in parser else None
            if zoom_section:
                cfg.min_scale = _get_float(zoom_section, "min_scale", cfg.min_scale)
                cfg.max_scale = _get_float(zoom_section, "max_scale", cfg.max_scale)
                cfg.double_tap_scale = _get_float(
                    zoom_section, "double_tap_scale", cfg.double_tap_scale
                )
                basis = zoom_section.get("anchor_basis", fallback=cfg.anchor_basis).strip().lower()
                if basis in {member.value for member in AnchorBasis}:
                    cfg.anchor_basis = basis

            ui_section = parser["ui"] if "ui" in parser else None
            if ui_section:
                duration = _get_int(
                    ui_section, "animation_duration_ms", cfg.animation_duration_ms
                )
                if duration >= 0:
                    cfg.animation_duration_ms = duration
                width = _get_int(ui_section, "window_width", cfg.window_width)
                height = _get_int(ui_section, "window_height", cfg.window_height)
                if width > 0:
                    cfg.window_width = width
                if height > 0:
                    cfg.window_height = height
        cfg.ini_path = path
        return cfg

    def zoom_configuration(self, viewport_size: Size) -> ZoomConfiguration:
        return ZoomConfiguration(
            viewport_size=viewport_size,
            min_scale=self.min_scale,
            max_scale=self.max_scale,
            double_tap_scale=self.double_tap_scale,
            anchor_basis=AnchorBasis(self.anchor_basis),
        )

    def save(self) -> None:
        if self.ini_path is None:
            return
        import configparser

        parser = configparser.ConfigParser()
        parser["zoom"] = {
            "min_scale": f"{self.min_scale:.3f}",
            "max_scale": f"{self.max_scale:.3f}",
            "double_tap_scale": f"{self.double_tap_scale:.3f}",
            "anchor_basis": self.anchor_basis,
        }
        parser["ui"] = {
            "animation_duration_ms": str(self.animation_duration_ms),
            "window_width": str(self.window_width),
            "window_height": str(self.window_height),
        }
        with self.ini_path.open("w") as fh:
            parser.write(fh)


def _get_float(section, key: str, fallback: float) -> float:
    try:
        return section.getfloat(key, fallback=fallback)
    except ValueError:
        return fallback


def _get_int(section, key: str, fallback: int) -> int:
    try:
        return section.getint(key, fallback=fallback)
    except ValueError:
        return fallback
