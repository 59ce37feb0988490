"""Core package exports for the zoom/pan engine."""

# Re-export commonly used modules for convenience.
from . import affine, bounds, controller, geometry

__all__ = [
    "affine",
    "bounds",
    "controller",
    "geometry",
]
