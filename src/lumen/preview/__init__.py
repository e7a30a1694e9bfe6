"""Preview module for rendered image output.

Components:
    export: PNG export via Pillow
"""

from .export import save_png, save_png_from_linear

__all__ = [
    "save_png",
    "save_png_from_linear",
]
