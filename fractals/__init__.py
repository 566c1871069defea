"""Public API for fractal rendering utilities.

The TensorFlow backend lives in :mod:`fractals.tensor` and is imported on
demand so the scalar engine does not pull TensorFlow in.
"""

from .config import (
    FRACTAL_TYPES,
    BurningShip,
    FractalConfig,
    FractalKind,
    Julia,
    Lambda,
    Mandelbrot,
    Multibrot,
    Newton,
    Phoenix,
    Tricorn,
    make_config,
)
from .engine import iterate
from .generator import ZoomPlanner, boundary_mask, nearest_boundary_pixel, recenter_view, zoom_schedule
from .palette import (
    PALETTES,
    Palette,
    color_of,
    colorize,
    get_palette,
    palette_from_colormap,
    resolve_palette,
)
from .plane import ViewConfig, complex_to_pixel, export_view, pan_view, pixel_to_complex, plane_grid, zoom_view
from .renderer import RenderResult, render, render_frame, validate_fractal, validate_request
from .settings import Session, load_session, save_session

__all__ = [
    "FRACTAL_TYPES",
    "PALETTES",
    "BurningShip",
    "FractalConfig",
    "FractalKind",
    "Julia",
    "Lambda",
    "Mandelbrot",
    "Multibrot",
    "Newton",
    "Palette",
    "Phoenix",
    "RenderResult",
    "Session",
    "Tricorn",
    "ViewConfig",
    "ZoomPlanner",
    "boundary_mask",
    "color_of",
    "colorize",
    "complex_to_pixel",
    "export_view",
    "get_palette",
    "iterate",
    "load_session",
    "make_config",
    "nearest_boundary_pixel",
    "palette_from_colormap",
    "pan_view",
    "pixel_to_complex",
    "plane_grid",
    "recenter_view",
    "render",
    "render_frame",
    "resolve_palette",
    "save_session",
    "validate_fractal",
    "validate_request",
    "zoom_schedule",
    "zoom_view",
]
