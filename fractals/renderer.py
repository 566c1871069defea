"""Raster scan composing the coordinate mapper, engine and colour mapper."""

from __future__ import annotations

import logging
import math
import numbers
import time
from dataclasses import dataclass

import numpy as np

from .config import FRACTAL_TYPES, FractalConfig
from .engine import iterate
from .palette import Palette, color_of
from .plane import ViewConfig, pixel_to_complex

logger = logging.getLogger(__name__)

CHANNELS = 4
OPAQUE = 255


@dataclass(frozen=True)
class RenderResult:
    """A rendered raster and the iteration count behind every pixel."""

    width: int
    height: int
    pixels: bytes
    iterations: np.ndarray


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_finite_complex(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Complex):
        return False
    return math.isfinite(value.real) and math.isfinite(value.imag)


def validate_fractal(fractal: FractalConfig) -> None:
    """Reject fractal options of the wrong type or outside their range."""

    if not isinstance(fractal, FractalConfig) or getattr(fractal, "kind", None) not in FRACTAL_TYPES:
        raise ValueError(f"Unsupported fractal configuration {fractal!r}.")
    max_iterations = fractal.max_iterations
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)) or max_iterations < 1:
        raise ValueError(f"max_iterations must be an integer of at least 1, got {max_iterations!r}.")
    threshold = fractal.escape_threshold
    if not (_is_real(threshold) and math.isfinite(threshold) and threshold > 0):
        raise ValueError(f"escape_threshold must be positive and finite, got {threshold!r}.")
    if hasattr(fractal, "exponent") and not (_is_real(fractal.exponent) and math.isfinite(fractal.exponent)):
        raise ValueError(f"exponent must be a finite number, got {fractal.exponent!r}.")
    if hasattr(fractal, "parameter") and not _is_finite_complex(fractal.parameter):
        raise ValueError(f"parameter must be a finite complex number, got {fractal.parameter!r}.")


def validate_request(width: int, height: int, fractal: FractalConfig, view: ViewConfig, palette: Palette) -> None:
    """Reject render requests the per-pixel loop is not meant to handle."""

    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
            raise ValueError(f"{name} must be a positive integer, got {value!r}.")
    validate_fractal(fractal)
    if not (math.isfinite(view.zoom_scale) and view.zoom_scale > 0):
        raise ValueError(f"zoom_scale must be positive and finite, got {view.zoom_scale!r}.")
    if not (_is_finite_complex(view.center) and math.isfinite(view.rotation_degrees)):
        raise ValueError("View center and rotation must be finite.")
    if not isinstance(palette, Palette):
        raise ValueError(f"Expected a Palette, got {type(palette).__name__}.")


def render_frame(width: int, height: int, fractal: FractalConfig, view: ViewConfig, palette: Palette) -> RenderResult:
    """Scan the raster pixel by pixel in row-major order."""

    validate_request(width, height, fractal, view, palette)
    started = time.perf_counter()

    max_iterations = fractal.max_iterations
    pixels = bytearray(CHANNELS * width * height)
    iterations = np.empty((height, width), dtype=np.int32)

    for y in range(height):
        for x in range(width):
            n = iterate(pixel_to_complex(x, y, width, height, view), fractal)
            r, g, b = color_of(n, max_iterations, palette)
            offset = (y * width + x) * CHANNELS
            pixels[offset:offset + CHANNELS] = bytes((r, g, b, OPAQUE))
            iterations[y, x] = n

    logger.debug(
        "Rendered %s %dx%d in %.3fs", fractal.kind.value, width, height, time.perf_counter() - started
    )
    return RenderResult(width=width, height=height, pixels=bytes(pixels), iterations=iterations)


def render(width: int, height: int, fractal: FractalConfig, view: ViewConfig, palette: Palette) -> bytes:
    """Render ``fractal`` as ``4 * width * height`` bytes of row-major RGBA."""

    return render_frame(width, height, fractal, view, palette).pixels
