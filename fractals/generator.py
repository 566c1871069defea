"""Utilities for planning zoom sequences into a fractal."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .plane import ViewConfig, pixel_to_complex, zoom_view
from .renderer import RenderResult


@dataclass(frozen=True)
class ZoomPlanner:
    """Keep each frame of a zoom centred on the fractal boundary."""

    width: int
    height: int

    def focus(self, view: ViewConfig, result: RenderResult, max_iterations: int) -> ViewConfig:
        pixel = nearest_boundary_pixel(boundary_mask(result.iterations, max_iterations))
        return recenter_view(view, pixel, self.width, self.height)

    def advance(self, view: ViewConfig, result: RenderResult, max_iterations: int, zoom_factor: float) -> ViewConfig:
        return zoom_view(self.focus(view, result, max_iterations), zoom_factor)


def _smoothstep(u: np.ndarray) -> np.ndarray:
    return u * u * (3.0 - 2.0 * u)


EASINGS = {
    "linear": lambda u: u,
    "ease": _smoothstep,
}


def zoom_schedule(frames: int, zoom_factor: float, *, final_zoom: float | None, easing: str) -> np.ndarray:
    """Per-frame multipliers applied to the view's zoom scale.

    Without a positive ``final_zoom`` every frame multiplies by
    ``zoom_factor``. Otherwise the eased progress through the sequence is
    used as an exponent of ``final_zoom``, so the product of all factors is
    ``final_zoom`` and the first frame stays at the starting magnification.
    """

    if frames <= 0:
        return np.empty(0, dtype=np.float64)
    if final_zoom is None or final_zoom <= 0:
        return np.full(frames, float(zoom_factor), dtype=np.float64)

    curve = EASINGS.get(easing.lower(), _smoothstep)
    if frames == 1:
        progress = np.ones(1, dtype=np.float64)
    else:
        progress = np.clip(curve(np.linspace(0.0, 1.0, frames)), 0.0, 1.0)
    return np.power(float(final_zoom), np.diff(progress, prepend=0.0))


def boundary_mask(iterations: np.ndarray, max_iterations: int) -> np.ndarray:
    """Pixels where the interior region meets the exterior."""

    interior = np.asarray(iterations) >= max_iterations
    if interior.size == 0:
        return interior
    rows = np.logical_xor(np.roll(interior, 1, axis=0), interior)
    cols = np.logical_xor(np.roll(interior, 1, axis=1), interior)
    return np.logical_or(rows, cols)


def nearest_boundary_pixel(edges: np.ndarray) -> np.ndarray:
    """Boundary pixel ``(row, col)`` closest to the middle of the raster.

    Ties go to the first pixel in row-major order. The middle pixel is
    returned when the raster has no boundary at all.
    """

    height, width = edges.shape
    candidates = np.argwhere(edges)
    if candidates.size == 0:
        return np.array([height // 2, width // 2], dtype=np.int64)
    offsets = candidates - np.array([(height - 1) / 2.0, (width - 1) / 2.0])
    return candidates[int(np.argmin(np.einsum("ij,ij->i", offsets, offsets)))]


def recenter_view(view: ViewConfig, pixel: np.ndarray, width: int, height: int) -> ViewConfig:
    """Move the view centre onto ``pixel`` given as ``(row, col)``."""

    center = pixel_to_complex(int(pixel[1]), int(pixel[0]), width, height, view)
    return ViewConfig(center=center, zoom_scale=view.zoom_scale, rotation_degrees=view.rotation_degrees)
