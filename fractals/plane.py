"""Mapping between raster pixels and the complex plane."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np

DEFAULT_CENTER = complex(-0.5, 0.0)
DEFAULT_ZOOM_SCALE = 150.0


@dataclass(frozen=True)
class ViewConfig:
    """Where the raster looks on the complex plane.

    ``zoom_scale`` is measured in pixels per unit length, so larger values
    magnify. ``rotation_degrees`` turns the raster around its centre.
    """

    center: complex = DEFAULT_CENTER
    zoom_scale: float = DEFAULT_ZOOM_SCALE
    rotation_degrees: float = 0.0


def _rotation(view: ViewConfig) -> tuple[float, float]:
    theta = view.rotation_degrees * math.pi / 180.0
    return math.cos(theta), math.sin(theta)


def pixel_to_complex(x: float, y: float, width: int, height: int, view: ViewConfig) -> complex:
    """Return the plane coordinate sampled by pixel ``(x, y)``."""

    scale = 1.0 / view.zoom_scale
    cos_r, sin_r = _rotation(view)
    x_off = (x - width / 2) * scale
    y_off = (y - height / 2) * scale
    rot_x = x_off * cos_r - y_off * sin_r
    rot_y = x_off * sin_r + y_off * cos_r
    return complex(rot_x + view.center.real, rot_y + view.center.imag)


def plane_grid(width: int, height: int, view: ViewConfig) -> np.ndarray:
    """Sample every pixel of a ``width`` x ``height`` raster at once.

    The operations are applied in the same order as :func:`pixel_to_complex`
    so each element matches the scalar mapping exactly.
    """

    scale = 1.0 / view.zoom_scale
    cos_r, sin_r = _rotation(view)
    xs = (np.arange(width, dtype=np.float64) - width / 2) * scale
    ys = (np.arange(height, dtype=np.float64) - height / 2) * scale
    x_off, y_off = np.meshgrid(xs, ys)
    rot_x = x_off * cos_r - y_off * sin_r
    rot_y = x_off * sin_r + y_off * cos_r
    grid = np.empty((height, width), dtype=np.complex128)
    grid.real = rot_x + view.center.real
    grid.imag = rot_y + view.center.imag
    return grid


def complex_to_pixel(point: complex, width: int, height: int, view: ViewConfig) -> tuple[float, float]:
    """Inverse of :func:`pixel_to_complex`; the result may fall off-raster."""

    cos_r, sin_r = _rotation(view)
    d_re = point.real - view.center.real
    d_im = point.imag - view.center.imag
    x_off = (d_re * cos_r + d_im * sin_r) * view.zoom_scale
    y_off = (-d_re * sin_r + d_im * cos_r) * view.zoom_scale
    return x_off + width / 2, y_off + height / 2


def pan_view(view: ViewConfig, dx: float, dy: float) -> ViewConfig:
    """Drag the view by ``(dx, dy)`` screen pixels.

    The drag is turned back through the view rotation so the picture follows
    the pointer whatever the rotation.
    """

    shift_re = dx / view.zoom_scale
    shift_im = dy / view.zoom_scale
    cos_r, sin_r = _rotation(view)
    rot_re = shift_re * cos_r + shift_im * sin_r
    rot_im = -shift_re * sin_r + shift_im * cos_r
    center = complex(view.center.real - rot_re, view.center.imag - rot_im)
    return replace(view, center=center)


def zoom_view(view: ViewConfig, factor: float) -> ViewConfig:
    """Multiply the magnification; ``factor > 1`` zooms in."""

    zoom_scale = float(np.float64(view.zoom_scale) * np.float64(factor))
    if not zoom_scale > 0:
        raise ValueError(f"zoom factor {factor!r} gives a non-positive zoom scale.")
    return replace(view, zoom_scale=zoom_scale)


def export_view(view: ViewConfig, scale: float = 2) -> ViewConfig:
    """View for a raster ``scale`` times larger showing the same region."""

    return zoom_view(view, scale)
