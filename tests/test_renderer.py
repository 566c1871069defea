import numpy as np
import pytest

from fractals.config import FractalConfig, Julia, Mandelbrot, Multibrot, Newton
from fractals.engine import iterate
from fractals.palette import color_of, get_palette
from fractals.plane import ViewConfig, pixel_to_complex
from fractals.renderer import render, render_frame, validate_request

PALETTE = get_palette("electric")
VIEW = ViewConfig(center=complex(-0.5, 0.0), zoom_scale=4.0)


def test_buffer_layout_is_row_major_rgba():
    width, height = 8, 6
    fractal = Mandelbrot(max_iterations=24)
    pixels = render(width, height, fractal, VIEW, PALETTE)
    assert isinstance(pixels, bytes)
    assert len(pixels) == 4 * width * height
    for y in range(height):
        for x in range(width):
            offset = 4 * (y * width + x)
            n = iterate(pixel_to_complex(x, y, width, height, VIEW), fractal)
            assert tuple(pixels[offset:offset + 3]) == color_of(n, 24, PALETTE)
            assert pixels[offset + 3] == 255


def test_view_center_pixel_is_interior_black():
    width, height = 8, 6
    pixels = render(width, height, Mandelbrot(max_iterations=32), ViewConfig(), PALETTE)
    offset = 4 * (3 * width + 4)
    assert tuple(pixels[offset:offset + 4]) == (0, 0, 0, 255)


def test_render_frame_keeps_iteration_counts():
    width, height = 5, 4
    fractal = Julia(max_iterations=16)
    result = render_frame(width, height, fractal, VIEW, PALETTE)
    assert (result.width, result.height) == (width, height)
    assert result.iterations.shape == (height, width)
    assert result.iterations.max() <= 16
    assert result.iterations[2, 3] == iterate(pixel_to_complex(3, 2, width, height, VIEW), fractal)
    assert result.pixels == render(width, height, fractal, VIEW, PALETTE)


def test_render_is_deterministic():
    fractal = Multibrot(max_iterations=20, exponent=2.5)
    first = render(6, 6, fractal, VIEW, PALETTE.shifted(0.3))
    second = render(6, 6, fractal, VIEW, PALETTE.shifted(0.3))
    assert first == second


def test_newton_render_colours_converged_pixels():
    result = render_frame(6, 6, Newton(max_iterations=30), ViewConfig(center=0j, zoom_scale=2.0), PALETTE)
    assert np.any(result.iterations < 30)


def test_single_pixel_raster():
    pixels = render(1, 1, Mandelbrot(max_iterations=10), ViewConfig(center=0j), PALETTE)
    assert pixels == bytes((0, 0, 0, 255))


@pytest.mark.parametrize(
    "width, height, fractal, view",
    [
        (0, 4, Mandelbrot(), VIEW),
        (4, -1, Mandelbrot(), VIEW),
        (4.0, 4, Mandelbrot(), VIEW),
        (4, 4, Mandelbrot(max_iterations=0), VIEW),
        (4, 4, Mandelbrot(escape_threshold=0.0), VIEW),
        (4, 4, Mandelbrot(escape_threshold=-2.0), VIEW),
        (4, 4, Multibrot(exponent=float("inf")), VIEW),
        (4, 4, Julia(parameter=complex(float("nan"), 0.0)), VIEW),
        (4, 4, Mandelbrot(), ViewConfig(zoom_scale=0.0)),
        (4, 4, Mandelbrot(), ViewConfig(zoom_scale=-5.0)),
        (4, 4, Mandelbrot(), ViewConfig(center=complex(float("inf"), 0.0))),
        (4, 4, FractalConfig(), VIEW),
        (4, 4, Mandelbrot(max_iterations=2.5), VIEW),
        (4, 4, Mandelbrot(max_iterations="lots"), VIEW),
        (4, 4, Mandelbrot(max_iterations=True), VIEW),
        (4, 4, Mandelbrot(escape_threshold="far"), VIEW),
        (4, 4, Multibrot(exponent="three"), VIEW),
        (4, 4, Julia(parameter="i"), VIEW),
    ],
)
def test_invalid_requests_are_rejected(width, height, fractal, view):
    with pytest.raises(ValueError):
        render(width, height, fractal, view, PALETTE)


def test_palette_type_is_checked():
    with pytest.raises(ValueError):
        validate_request(4, 4, Mandelbrot(), VIEW, [(0, 0, 0), (255, 255, 255)])


def test_numpy_integer_iteration_limit_is_accepted():
    result = render_frame(2, 2, Mandelbrot(max_iterations=np.int64(5)), VIEW, PALETTE)
    assert result.iterations.max() <= 5
