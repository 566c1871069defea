import numpy as np
import pytest

pytest.importorskip("tensorflow")

from fractals.config import (  # noqa: E402
    BurningShip,
    Julia,
    Lambda,
    Mandelbrot,
    Multibrot,
    Newton,
    Phoenix,
    Tricorn,
)
from fractals.engine import iterate  # noqa: E402
from fractals.palette import get_palette  # noqa: E402
from fractals.plane import ViewConfig, plane_grid  # noqa: E402
from fractals.renderer import render_frame  # noqa: E402
from fractals.tensor import default_device, iterate_grid, render_tensor  # noqa: E402

WIDTH, HEIGHT = 24, 16
VIEW = ViewConfig(center=complex(-0.3, 0.05), zoom_scale=7.0, rotation_degrees=12.0)


def _scalar_counts(points, fractal):
    return np.array([[iterate(point, fractal) for point in row] for row in points], dtype=np.int32)


@pytest.mark.parametrize(
    "fractal",
    [
        Mandelbrot(max_iterations=40),
        Julia(max_iterations=40),
        BurningShip(max_iterations=40),
        Tricorn(max_iterations=40),
        Multibrot(max_iterations=40, exponent=3),
        Multibrot(max_iterations=40, exponent=4),
        Phoenix(max_iterations=40),
        Lambda(max_iterations=40),
        Newton(max_iterations=40),
    ],
    ids=lambda fractal: f"{fractal.kind.value}-{getattr(fractal, 'exponent', '')}",
)
def test_counts_match_scalar_engine(fractal):
    points = plane_grid(WIDTH, HEIGHT, VIEW)
    np.testing.assert_array_equal(iterate_grid(points, fractal), _scalar_counts(points, fractal))


def test_polar_multibrot_agrees_almost_everywhere():
    fractal = Multibrot(max_iterations=30, exponent=2.5)
    points = plane_grid(WIDTH, HEIGHT, ViewConfig(center=0j, zoom_scale=8.0))
    counts = iterate_grid(points, fractal)
    expected = _scalar_counts(points, fractal)
    assert np.mean(counts != expected) < 0.02


def test_negative_exponent_stops_at_origin():
    counts = iterate_grid(np.array([0j, 0.5 + 0.5j]), Multibrot(max_iterations=10, exponent=-2.0))
    np.testing.assert_array_equal(counts, [0, 0])


def test_newton_degenerate_point_stops_uncounted():
    counts = iterate_grid(np.array([0j, 1 + 0j, 2 + 0j]), Newton(max_iterations=20))
    np.testing.assert_array_equal(counts, [0, 0, 3])


def test_zero_iteration_cap():
    counts = iterate_grid(plane_grid(4, 3, VIEW), Mandelbrot(max_iterations=0))
    assert counts.shape == (3, 4)
    assert not counts.any()


def test_render_tensor_matches_scalar_render():
    palette = get_palette("psych").shifted(0.2)
    fractal = Mandelbrot(max_iterations=30)
    vectorised = render_tensor(WIDTH, HEIGHT, fractal, VIEW, palette)
    reference = render_frame(WIDTH, HEIGHT, fractal, VIEW, palette)
    np.testing.assert_array_equal(vectorised.iterations, reference.iterations)
    assert vectorised.pixels == reference.pixels


def test_render_tensor_validates_request():
    with pytest.raises(ValueError):
        render_tensor(0, 4, Mandelbrot(), VIEW, get_palette("fire"))


def test_default_device_is_a_device_name():
    assert default_device() in {"/CPU:0", "/GPU:0"}
