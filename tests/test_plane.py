import numpy as np
import pytest

from fractals.plane import (
    ViewConfig,
    complex_to_pixel,
    export_view,
    pan_view,
    pixel_to_complex,
    plane_grid,
    zoom_view,
)


@pytest.mark.parametrize("rotation", [0.0, 37.0, 180.0])
def test_raster_center_maps_to_view_center(rotation):
    view = ViewConfig(center=complex(0.3, -0.2), zoom_scale=80.0, rotation_degrees=rotation)
    assert pixel_to_complex(50, 40, 100, 80, view) == view.center


def test_zero_center_round_trip():
    view = ViewConfig(center=0j, zoom_scale=10.0)
    assert pixel_to_complex(32, 24, 64, 48, view) == 0j


def test_corner_pixel_scales_offsets():
    view = ViewConfig(center=0j, zoom_scale=50.0)
    point = pixel_to_complex(0, 0, 100, 100, view)
    assert point.real == pytest.approx(-1.0)
    assert point.imag == pytest.approx(-1.0)


def test_offsets_are_translated_by_center():
    view = ViewConfig(center=complex(-0.5, 0.25), zoom_scale=4.0)
    point = pixel_to_complex(12, 4, 8, 8, view)
    assert point.real == pytest.approx(-0.5 + 2.0)
    assert point.imag == pytest.approx(0.25 + 0.0)


def test_rotation_turns_offsets_counterclockwise():
    view = ViewConfig(center=0j, zoom_scale=10.0, rotation_degrees=90.0)
    point = pixel_to_complex(60, 50, 100, 100, view)
    assert point.real == pytest.approx(0.0, abs=1e-12)
    assert point.imag == pytest.approx(1.0)


def test_plane_grid_matches_scalar_mapping_exactly():
    view = ViewConfig(center=complex(-0.75, 0.1), zoom_scale=33.0, rotation_degrees=21.5)
    width, height = 7, 5
    grid = plane_grid(width, height, view)
    assert grid.shape == (height, width)
    assert grid.dtype == np.complex128
    for y in range(height):
        for x in range(width):
            assert grid[y, x] == pixel_to_complex(x, y, width, height, view)


def test_complex_to_pixel_inverts_mapping():
    view = ViewConfig(center=complex(0.2, 0.7), zoom_scale=120.0, rotation_degrees=-63.0)
    point = pixel_to_complex(17, 91, 160, 120, view)
    x, y = complex_to_pixel(point, 160, 120, view)
    assert x == pytest.approx(17)
    assert y == pytest.approx(91)


def test_pan_without_rotation_moves_against_drag():
    view = ViewConfig(center=0j, zoom_scale=10.0)
    moved = pan_view(view, 10.0, -20.0)
    assert moved.center == complex(-1.0, 2.0)
    assert moved.zoom_scale == view.zoom_scale


def test_pan_follows_rotation():
    view = ViewConfig(center=0j, zoom_scale=10.0, rotation_degrees=90.0)
    moved = pan_view(view, 10.0, 0.0)
    assert moved.center.real == pytest.approx(0.0, abs=1e-12)
    assert moved.center.imag == pytest.approx(1.0)


def test_zoom_view_multiplies_scale():
    view = ViewConfig(zoom_scale=150.0)
    assert zoom_view(view, 1.1).zoom_scale == pytest.approx(165.0)
    assert zoom_view(view, 0.5).center == view.center


def test_zoom_view_rejects_non_positive_result():
    with pytest.raises(ValueError):
        zoom_view(ViewConfig(), 0.0)
    with pytest.raises(ValueError):
        zoom_view(ViewConfig(), -2.0)


def test_export_view_shows_same_region_at_double_size():
    view = ViewConfig(center=complex(0.1, 0.2), zoom_scale=100.0, rotation_degrees=15.0)
    exported = export_view(view)
    assert exported.zoom_scale == 200.0
    assert exported.center == view.center
    assert exported.rotation_degrees == view.rotation_degrees
    corner = pixel_to_complex(0, 0, 64, 48, view)
    exported_corner = pixel_to_complex(0, 0, 128, 96, exported)
    assert exported_corner.real == pytest.approx(corner.real)
    assert exported_corner.imag == pytest.approx(corner.imag)
