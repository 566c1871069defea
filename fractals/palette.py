"""Palettes and the mapping from iteration counts to colours."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np
from matplotlib import colormaps as _mpl_colormaps

RGB = tuple[int, int, int]

INTERIOR_COLOR: RGB = (0, 0, 0)
# the gradient is traversed this many times over the full count range
CYCLE_FACTOR = 2


@dataclass(frozen=True)
class Palette:
    """Ordered anchor colours blended cyclically, plus a cyclic shift."""

    name: str
    colors: tuple[RGB, ...]
    shift: float = 0.0

    def __post_init__(self) -> None:
        colors = tuple(tuple(int(channel) for channel in color) for color in self.colors)
        if len(colors) < 2:
            raise ValueError(f"Palette '{self.name}' needs at least two colours, got {len(colors)}.")
        for color in colors:
            if len(color) != 3 or any(channel < 0 or channel > 255 for channel in color):
                raise ValueError(f"Palette '{self.name}' has an invalid RGB colour {color!r}.")
        if not 0.0 <= self.shift < 1.0:
            raise ValueError(f"Palette shift must lie in [0, 1), got {self.shift!r}.")
        object.__setattr__(self, "colors", colors)

    def shifted(self, shift: float) -> "Palette":
        """Copy of this palette with ``shift`` wrapped into [0, 1)."""

        wrapped = float(shift) % 1.0
        # tiny negative shifts round up to exactly 1.0
        return replace(self, shift=0.0 if wrapped >= 1.0 else wrapped)


PALETTES: dict[str, Palette] = {
    palette.name: palette
    for palette in (
        Palette("electric", ((0, 7, 100), (32, 107, 203), (237, 255, 255), (255, 170, 0), (0, 2, 0))),
        Palette("fire", ((0, 0, 0), (60, 10, 0), (200, 100, 0), (255, 200, 50), (255, 255, 200))),
        Palette("psych", ((50, 0, 100), (0, 200, 200), (200, 0, 200), (255, 255, 0), (20, 0, 50))),
        Palette("greyscale", ((0, 0, 0), (50, 50, 50), (150, 150, 150), (255, 255, 255), (20, 20, 20))),
        Palette(
            "rainbow",
            ((255, 0, 0), (255, 255, 0), (0, 255, 0), (0, 255, 255), (0, 0, 255), (255, 0, 255)),
        ),
    )
}

DEFAULT_PALETTE = "electric"


def get_palette(name: str) -> Palette:
    try:
        return PALETTES[name]
    except KeyError:
        raise ValueError(f"Unknown palette '{name}'. Valid choices: {', '.join(PALETTES)}.") from None


def palette_from_colormap(name: str, anchors: int = 6) -> Palette:
    """Sample ``anchors`` evenly spaced colours from a matplotlib colormap."""

    if anchors < 2:
        raise ValueError("A palette needs at least two anchors.")
    try:
        cmap = _mpl_colormaps[name]
    except KeyError:
        raise ValueError(f"Unknown matplotlib colormap '{name}'.") from None
    rgba = cmap(np.linspace(0.0, 1.0, anchors))
    rgb = np.rint(rgba[:, :3] * 255).astype(np.int64)
    return Palette(name, tuple(tuple(int(c) for c in row) for row in rgb))


def resolve_palette(name: str, anchors: int = 6) -> Palette:
    """Catalog palette ``name``, falling back to a matplotlib colormap."""

    if name in PALETTES:
        return PALETTES[name]
    try:
        return palette_from_colormap(name, anchors)
    except ValueError:
        raise ValueError(
            f"'{name}' is neither a palette ({', '.join(PALETTES)}) nor a matplotlib colormap."
        ) from None


def color_of(n: int, max_iterations: int, palette: Palette) -> RGB:
    """Colour for a pixel whose iteration stopped after ``n`` steps.

    Interior points (``n == max_iterations``) are black. Other counts are
    normalised, shifted by ``palette.shift`` and blended linearly between two
    neighbouring anchors; channels are rounded half to even.
    """

    if n == max_iterations:
        return INTERIOR_COLOR

    t = (n / max_iterations + palette.shift) % 1.0
    colors = palette.colors
    length = len(colors)
    scaled = t * (length - 1) * CYCLE_FACTOR
    base = math.floor(scaled)
    fraction = scaled - base
    index = base % length
    first = colors[index]
    second = colors[(index + 1) % length]
    return (
        round(first[0] + (second[0] - first[0]) * fraction),
        round(first[1] + (second[1] - first[1]) * fraction),
        round(first[2] + (second[2] - first[2]) * fraction),
    )


def colorize(iterations: np.ndarray, max_iterations: int, palette: Palette) -> np.ndarray:
    """Vectorised :func:`color_of` returning an opaque RGBA ``uint8`` array."""

    iterations = np.asarray(iterations)
    colors = np.asarray(palette.colors, dtype=np.float64)
    length = colors.shape[0]
    interior = iterations == max_iterations

    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.mod(iterations.astype(np.float64) / max_iterations + palette.shift, 1.0)
    scaled = t * (length - 1) * CYCLE_FACTOR
    base = np.floor(scaled)
    fraction = (scaled - base)[..., None]
    index = np.where(interior, 0, base).astype(np.int64) % length
    first = colors[index]
    second = colors[(index + 1) % length]
    rgb = np.rint(first + (second - first) * fraction)

    rgba = np.empty(iterations.shape + (4,), dtype=np.uint8)
    rgba[..., :3] = np.where(interior[..., None], 0, rgb).astype(np.uint8)
    rgba[..., 3] = 255
    return rgba
