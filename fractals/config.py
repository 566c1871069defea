"""Fractal configurations, one frozen dataclass per fractal kind."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar

DEFAULT_MAX_ITERATIONS = 64
DEFAULT_ESCAPE_THRESHOLD = 4.0
DEFAULT_JULIA_CONSTANT = complex(-0.4, 0.6)
DEFAULT_PHOENIX_CONSTANT = complex(0.5667, -0.5)
DEFAULT_EXPONENT = 3.0


class FractalKind(str, Enum):
    MANDELBROT = "mandelbrot"
    JULIA = "julia"
    BURNING_SHIP = "burning_ship"
    TRICORN = "tricorn"
    MULTIBROT = "multibrot"
    NEWTON = "newton"
    PHOENIX = "phoenix"
    LAMBDA = "lambda"


@dataclass(frozen=True)
class FractalConfig:
    """Settings shared by every fractal kind.

    Subclasses add only the parameters their recurrence reads. Values are not
    checked here; the renderer rejects unusable ones before scanning.
    """

    max_iterations: int = DEFAULT_MAX_ITERATIONS
    escape_threshold: float = DEFAULT_ESCAPE_THRESHOLD

    kind: ClassVar[FractalKind]

    @property
    def threshold_squared(self) -> float:
        return self.escape_threshold * self.escape_threshold


@dataclass(frozen=True)
class Mandelbrot(FractalConfig):
    kind: ClassVar[FractalKind] = FractalKind.MANDELBROT


@dataclass(frozen=True)
class Julia(FractalConfig):
    parameter: complex = DEFAULT_JULIA_CONSTANT

    kind: ClassVar[FractalKind] = FractalKind.JULIA


@dataclass(frozen=True)
class BurningShip(FractalConfig):
    kind: ClassVar[FractalKind] = FractalKind.BURNING_SHIP


@dataclass(frozen=True)
class Tricorn(FractalConfig):
    kind: ClassVar[FractalKind] = FractalKind.TRICORN


@dataclass(frozen=True)
class Multibrot(FractalConfig):
    # any real value is accepted, including fractional and negative powers
    exponent: float = DEFAULT_EXPONENT

    kind: ClassVar[FractalKind] = FractalKind.MULTIBROT


@dataclass(frozen=True)
class Newton(FractalConfig):
    """Newton's method on z**3 - 1; ``escape_threshold`` is not consulted."""

    kind: ClassVar[FractalKind] = FractalKind.NEWTON


@dataclass(frozen=True)
class Phoenix(FractalConfig):
    parameter: complex = DEFAULT_PHOENIX_CONSTANT

    kind: ClassVar[FractalKind] = FractalKind.PHOENIX


@dataclass(frozen=True)
class Lambda(FractalConfig):
    kind: ClassVar[FractalKind] = FractalKind.LAMBDA


FRACTAL_TYPES: dict[FractalKind, type[FractalConfig]] = {
    cls.kind: cls
    for cls in (Mandelbrot, Julia, BurningShip, Tricorn, Multibrot, Newton, Phoenix, Lambda)
}


def make_config(kind: FractalKind | str, **options: Any) -> FractalConfig:
    """Build the configuration for ``kind``.

    Options the kind does not carry (an exponent for Julia, say) are dropped,
    so callers can pass one flat set of settings for every kind.
    """

    try:
        cls = FRACTAL_TYPES[FractalKind(kind)]
    except ValueError as exc:
        choices = ", ".join(k.value for k in FractalKind)
        raise ValueError(f"Unknown fractal kind '{kind}'. Valid choices: {choices}.") from exc
    accepted = {f.name for f in fields(cls)}
    return cls(**{name: value for name, value in options.items() if name in accepted and value is not None})


def config_options(fractal: FractalConfig) -> dict[str, Any]:
    """Field values of ``fractal`` keyed by name."""

    return {f.name: getattr(fractal, f.name) for f in fields(fractal)}
