"""Per-point escape-time and convergence iteration for every fractal kind.

Each recurrence tests its continuation condition before updating, and the
returned count is the number of completed updates. A count equal to
``max_iterations`` marks an interior point (or, for Newton, a point that did
not reach a root). No input makes these functions raise.
"""

from __future__ import annotations

import math
from typing import Callable

from .config import FractalConfig, FractalKind

ROOT_TOLERANCE = 0.001
CUBE_ROOTS = (
    (1.0, 0.0),
    (-0.5, 0.866025),
    (-0.5, -0.866025),
)


def _quadratic(z_re: float, z_im: float, c_re: float, c_im: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    z_re2 = z_re * z_re
    z_im2 = z_im * z_im
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        z_im = 2 * z_re * z_im + c_im
        z_re = z_re2 - z_im2 + c_re
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _burning_ship(c_re: float, c_im: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    z_re = z_im = 0.0
    z_re2 = z_im2 = 0.0
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        z_im = abs(2 * z_re * z_im) + c_im
        z_re = abs(z_re2 - z_im2 + c_re)
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _tricorn(c_re: float, c_im: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    z_re = z_im = 0.0
    z_re2 = z_im2 = 0.0
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        z_im = -2 * z_re * z_im + c_im
        z_re = z_re2 - z_im2 + c_re
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _multibrot_cubic(c_re: float, c_im: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    z_re = z_im = 0.0
    z_re2 = z_im2 = 0.0
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        new_re = z_re * (z_re2 - 3 * z_im2) + c_re
        new_im = z_im * (3 * z_re2 - z_im2) + c_im
        z_re, z_im = new_re, new_im
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _multibrot_quartic(c_re: float, c_im: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    z_re = z_im = 0.0
    z_re2 = z_im2 = 0.0
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        new_re = z_re2 * z_re2 - 6 * z_re2 * z_im2 + z_im2 * z_im2 + c_re
        new_im = 4 * z_re * z_im * (z_re2 - z_im2) + c_im
        z_re, z_im = new_re, new_im
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _multibrot_polar(c_re: float, c_im: float, exponent: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    z_re = z_im = 0.0
    z_re2 = z_im2 = 0.0
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        r = math.sqrt(z_re2 + z_im2)
        if r == 0 and exponent < 0:
            # 0 ** negative is a division by zero
            break
        phi = math.atan2(z_im, z_re)
        try:
            r_pow = r ** exponent
        except OverflowError:
            # the step lands beyond every finite threshold
            return n + 1
        phi_mul = phi * exponent
        z_re = r_pow * math.cos(phi_mul) + c_re
        z_im = r_pow * math.sin(phi_mul) + c_im
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _phoenix(z_re: float, z_im: float, p_re: float, p_im: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    prev_re = prev_im = 0.0
    z_re2 = z_re * z_re
    z_im2 = z_im * z_im
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        next_re = z_re2 - z_im2 + p_re + p_im * prev_re
        next_im = 2 * z_re * z_im + p_im * prev_im
        prev_re, prev_im = z_re, z_im
        z_re, z_im = next_re, next_im
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _lambda(c_re: float, c_im: float, max_iterations: int, threshold_sq: float) -> int:
    n = 0
    z_re, z_im = 0.5, 0.0
    z_re2 = z_re * z_re
    z_im2 = z_im * z_im
    while z_re2 + z_im2 <= threshold_sq and n < max_iterations:
        # z * (1 - z)
        term_re = z_re - z_re2 + z_im2
        term_im = z_im - 2 * z_re * z_im
        z_re = c_re * term_re - c_im * term_im
        z_im = c_re * term_im + c_im * term_re
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _near_root(z_re: float, z_im: float) -> bool:
    for root_re, root_im in CUBE_ROOTS:
        d_re = z_re - root_re
        d_im = z_im - root_im
        if d_re * d_re + d_im * d_im < ROOT_TOLERANCE:
            return True
    return False


def _newton(z_re: float, z_im: float, max_iterations: int) -> int:
    n = 0
    z_re2 = z_re * z_re
    z_im2 = z_im * z_im
    while n < max_iterations:
        if _near_root(z_re, z_im):
            break
        d_re = 3 * (z_re2 - z_im2)
        d_im = 6 * z_re * z_im
        denom = d_re * d_re + d_im * d_im
        if denom == 0:
            break
        # z - (z**3 - 1) / (3 z**2) == (2 z**3 + 1) / (3 z**2)
        z3_re = z_re * (z_re2 - 3 * z_im2)
        z3_im = z_im * (3 * z_re2 - z_im2)
        num_re = 2 * z3_re + 1
        num_im = 2 * z3_im
        z_re = (num_re * d_re + num_im * d_im) / denom
        z_im = (num_im * d_re - num_re * d_im) / denom
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        n += 1
    return n


def _iterate_mandelbrot(point: complex, fractal: FractalConfig) -> int:
    return _quadratic(0.0, 0.0, point.real, point.imag, fractal.max_iterations, fractal.threshold_squared)


def _iterate_julia(point: complex, fractal: FractalConfig) -> int:
    c = fractal.parameter
    return _quadratic(point.real, point.imag, c.real, c.imag, fractal.max_iterations, fractal.threshold_squared)


def _iterate_burning_ship(point: complex, fractal: FractalConfig) -> int:
    # imaginary axis flipped so the ship sits upright
    return _burning_ship(point.real, -point.imag, fractal.max_iterations, fractal.threshold_squared)


def _iterate_tricorn(point: complex, fractal: FractalConfig) -> int:
    return _tricorn(point.real, point.imag, fractal.max_iterations, fractal.threshold_squared)


def _iterate_multibrot(point: complex, fractal: FractalConfig) -> int:
    exponent = fractal.exponent
    if exponent == 3:
        return _multibrot_cubic(point.real, point.imag, fractal.max_iterations, fractal.threshold_squared)
    if exponent == 4:
        return _multibrot_quartic(point.real, point.imag, fractal.max_iterations, fractal.threshold_squared)
    return _multibrot_polar(point.real, point.imag, exponent, fractal.max_iterations, fractal.threshold_squared)


def _iterate_newton(point: complex, fractal: FractalConfig) -> int:
    return _newton(point.real, point.imag, fractal.max_iterations)


def _iterate_phoenix(point: complex, fractal: FractalConfig) -> int:
    p = fractal.parameter
    # the seed swaps real and imaginary parts
    return _phoenix(point.imag, point.real, p.real, p.imag, fractal.max_iterations, fractal.threshold_squared)


def _iterate_lambda(point: complex, fractal: FractalConfig) -> int:
    return _lambda(point.real, point.imag, fractal.max_iterations, fractal.threshold_squared)


ITERATORS: dict[FractalKind, Callable[[complex, FractalConfig], int]] = {
    FractalKind.MANDELBROT: _iterate_mandelbrot,
    FractalKind.JULIA: _iterate_julia,
    FractalKind.BURNING_SHIP: _iterate_burning_ship,
    FractalKind.TRICORN: _iterate_tricorn,
    FractalKind.MULTIBROT: _iterate_multibrot,
    FractalKind.NEWTON: _iterate_newton,
    FractalKind.PHOENIX: _iterate_phoenix,
    FractalKind.LAMBDA: _iterate_lambda,
}


def iterate(point: complex, fractal: FractalConfig) -> int:
    """Run ``fractal``'s recurrence from ``point`` and return the step count."""

    return ITERATORS[fractal.kind](point, fractal)
