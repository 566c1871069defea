"""Vectorised TensorFlow evaluation of the fractal recurrences.

Every lane follows the scalar recurrence of :mod:`fractals.engine`; lanes
that have stopped are frozen with ``tf.where`` while the remaining ones keep
iterating. Operations run eagerly, one element-wise kernel each, so the
arithmetic is the same IEEE sequence as the scalar engine.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import numpy as np
import tensorflow as tf

from .config import FractalConfig, FractalKind
from .engine import CUBE_ROOTS, ROOT_TOLERANCE
from .palette import Palette, colorize
from .plane import ViewConfig, plane_grid
from .renderer import RenderResult, validate_request

logger = logging.getLogger(__name__)

State = tuple[tf.Tensor, ...]
# advance(state) -> (candidate state, lanes that must stop without stepping)
Advance = Callable[[State], tuple[State, Optional[tf.Tensor]]]
Continues = Callable[[State], tf.Tensor]


def default_device() -> str:
    """First GPU when TensorFlow sees one, otherwise the CPU."""

    gpus = tf.config.list_physical_devices("GPU")
    if gpus:
        try:
            for gpu in gpus:
                tf.config.experimental.set_memory_growth(gpu, True)
            logger.debug("GPU found, using %s", gpus[0].name)
            return "/GPU:0"
        except RuntimeError as exc:
            logger.debug("Cannot configure GPU memory growth: %s", exc)
    return "/CPU:0"


def _const(value: float) -> tf.Tensor:
    return tf.constant(value, dtype=tf.float64)


def _bounded(threshold_sq: float) -> Continues:
    limit = _const(threshold_sq)

    def continues(state: State) -> tf.Tensor:
        z_re, z_im = state[0], state[1]
        return z_re * z_re + z_im * z_im <= limit

    return continues


def _quadratic(c_re: tf.Tensor, c_im: tf.Tensor) -> Advance:
    def advance(state: State):
        z_re, z_im = state
        new_im = 2 * z_re * z_im + c_im
        new_re = z_re * z_re - z_im * z_im + c_re
        return (new_re, new_im), None

    return advance


def _burning_ship(c_re: tf.Tensor, c_im: tf.Tensor) -> Advance:
    def advance(state: State):
        z_re, z_im = state
        new_im = tf.abs(2 * z_re * z_im) + c_im
        new_re = tf.abs(z_re * z_re - z_im * z_im + c_re)
        return (new_re, new_im), None

    return advance


def _tricorn(c_re: tf.Tensor, c_im: tf.Tensor) -> Advance:
    def advance(state: State):
        z_re, z_im = state
        new_im = -2 * z_re * z_im + c_im
        new_re = z_re * z_re - z_im * z_im + c_re
        return (new_re, new_im), None

    return advance


def _multibrot_cubic(c_re: tf.Tensor, c_im: tf.Tensor) -> Advance:
    def advance(state: State):
        z_re, z_im = state
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        new_re = z_re * (z_re2 - 3 * z_im2) + c_re
        new_im = z_im * (3 * z_re2 - z_im2) + c_im
        return (new_re, new_im), None

    return advance


def _multibrot_quartic(c_re: tf.Tensor, c_im: tf.Tensor) -> Advance:
    def advance(state: State):
        z_re, z_im = state
        z_re2 = z_re * z_re
        z_im2 = z_im * z_im
        new_re = z_re2 * z_re2 - 6 * z_re2 * z_im2 + z_im2 * z_im2 + c_re
        new_im = 4 * z_re * z_im * (z_re2 - z_im2) + c_im
        return (new_re, new_im), None

    return advance


def _multibrot_polar(c_re: tf.Tensor, c_im: tf.Tensor, exponent: float) -> Advance:
    power = _const(exponent)

    def advance(state: State):
        z_re, z_im = state
        r = tf.sqrt(z_re * z_re + z_im * z_im)
        phi = tf.atan2(z_im, z_re)
        r_pow = tf.pow(r, power)
        phi_mul = phi * power
        new_re = r_pow * tf.cos(phi_mul) + c_re
        new_im = r_pow * tf.sin(phi_mul) + c_im
        # 0 ** negative is a division by zero; those lanes stop uncounted
        blocked = tf.equal(r, 0.0) if exponent < 0 else None
        return (new_re, new_im), blocked

    return advance


def _phoenix(p_re: float, p_im: float) -> Advance:
    param_re = _const(p_re)
    param_im = _const(p_im)

    def advance(state: State):
        z_re, z_im, prev_re, prev_im = state
        next_re = z_re * z_re - z_im * z_im + param_re + param_im * prev_re
        next_im = 2 * z_re * z_im + param_im * prev_im
        return (next_re, next_im, z_re, z_im), None

    return advance


def _lambda(c_re: tf.Tensor, c_im: tf.Tensor) -> Advance:
    def advance(state: State):
        z_re, z_im = state
        term_re = z_re - z_re * z_re + z_im * z_im
        term_im = z_im - 2 * z_re * z_im
        new_re = c_re * term_re - c_im * term_im
        new_im = c_re * term_im + c_im * term_re
        return (new_re, new_im), None

    return advance


def _newton_unconverged(state: State) -> tf.Tensor:
    z_re, z_im = state
    tolerance = _const(ROOT_TOLERANCE)
    converged = tf.zeros_like(z_re, dtype=tf.bool)
    for root_re, root_im in CUBE_ROOTS:
        d_re = z_re - root_re
        d_im = z_im - root_im
        converged = tf.logical_or(converged, d_re * d_re + d_im * d_im < tolerance)
    return tf.logical_not(converged)


def _newton_advance(state: State):
    z_re, z_im = state
    z_re2 = z_re * z_re
    z_im2 = z_im * z_im
    d_re = 3 * (z_re2 - z_im2)
    d_im = 6 * z_re * z_im
    denom = d_re * d_re + d_im * d_im
    z3_re = z_re * (z_re2 - 3 * z_im2)
    z3_im = z_im * (3 * z_re2 - z_im2)
    num_re = 2 * z3_re + 1
    num_im = 2 * z3_im
    new_re = (num_re * d_re + num_im * d_im) / denom
    new_im = (num_im * d_re - num_re * d_im) / denom
    return (new_re, new_im), tf.equal(denom, 0.0)


def _setup(re: tf.Tensor, im: tf.Tensor, fractal: FractalConfig) -> tuple[State, Advance, Continues]:
    """Initial state, update and continuation test for ``fractal``."""

    zeros = tf.zeros_like(re)
    kind = fractal.kind
    threshold_sq = fractal.threshold_squared

    if kind is FractalKind.NEWTON:
        return (re, im), _newton_advance, _newton_unconverged
    if kind is FractalKind.JULIA:
        c = fractal.parameter
        return (re, im), _quadratic(_const(c.real), _const(c.imag)), _bounded(threshold_sq)
    if kind is FractalKind.PHOENIX:
        p = fractal.parameter
        return (im, re, zeros, zeros), _phoenix(p.real, p.imag), _bounded(threshold_sq)
    if kind is FractalKind.LAMBDA:
        start = tf.fill(tf.shape(re), tf.constant(0.5, dtype=tf.float64))
        return (start, zeros), _lambda(re, im), _bounded(threshold_sq)
    if kind is FractalKind.BURNING_SHIP:
        return (zeros, zeros), _burning_ship(re, -im), _bounded(threshold_sq)
    if kind is FractalKind.TRICORN:
        return (zeros, zeros), _tricorn(re, im), _bounded(threshold_sq)
    if kind is FractalKind.MULTIBROT:
        exponent = fractal.exponent
        if exponent == 3:
            advance = _multibrot_cubic(re, im)
        elif exponent == 4:
            advance = _multibrot_quartic(re, im)
        else:
            advance = _multibrot_polar(re, im, exponent)
        return (zeros, zeros), advance, _bounded(threshold_sq)
    # mandelbrot
    return (zeros, zeros), _quadratic(re, im), _bounded(threshold_sq)


def _run(state: State, advance: Advance, continues: Continues, max_iterations: int) -> tf.Tensor:
    """Iterate every lane until it stops or ``max_iterations`` is reached."""

    limit = tf.constant(max_iterations, dtype=tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros(tf.shape(state[0]), dtype=tf.int32)
    active = continues(state)

    def cond(i, state, ns, active):
        return tf.logical_and(tf.less(i, limit), tf.reduce_any(active))

    def body(i, state, ns, active):
        candidate, blocked = advance(state)
        stepping = active if blocked is None else tf.logical_and(active, tf.logical_not(blocked))
        state = tuple(tf.where(stepping, new, old) for new, old in zip(candidate, state))
        ns = ns + tf.cast(stepping, tf.int32)
        active = tf.logical_and(stepping, continues(state))
        return i + 1, state, ns, active

    _, _, ns, _ = tf.while_loop(cond, body, (i, state, ns, active))
    return ns


def iterate_grid(points: np.ndarray, fractal: FractalConfig, *, device: Optional[str] = None) -> np.ndarray:
    """Step counts for every complex value in ``points``."""

    points = np.asarray(points, dtype=np.complex128)
    if fractal.max_iterations <= 0 or points.size == 0:
        return np.zeros(points.shape, dtype=np.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        re = tf.convert_to_tensor(points.real, dtype=tf.float64)
        im = tf.convert_to_tensor(points.imag, dtype=tf.float64)
        state, advance, continues = _setup(re, im, fractal)
        ns = _run(state, advance, continues, fractal.max_iterations)
    return ns.numpy()


def render_tensor(
    width: int,
    height: int,
    fractal: FractalConfig,
    view: ViewConfig,
    palette: Palette,
    *,
    device: Optional[str] = None,
) -> RenderResult:
    """Render the whole raster at once; same layout as the scalar renderer."""

    validate_request(width, height, fractal, view, palette)
    started = time.perf_counter()

    iterations = iterate_grid(plane_grid(width, height, view), fractal, device=device)
    rgba = colorize(iterations, fractal.max_iterations, palette)

    logger.debug(
        "Rendered %s %dx%d on %s in %.3fs",
        fractal.kind.value,
        width,
        height,
        device or "/CPU:0",
        time.perf_counter() - started,
    )
    return RenderResult(width=width, height=height, pixels=rgba.tobytes(), iterations=iterations)
