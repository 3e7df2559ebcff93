"""Rendering primitives for Mandelbrot and Julia images."""

from __future__ import annotations

import enum
from typing import Optional

import numpy as np
import tensorflow as tf

from .compositor import ByteOrder, check_byte_order, check_palette, composite
from .errors import PreconditionError
from .escape import BAILOUT
from .geometry import (
    ORIGIN,
    CanvasDimensions,
    ComplexPoint,
    PlaneWindow,
    axis_samples,
    check_canvas,
    check_window,
)

# Iteration counts are accumulated in int32 tensors.
MAX_ITERATION_LIMIT = int(np.iinfo(np.int32).max)


class FractalKind(enum.Enum):
    """Which operand of ``z -> z**2 + c`` is fixed for the whole image."""

    MANDELBROT = "mandelbrot"
    JULIA = "julia"


@tf.function
def _early_bailout_mask(xs: tf.Tensor, ys: tf.Tensor) -> tf.Tensor:
    """Points inside the main cardioid or the period-2 bulb of the Mandelbrot set."""

    shifted = xs - 0.25
    q = shifted * shifted + ys * ys
    cardioid = q * (q + xs - 0.25) <= (ys * ys) / 4.0
    bulb_x = xs + 1.0
    bulb = bulb_x * bulb_x + ys * ys <= 0.0625
    return tf.logical_or(cardioid, bulb)


@tf.function
def _escape_step(
    zx: tf.Tensor,
    zy: tf.Tensor,
    cx: tf.Tensor,
    cy: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    max_iterations: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single iteration for points that have not escaped."""

    new_x = cx + (zx * zx - zy * zy)
    new_y = cy + 2.0 * zx * zy
    zx = tf.where(active, new_x, zx)
    zy = tf.where(active, new_y, zy)
    ns = ns + tf.cast(active, tf.int32)
    bailout = tf.constant(BAILOUT, dtype=zx.dtype)
    bounded = zx * zx + zy * zy <= bailout
    new_active = tf.logical_and(tf.logical_and(active, bounded), tf.less(ns, max_iterations))
    return zx, zy, ns, new_active


@tf.function
def _escape_run(
    zx: tf.Tensor,
    zy: tf.Tensor,
    cx: tf.Tensor,
    cy: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    max_iterations: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate the escape-time recurrence using a TensorFlow while loop."""

    i = tf.constant(0, dtype=tf.int32)

    def cond(i, zx, zy, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zx, zy, ns, active):
        zx, zy, ns, active = _escape_step(zx, zy, cx, cy, ns, active, max_iterations)
        return i + 1, zx, zy, ns, active

    return tf.while_loop(cond, body, (i, zx, zy, ns, active))


def _check_max_iterations(max_iterations: int) -> None:
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise PreconditionError("max_iterations", f"expected an integer, got {max_iterations!r}")
    if not 0 <= max_iterations < MAX_ITERATION_LIMIT:
        raise PreconditionError(
            "max_iterations", f"must lie in [0, {MAX_ITERATION_LIMIT}), got {max_iterations}"
        )


def _check_seed(seed: ComplexPoint) -> None:
    if not np.isfinite(seed.x) or not np.isfinite(seed.y):
        raise PreconditionError("seed", f"coordinates must be finite, got ({seed.x}, {seed.y})")


def iteration_grid(
    kind: FractalKind,
    canvas: CanvasDimensions,
    window: PlaneWindow,
    max_iterations: int,
    *,
    seed: ComplexPoint = ORIGIN,
    device: Optional[str] = None,
) -> np.ndarray:
    """Return the ``(height, width)`` escape-time counts of every canvas pixel."""

    try:
        kind = FractalKind(kind)
    except ValueError:
        raise PreconditionError("kind", f"expected 'mandelbrot' or 'julia', got {kind!r}") from None
    check_canvas(canvas)
    check_window(window)
    _check_max_iterations(max_iterations)
    _check_seed(seed)

    x = axis_samples(canvas.width, window.x_range)
    y = axis_samples(canvas.height, window.y_range)
    limit = tf.constant(int(max_iterations), dtype=tf.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        X, Y = tf.meshgrid(
            tf.convert_to_tensor(x, dtype=tf.float64),
            tf.convert_to_tensor(y, dtype=tf.float64),
        )

        if kind is FractalKind.MANDELBROT:
            cx, cy = X, Y
            zx = tf.zeros_like(X)
            zy = tf.zeros_like(Y)
            interior = _early_bailout_mask(X, Y)
            ns = tf.where(interior, tf.fill(tf.shape(X), limit), tf.zeros(tf.shape(X), tf.int32))
            pending = tf.logical_not(interior)
        elif kind is FractalKind.JULIA:
            cx = tf.fill(tf.shape(X), tf.constant(float(seed.x), dtype=tf.float64))
            cy = tf.fill(tf.shape(Y), tf.constant(float(seed.y), dtype=tf.float64))
            zx, zy = X, Y
            ns = tf.zeros(tf.shape(X), tf.int32)
            pending = tf.ones(tf.shape(X), tf.bool)
        else:
            raise PreconditionError("kind", f"unsupported fractal kind {kind!r}")

        bailout = tf.constant(BAILOUT, dtype=tf.float64)
        active = tf.logical_and(pending, zx * zx + zy * zy <= bailout)
        active = tf.logical_and(active, tf.less(ns, limit))

        _, _, _, ns, _ = _escape_run(zx, zy, cx, cy, ns, active, limit)

    return ns.numpy()


def render(
    kind: FractalKind,
    canvas: CanvasDimensions,
    window: PlaneWindow,
    max_iterations: int,
    palette,
    byte_order=ByteOrder.LITTLE,
    *,
    seed: ComplexPoint = ORIGIN,
    alpha_from_palette: bool = False,
    device: Optional[str] = None,
) -> bytes:
    """Render a fractal image into a row-major RGBA pixel buffer.

    Every input is validated before any pixel is computed, so a failed
    render raises :class:`PreconditionError` and yields no buffer.
    """

    order = check_byte_order(byte_order)
    check_canvas(canvas)
    check_window(window)
    _check_max_iterations(max_iterations)
    colours = check_palette(palette, max_iterations, alpha_from_palette=alpha_from_palette)

    iterations = iteration_grid(kind, canvas, window, max_iterations, seed=seed, device=device)
    return composite(iterations, colours, order, alpha_from_palette=alpha_from_palette)


def render_mandelbrot(
    canvas: CanvasDimensions,
    window: PlaneWindow,
    max_iterations: int,
    palette,
    byte_order=ByteOrder.LITTLE,
    *,
    alpha_from_palette: bool = False,
    device: Optional[str] = None,
) -> bytes:
    return render(
        FractalKind.MANDELBROT,
        canvas,
        window,
        max_iterations,
        palette,
        byte_order,
        alpha_from_palette=alpha_from_palette,
        device=device,
    )


def render_julia(
    canvas: CanvasDimensions,
    window: PlaneWindow,
    seed: ComplexPoint,
    max_iterations: int,
    palette,
    byte_order=ByteOrder.LITTLE,
    *,
    alpha_from_palette: bool = False,
    device: Optional[str] = None,
) -> bytes:
    return render(
        FractalKind.JULIA,
        canvas,
        window,
        max_iterations,
        palette,
        byte_order,
        seed=seed,
        alpha_from_palette=alpha_from_palette,
        device=device,
    )
