"""Scalar escape-time evaluation for the Mandelbrot and Julia sets."""

from __future__ import annotations

from .geometry import ORIGIN, ComplexPoint

BAILOUT = 4.0


def sum_of_squares(a: float, b: float) -> float:
    return a * a + b * b


def diff_of_squares(a: float, b: float) -> float:
    return a * a - b * b


def escape_time(c: ComplexPoint, z: ComplexPoint, max_iterations: int) -> int:
    """Count iterations of ``z -> z**2 + c`` until ``|z|**2 > BAILOUT``.

    Stops at ``max_iterations`` when the orbit stays bounded, so the result
    always lies in ``[0, max_iterations]``.
    """

    zx = float(z.x)
    zy = float(z.y)
    cx = float(c.x)
    cy = float(c.y)
    count = 0
    while sum_of_squares(zx, zy) <= BAILOUT and count < max_iterations:
        zx, zy = cx + diff_of_squares(zx, zy), cy + 2.0 * zx * zy
        count += 1
    return count


def in_main_cardioid(point: ComplexPoint) -> bool:
    q = sum_of_squares(point.x - 0.25, point.y)
    return q * (q + point.x - 0.25) <= (point.y * point.y) / 4.0


def in_period_2_bulb(point: ComplexPoint) -> bool:
    return sum_of_squares(point.x + 1.0, point.y) <= 0.0625


def mandelbrot_early_bailout(point: ComplexPoint) -> bool:
    """True when ``point`` lies in a region of the Mandelbrot set that never escapes."""

    return in_main_cardioid(point) or in_period_2_bulb(point)


def mandelbrot_iterations(point: ComplexPoint, max_iterations: int) -> int:
    if mandelbrot_early_bailout(point):
        return max_iterations
    return escape_time(point, ORIGIN, max_iterations)


def julia_iterations(point: ComplexPoint, seed: ComplexPoint, max_iterations: int) -> int:
    return escape_time(seed, point, max_iterations)
