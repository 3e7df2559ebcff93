"""Canvas and complex-plane geometry shared by the evaluator and the renderer."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import PreconditionError


@dataclass(frozen=True)
class CanvasDimensions:
    """Pixel size of the canvas being rendered."""

    width: int
    height: int


@dataclass(frozen=True)
class AxisRange:
    min: float
    max: float


@dataclass(frozen=True)
class PlaneWindow:
    """Rectangular window of the complex plane mapped onto the canvas."""

    x_range: AxisRange
    y_range: AxisRange

    @classmethod
    def from_bounds(cls, x_min: float, x_max: float, y_min: float, y_max: float) -> "PlaneWindow":
        return cls(AxisRange(x_min, x_max), AxisRange(y_min, y_max))


@dataclass(frozen=True)
class ComplexPoint:
    x: float
    y: float


ORIGIN = ComplexPoint(0.0, 0.0)


def check_canvas(canvas: CanvasDimensions) -> None:
    for name in ("width", "height"):
        value = getattr(canvas, name)
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise PreconditionError(f"canvas.{name}", f"expected an integer, got {value!r}")
        if value < 2:
            raise PreconditionError(f"canvas.{name}", f"must be at least 2 pixels, got {value}")


def check_window(window: PlaneWindow) -> None:
    for name in ("x_range", "y_range"):
        axis = getattr(window, name)
        if not np.isfinite(axis.min) or not np.isfinite(axis.max):
            raise PreconditionError(f"window.{name}", f"bounds must be finite, got [{axis.min}, {axis.max}]")
        if not axis.min < axis.max:
            raise PreconditionError(f"window.{name}", f"min must be below max, got [{axis.min}, {axis.max}]")


def map_coordinate(index: int, extent: int, axis: AxisRange) -> float:
    """Map pixel ``index`` of an axis ``extent`` pixels long into ``axis``.

    Pixel 0 lands on ``axis.min`` and pixel ``extent - 1`` on ``axis.max``.
    """

    if extent < 2:
        raise PreconditionError("extent", f"an axis needs at least 2 pixels, got {extent}")
    if index == extent - 1:
        return float(axis.max)
    lo = float(axis.min)
    hi = float(axis.max)
    return lo + (hi - lo) * (index / (extent - 1))


def axis_samples(extent: int, axis: AxisRange) -> np.ndarray:
    """Vectorised :func:`map_coordinate` over every pixel of an axis."""

    if extent < 2:
        raise PreconditionError("extent", f"an axis needs at least 2 pixels, got {extent}")
    lo = np.float64(axis.min)
    hi = np.float64(axis.max)
    indices = np.arange(extent, dtype=np.float64)
    samples = lo + (hi - lo) * (indices / np.float64(extent - 1))
    samples[-1] = hi
    return samples


def pixel_to_point(canvas: CanvasDimensions, window: PlaneWindow, row: int, col: int) -> ComplexPoint:
    """Return the plane point sampled by pixel ``(row, col)`` of a rendered canvas."""

    if not 0 <= row < canvas.height or not 0 <= col < canvas.width:
        raise PreconditionError(
            "pixel", f"({row}, {col}) lies outside a {canvas.width}x{canvas.height} canvas"
        )
    x = map_coordinate(col, canvas.width, window.x_range)
    y = map_coordinate(row, canvas.height, window.y_range)
    return ComplexPoint(x, y)
