import numpy as np
import pytest

from fractals.errors import PreconditionError
from fractals.escape import julia_iterations, mandelbrot_iterations
from fractals.geometry import CanvasDimensions, ComplexPoint, PlaneWindow, pixel_to_point
from fractals.renderer import FractalKind, iteration_grid, render, render_julia, render_mandelbrot

WINDOW = PlaneWindow.from_bounds(-2.25, 0.75, -1.5, 1.5)


def flat_palette(max_iterations, colour=(11, 22, 33)):
    return [list(colour)] * (max_iterations + 1)


def ramp_palette(max_iterations):
    return [[n, 0, 0] for n in range(max_iterations + 1)]


def test_buffer_shape_and_byte_order():
    canvas = CanvasDimensions(width=4, height=3)

    little = render_mandelbrot(canvas, WINDOW, 20, flat_palette(20), "little")
    big = render_mandelbrot(canvas, WINDOW, 20, flat_palette(20), "big")

    assert isinstance(little, bytes)
    assert len(little) == 48
    assert len(big) == 48
    for offset in range(0, 48, 4):
        assert little[offset:offset + 4] == bytes([11, 22, 33, 0xFF])
        assert big[offset:offset + 4] == bytes([0xFF, 33, 22, 11])


def test_mandelbrot_grid_matches_scalar_evaluator():
    canvas = CanvasDimensions(width=23, height=17)
    max_iterations = 60

    grid = iteration_grid(FractalKind.MANDELBROT, canvas, WINDOW, max_iterations)

    assert grid.shape == (17, 23)
    for row in range(canvas.height):
        for col in range(canvas.width):
            point = pixel_to_point(canvas, WINDOW, row, col)
            assert grid[row, col] == mandelbrot_iterations(point, max_iterations)


def test_julia_grid_matches_scalar_evaluator():
    canvas = CanvasDimensions(width=19, height=13)
    window = PlaneWindow.from_bounds(-2.0, 2.0, -1.5, 1.5)
    seed = ComplexPoint(-0.8, 0.156)
    max_iterations = 80

    grid = iteration_grid("julia", canvas, window, max_iterations, seed=seed)

    for row in range(canvas.height):
        for col in range(canvas.width):
            point = pixel_to_point(canvas, window, row, col)
            assert grid[row, col] == julia_iterations(point, seed, max_iterations)


def test_julia_known_points():
    canvas = CanvasDimensions(width=7, height=7)
    window = PlaneWindow.from_bounds(-3.0, 3.0, -3.0, 3.0)

    grid = iteration_grid(FractalKind.JULIA, canvas, window, 30)

    # With the seed at the origin the unit disc is invariant.
    assert grid[3, 3] == 30
    assert grid[3, 4] == 30
    assert grid[0, 0] == 0
    assert grid[6, 6] == 0


@pytest.mark.parametrize("kind", list(FractalKind))
def test_iteration_counts_stay_in_range(kind):
    canvas = CanvasDimensions(width=31, height=21)
    grid = iteration_grid(kind, canvas, WINDOW, 25, seed=ComplexPoint(-0.4, 0.6))
    assert grid.min() >= 0
    assert grid.max() <= 25


def test_zero_iterations():
    canvas = CanvasDimensions(width=5, height=4)
    grid = iteration_grid(FractalKind.MANDELBROT, canvas, WINDOW, 0)
    assert not grid.any()


def test_palette_is_indexed_by_iteration_count():
    canvas = CanvasDimensions(width=12, height=9)
    max_iterations = 50

    grid = iteration_grid(FractalKind.MANDELBROT, canvas, WINDOW, max_iterations)
    buffer = render_mandelbrot(canvas, WINDOW, max_iterations, ramp_palette(max_iterations), "little")

    reds = np.frombuffer(buffer, dtype=np.uint8)[0::4].reshape(9, 12)
    np.testing.assert_array_equal(reds, grid)


def test_render_is_idempotent():
    canvas = CanvasDimensions(width=16, height=10)
    seed = ComplexPoint(0.285, 0.01)
    palette = np.random.default_rng(3).integers(0, 256, size=(41, 3))

    first = render_julia(canvas, WINDOW, seed, 40, palette, "big")
    second = render_julia(canvas, WINDOW, seed, 40, palette, "big")
    assert first == second


def test_render_alpha_from_palette():
    canvas = CanvasDimensions(width=3, height=2)
    palette = [[1, 2, 3, 4]] * 11

    buffer = render(FractalKind.MANDELBROT, canvas, WINDOW, 10, palette, "little", alpha_from_palette=True)
    assert buffer == bytes([1, 2, 3, 4]) * 6


def test_short_palette_is_rejected():
    canvas = CanvasDimensions(width=4, height=3)
    with pytest.raises(PreconditionError) as excinfo:
        render_mandelbrot(canvas, WINDOW, 20, flat_palette(19), "little")
    assert excinfo.value.precondition == "palette"


@pytest.mark.parametrize(
    "canvas, window, max_iterations, field",
    [
        (CanvasDimensions(1, 3), WINDOW, 10, "canvas.width"),
        (CanvasDimensions(3, 1), WINDOW, 10, "canvas.height"),
        (CanvasDimensions(3, 3), PlaneWindow.from_bounds(1.0, -1.0, -1.0, 1.0), 10, "window.x_range"),
        (CanvasDimensions(3, 3), PlaneWindow.from_bounds(-1.0, 1.0, 0.5, 0.5), 10, "window.y_range"),
        (CanvasDimensions(3, 3), WINDOW, -1, "max_iterations"),
        (CanvasDimensions(3, 3), WINDOW, 2.5, "max_iterations"),
        (CanvasDimensions(3, 3), WINDOW, True, "max_iterations"),
    ],
)
def test_preconditions(canvas, window, max_iterations, field):
    with pytest.raises(PreconditionError) as excinfo:
        render_mandelbrot(canvas, window, max_iterations, flat_palette(10), "little")
    assert excinfo.value.precondition == field


def test_unknown_kind():
    with pytest.raises(PreconditionError) as excinfo:
        iteration_grid("burning-ship", CanvasDimensions(3, 3), WINDOW, 10)
    assert excinfo.value.precondition == "kind"


def test_non_finite_seed():
    with pytest.raises(PreconditionError) as excinfo:
        render_julia(CanvasDimensions(3, 3), WINDOW, ComplexPoint(float("inf"), 0.0), 10, flat_palette(10), "little")
    assert excinfo.value.precondition == "seed"


def test_unknown_byte_order():
    with pytest.raises(PreconditionError):
        render_mandelbrot(CanvasDimensions(3, 3), WINDOW, 10, flat_palette(10), "pdp")
