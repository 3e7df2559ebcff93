"""Public API for escape-time fractal rendering."""

from .compositor import ByteOrder, check_palette, composite, pack_pixel
from .errors import FractalError, PreconditionError, SurfaceError
from .escape import (
    BAILOUT,
    escape_time,
    julia_iterations,
    mandelbrot_early_bailout,
    mandelbrot_iterations,
)
from .geometry import (
    ORIGIN,
    AxisRange,
    CanvasDimensions,
    ComplexPoint,
    PlaneWindow,
    map_coordinate,
    pixel_to_point,
)
from .palette import colormap_palette, palette_from_json, palette_to_json
from .renderer import FractalKind, iteration_grid, render, render_julia, render_mandelbrot
from .surface import ImageSurface

__all__ = [
    "BAILOUT",
    "ORIGIN",
    "AxisRange",
    "ByteOrder",
    "CanvasDimensions",
    "ComplexPoint",
    "FractalError",
    "FractalKind",
    "ImageSurface",
    "PlaneWindow",
    "PreconditionError",
    "SurfaceError",
    "check_palette",
    "colormap_palette",
    "composite",
    "escape_time",
    "iteration_grid",
    "julia_iterations",
    "mandelbrot_early_bailout",
    "mandelbrot_iterations",
    "map_coordinate",
    "pack_pixel",
    "palette_from_json",
    "palette_to_json",
    "pixel_to_point",
    "render",
    "render_julia",
    "render_mandelbrot",
]
