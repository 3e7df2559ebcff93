"""Palette construction and serialisation."""

from __future__ import annotations

import json

import matplotlib
import matplotlib.colors
import numpy as np

from .compositor import check_palette
from .errors import PreconditionError


def get_colormap(name: str):
    try:
        return matplotlib.colormaps[name]
    except KeyError:
        raise PreconditionError("colormap", f"unknown matplotlib colormap {name!r}") from None


def colormap_palette(
    name: str,
    max_iterations: int,
    *,
    inside_colour: str = "#000000",
    invert: bool = False,
) -> np.ndarray:
    """Build a palette with one colour per iteration count ``0..max_iterations``.

    Escaping counts sample the colormap evenly; the final entry, used for
    points that never escape, is ``inside_colour``.
    """

    if max_iterations < 0:
        raise PreconditionError("max_iterations", f"must not be negative, got {max_iterations}")
    cmap = get_colormap(name)
    try:
        inside_rgb = matplotlib.colors.to_rgb(inside_colour)
    except ValueError:
        raise PreconditionError("inside_colour", f"cannot parse colour {inside_colour!r}") from None

    positions = np.linspace(0.0, 1.0, max_iterations, dtype=np.float64)
    if invert:
        positions = 1.0 - positions
    rgb = np.array(cmap(positions), dtype=np.float64)[:, :3]
    rgb = np.concatenate((rgb, np.array([inside_rgb], dtype=np.float64)), axis=0)
    return np.uint8(np.clip(rgb * 255, 0, 255))


def palette_from_json(text: str) -> np.ndarray:
    """Decode a palette serialised as a JSON list of channel lists."""

    try:
        colours = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PreconditionError("palette", f"invalid JSON: {exc}") from None
    return check_palette(colours, 0)


def palette_to_json(palette) -> str:
    return json.dumps(check_palette(palette, 0).tolist())
