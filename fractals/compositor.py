"""Palette lookup and RGBA byte packing for rendered iteration grids."""

from __future__ import annotations

import enum
import sys

import numpy as np

from .errors import PreconditionError

OPAQUE = 0xFF


class ByteOrder(enum.Enum):
    """Memory layout expected by the consuming display surface."""

    LITTLE = "little"
    BIG = "big"

    @classmethod
    def native(cls) -> "ByteOrder":
        return cls(sys.byteorder)


# Indices into an (R, G, B, A) pixel, in the order they are written to memory.
_CHANNEL_ORDER = {
    ByteOrder.LITTLE: (0, 1, 2, 3),
    ByteOrder.BIG: (3, 2, 1, 0),
}


def check_byte_order(byte_order) -> ByteOrder:
    try:
        return ByteOrder(byte_order)
    except ValueError:
        raise PreconditionError("byte_order", f"expected 'little' or 'big', got {byte_order!r}") from None


def check_palette(palette, max_iterations: int, *, alpha_from_palette: bool = False) -> np.ndarray:
    """Validate ``palette`` against ``max_iterations`` and return it as an int64 array.

    Every iteration count in ``[0, max_iterations]`` needs an entry, so the
    palette must hold at least ``max_iterations + 1`` colours.
    """

    try:
        colours = np.asarray(palette)
    except ValueError as exc:
        raise PreconditionError("palette", f"entries must all have the same number of channels ({exc})") from None

    if colours.ndim != 2:
        raise PreconditionError("palette", f"expected a sequence of colour triples, got an array of shape {colours.shape}")
    if colours.shape[0] == 0:
        raise PreconditionError("palette", "palette is empty")
    channels = colours.shape[1]
    if channels not in (3, 4):
        raise PreconditionError("palette", f"colours need 3 or 4 channels, got {channels}")
    if alpha_from_palette and channels != 4:
        raise PreconditionError("palette", "alpha_from_palette requires 4-channel colours")
    if colours.shape[0] < max_iterations + 1:
        raise PreconditionError(
            "palette",
            f"{colours.shape[0]} colours cannot cover iteration counts 0..{max_iterations}",
        )

    if colours.dtype.kind == "f":
        if not np.all(np.isfinite(colours)) or np.any(colours != np.floor(colours)):
            raise PreconditionError("palette", "channel values must be whole numbers")
    elif colours.dtype.kind not in "iu":
        raise PreconditionError("palette", f"channel values must be integers, got dtype {colours.dtype}")

    if np.any(colours < 0):
        raise PreconditionError("palette", "channel values must not be negative")
    if colours.dtype.kind in "uf" and colours.max() >= 2**63:
        # Only the low byte of a channel reaches the pixel buffer.
        colours = np.mod(colours, 256)
    return colours.astype(np.int64)


def _rgba(colours: np.ndarray, alpha_from_palette: bool) -> np.ndarray:
    """Truncate channels to their low byte and attach the alpha channel."""

    rgb = (colours[..., :3] & 0xFF).astype(np.uint8)
    if alpha_from_palette:
        alpha = (colours[..., 3] & 0xFF).astype(np.uint8)
    else:
        alpha = np.full(rgb.shape[:-1], OPAQUE, dtype=np.uint8)
    return np.concatenate((rgb, alpha[..., np.newaxis]), axis=-1)


def pack_pixel(colour, byte_order=ByteOrder.LITTLE, *, alpha_from_palette: bool = False) -> bytes:
    """Pack a single palette colour into four bytes for ``byte_order``."""

    order = check_byte_order(byte_order)
    colours = check_palette([colour], 0, alpha_from_palette=alpha_from_palette)
    rgba = _rgba(colours[0], alpha_from_palette)
    return bytes(rgba[list(_CHANNEL_ORDER[order])])


def composite(iterations: np.ndarray, palette, byte_order=ByteOrder.LITTLE, *, alpha_from_palette: bool = False) -> bytes:
    """Colour a ``(height, width)`` grid of iteration counts into a row-major RGBA buffer."""

    order = check_byte_order(byte_order)
    iterations = np.asarray(iterations)
    if iterations.ndim != 2:
        raise PreconditionError("iterations", f"expected a 2-D grid, got shape {iterations.shape}")
    max_iterations = int(iterations.max()) if iterations.size else 0
    if iterations.size and int(iterations.min()) < 0:
        raise PreconditionError("iterations", "iteration counts must not be negative")
    colours = check_palette(palette, max_iterations, alpha_from_palette=alpha_from_palette)

    pixels = _rgba(colours[iterations], alpha_from_palette)
    pixels = pixels[..., list(_CHANNEL_ORDER[order])]
    return np.ascontiguousarray(pixels).tobytes()
