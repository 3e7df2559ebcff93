"""Pillow-backed display surface that receives rendered pixel buffers."""

from __future__ import annotations

import numpy as np
import PIL.Image

from .compositor import ByteOrder, check_byte_order
from .errors import SurfaceError
from .geometry import CanvasDimensions


class ImageSurface:
    """A fixed-size RGBA canvas that pixel buffers are blitted onto at (0, 0)."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._image = PIL.Image.new("RGBA", (width, height), (0, 0, 0, 255))

    @property
    def image(self) -> PIL.Image.Image:
        return self._image

    def put_image_data(self, buffer: bytes, canvas: CanvasDimensions, byte_order=ByteOrder.LITTLE) -> None:
        if (canvas.width, canvas.height) != (self.width, self.height):
            raise SurfaceError(
                f"buffer is {canvas.width}x{canvas.height} but the surface is {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        if len(buffer) != expected:
            raise SurfaceError(f"expected {expected} bytes of pixel data, got {len(buffer)}")

        pixels = np.frombuffer(buffer, dtype=np.uint8).reshape(self.height, self.width, 4)
        if check_byte_order(byte_order) is ByteOrder.BIG:
            pixels = pixels[..., ::-1]
        self._image.paste(PIL.Image.fromarray(np.ascontiguousarray(pixels)), (0, 0))

    def show(self, title: str | None = None) -> None:
        self._image.show(title=title)
