"""Exceptions raised while rendering and displaying fractal images."""

from __future__ import annotations


class FractalError(Exception):
    """Base class for all rendering failures."""


class PreconditionError(FractalError, ValueError):
    """An input to a render call is outside the range the engine accepts."""

    def __init__(self, precondition: str, message: str) -> None:
        super().__init__(f"{precondition}: {message}")
        self.precondition = precondition


class SurfaceError(FractalError):
    """The display surface rejected a pixel buffer."""
