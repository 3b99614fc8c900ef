"""
Custom exceptions for the static_maps package.

Only ValidationError, ViewportError, EncodeError and RenderCancelledError
leave a render call. TileFetchError is raised by tile transports and is
absorbed by the tile fetcher, which blanks the failed tile instead.
"""

from typing import Optional


class StaticMapsError(Exception):
    """Base exception class for all static_maps errors."""
    pass


class ValidationError(StaticMapsError):
    """
    Raised when a shape or render option is malformed or missing.

    The offending field name is kept on ``field`` so callers can report
    a structured failure (e.g. ``radius`` for a circle with a zero radius).
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ViewportError(StaticMapsError):
    """
    Raised when no center can be derived for the map.

    This happens when neither an explicit center nor any shape was given,
    or when padding leaves no drawable area on the canvas.
    """
    pass


class TileFetchError(StaticMapsError):
    """
    Raised by a tile transport when a single tile cannot be fetched.

    ``transient`` marks failures worth retrying (timeouts, connection
    resets, HTTP 5xx and 429).
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        transient: bool = False,
    ):
        super().__init__(message)
        self.url = url
        self.status = status
        self.transient = transient


class EncodeError(StaticMapsError):
    """Raised for an unsupported output format or an encoder failure."""
    pass


class RenderCancelledError(StaticMapsError):
    """Raised when the caller's cancel event is set during a render."""
    pass
