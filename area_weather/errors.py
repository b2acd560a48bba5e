"""
Error taxonomy shared by the engine, the upstream client and the API layer.

Routes map these to HTTP status codes; nothing below main.py knows about HTTP.
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import GeoPoint


class WeatherError(RuntimeError):
    """Raised for user-facing weather lookup failures."""
    pass


class InvalidInputError(WeatherError):
    """Malformed rectangle, bad date range, blank location. Never retried."""


class UpstreamUnavailableError(WeatherError):
    """Transport, rate-limit or payload failure from the forecast provider."""

    def __init__(self, message: str, location: Optional[str] = None, point: Optional["GeoPoint"] = None):
        super().__init__(message)
        self.location = location
        self.point = point


class NotFoundError(WeatherError):
    """The provider could not resolve the location."""

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.location = location


class EmptyResultError(WeatherError):
    """The provider answered but returned no usable records."""
