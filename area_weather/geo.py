"""
Geometry helpers for rectangular areas.

Pure functions, no I/O. Distances use the haversine formula on a spherical
Earth; rectangle width/height are measured along the bottom and left edges,
which ignores the narrowing of the top edge at high latitudes.
"""

from __future__ import annotations

import math
from typing import Tuple

from .schemas import GeoArea, GeoPoint, GeoRectangle

EARTH_RADIUS_KM = 6371.0


def validate_coordinate(lat: float, lon: float) -> bool:
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def validate_rectangle(rect: GeoRectangle) -> bool:
    """
    Both corners must be valid coordinates and the top-right corner must be
    north-east of (or equal to) the bottom-left one.
    """
    if not validate_coordinate(rect.lat_top_right, rect.lon_top_right):
        return False
    if not validate_coordinate(rect.lat_bottom_left, rect.lon_bottom_left):
        return False
    return rect.lat_top_right >= rect.lat_bottom_left and rect.lon_top_right >= rect.lon_bottom_left


def distance_km(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
    """Great-circle distance between two coordinates, in kilometers."""
    d_lat = math.radians(lat_b - lat_a)
    d_lon = math.radians(lon_b - lon_a)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat_a)) * math.cos(math.radians(lat_b)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def rectangle_center(rect: GeoRectangle, name: str = "") -> GeoPoint:
    return GeoPoint(
        latitude=(rect.lat_top_right + rect.lat_bottom_left) / 2,
        longitude=(rect.lon_top_right + rect.lon_bottom_left) / 2,
        name=name,
    )


def rectangle_dimensions(rect: GeoRectangle) -> Tuple[float, float]:
    """(width_km, height_km), both measured from the bottom-left corner."""
    width = distance_km(
        rect.lat_bottom_left, rect.lon_bottom_left,
        rect.lat_bottom_left, rect.lon_top_right,
    )
    height = distance_km(
        rect.lat_bottom_left, rect.lon_bottom_left,
        rect.lat_top_right, rect.lon_bottom_left,
    )
    return width, height


def build_area(rect: GeoRectangle) -> GeoArea:
    width, height = rectangle_dimensions(rect)
    return GeoArea(
        lat_top_right=rect.lat_top_right,
        lon_top_right=rect.lon_top_right,
        lat_bottom_left=rect.lat_bottom_left,
        lon_bottom_left=rect.lon_bottom_left,
        center=rectangle_center(rect),
        width_km=width,
        height_km=height,
    )
