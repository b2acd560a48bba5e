"""
Sampling point generation.

A rectangle is represented by a handful of coordinates: the four corners and
the center (when the budget allows), then an interior grid. Output order is
part of the contract: forecasts and aggregation rely on index alignment, and
the predominant-condition tie-break follows this order.
"""

from __future__ import annotations

import math
from typing import List

from .geo import rectangle_center
from .schemas import GeoPoint, GeoRectangle

ANCHOR_COUNT = 5


def generate_sampling_points(rect: GeoRectangle, count: int) -> List[GeoPoint]:
    """
    Build `count` sample points for `rect`.

    - count >= 5: NE, NW, SW, SE corners and the center first, the rest on a grid
    - count < 5: grid only (no anchors)

    `count` is expected to be clamped to [1, 25] by the caller.
    """
    points: List[GeoPoint] = []
    remaining = count

    if count >= ANCHOR_COUNT:
        points.append(GeoPoint(latitude=rect.lat_top_right, longitude=rect.lon_top_right, name="Angolo NE"))
        points.append(GeoPoint(latitude=rect.lat_top_right, longitude=rect.lon_bottom_left, name="Angolo NO"))
        points.append(GeoPoint(latitude=rect.lat_bottom_left, longitude=rect.lon_bottom_left, name="Angolo SO"))
        points.append(GeoPoint(latitude=rect.lat_bottom_left, longitude=rect.lon_top_right, name="Angolo SE"))
        points.append(rectangle_center(rect, name="Centro"))
        remaining -= ANCHOR_COUNT

    if remaining > 0:
        points.extend(_grid_points(rect, remaining))

    return points


def _grid_points(rect: GeoRectangle, budget: int) -> List[GeoPoint]:
    # rows * cols can exceed the budget; extra cells are never emitted.
    rows = math.ceil(math.sqrt(budget))
    cols = math.ceil(budget / rows)

    lat_span = rect.lat_top_right - rect.lat_bottom_left
    lon_span = rect.lon_top_right - rect.lon_bottom_left

    grid: List[GeoPoint] = []
    for r in range(rows):
        for c in range(cols):
            if len(grid) >= budget:
                return grid

            lat_ratio = (r + 1) / (rows + 1)
            lon_ratio = (c + 1) / (cols + 1)
            grid.append(GeoPoint(
                latitude=rect.lat_bottom_left + lat_span * lat_ratio,
                longitude=rect.lon_bottom_left + lon_span * lon_ratio,
                name=f"Punto {r + 1}-{c + 1}",
            ))
    return grid
