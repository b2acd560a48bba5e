"""
Per-point forecast retrieval for an area.

One forecast per sampling point, returned in sampling-point order. The first
failure aborts the whole batch: callers never see a partial list.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

from .errors import UpstreamUnavailableError, WeatherError
from .schemas import GeoPoint, PointForecast
from .weather_clients import ForecastProvider

logger = logging.getLogger(__name__)


def point_location(point: GeoPoint) -> str:
    """WeatherAPI accepts "lat,lon" as a location query."""
    return f"{point.latitude},{point.longitude}"


class PointForecastOrchestrator:
    """
    Bounded fan-out over a ForecastProvider.

    max_concurrency=1 is strictly sequential: once a point fails, no later
    point is requested.
    """

    def __init__(self, provider: ForecastProvider, max_concurrency: int = 4):
        self.provider = provider
        self.max_concurrency = max(1, max_concurrency)

    async def fetch_all(
        self,
        points: Sequence[GeoPoint],
        days: int,
        air_quality: bool = False,
        alerts: bool = False,
    ) -> List[PointForecast]:
        if not points:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)
        failed = False

        async def fetch_one(point: GeoPoint) -> PointForecast | None:
            nonlocal failed
            async with semaphore:
                # A sibling already failed; this result would be discarded anyway.
                if failed:
                    return None
                try:
                    return await self._fetch_point(point, days, air_quality, alerts)
                except BaseException:
                    failed = True
                    raise

        tasks = [asyncio.ensure_future(fetch_one(p)) for p in points]
        try:
            # gather preserves input order and raises the first error by completion.
            results = await asyncio.gather(*tasks)
        except BaseException:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return list(results)

    async def _fetch_point(self, point: GeoPoint, days: int, air_quality: bool, alerts: bool) -> PointForecast:
        location = point_location(point)
        try:
            return await self.provider.fetch_forecast(location, days, air_quality, alerts)
        except WeatherError as e:
            logger.error("Forecast failed for sampling point %s (%s): %s", point.name, location, e)
            raise UpstreamUnavailableError(
                f"Unable to get the forecast for sampling point {point.name} ({location}): {e}",
                location=location,
                point=point,
            ) from e
