"""
Service functions.

Why keep this separate from main.py?
- main.py stays readable (routing + request/response)
- the two core operations become easy to unit test with a fake provider
- central place for validations and clamping (rectangle rules, point budget, etc.)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional

from .aggregation import aggregate_forecasts
from .errors import InvalidInputError
from .geo import validate_rectangle
from .history import HistoricalResolver
from .orchestrator import PointForecastOrchestrator
from .sampling import generate_sampling_points
from .schemas import AreaForecastRequest, AreaForecastResult, ForecastRequest, HistoricalResult, PointForecast
from .weather_clients import WeatherProvider

logger = logging.getLogger(__name__)

# WeatherAPI serves up to 14 days depending on the plan; more points means
# more upstream calls per area request.
MIN_AREA_DAYS, MAX_AREA_DAYS = 1, 14
MIN_SAMPLING_POINTS, MAX_SAMPLING_POINTS = 1, 25


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class AreaWeatherService:
    """
    Entry points used by the API:
    - get_area_forecast: rectangle -> sampling points -> per-point forecasts -> aggregate
    - get_historical_data: two-tier historical resolution
    - single-location pass-throughs (forecast, current, search)
    """

    def __init__(
        self,
        provider: WeatherProvider,
        max_concurrency: int = 4,
        today: Optional[Callable[[], date]] = None,
    ):
        self.provider = provider
        self.orchestrator = PointForecastOrchestrator(provider, max_concurrency=max_concurrency)
        self.resolver = HistoricalResolver(provider, today=today)
        self._today = today or date.today

    async def get_area_forecast(self, request: AreaForecastRequest) -> AreaForecastResult:
        if not validate_rectangle(request):
            raise InvalidInputError(
                "Coordinates do not form a valid rectangle: both corners must be valid coordinates, "
                "lat_top_right >= lat_bottom_left and lon_top_right >= lon_bottom_left."
            )

        # Out-of-range values are clamped silently rather than rejected.
        days = clamp(request.days, MIN_AREA_DAYS, MAX_AREA_DAYS)
        count = clamp(request.sampling_points, MIN_SAMPLING_POINTS, MAX_SAMPLING_POINTS)

        points = generate_sampling_points(request, count)
        logger.info("Area forecast: %d sampling point(s), %d day(s)", len(points), days)

        forecasts = await self.orchestrator.fetch_all(points, days, request.air_quality, request.alerts)
        return aggregate_forecasts(forecasts, request, points, today=self._today())

    async def get_historical_data(self, location: str, start: date, end: date) -> HistoricalResult:
        return await self.resolver.resolve(location, start, end)

    async def get_forecast(self, request: ForecastRequest) -> PointForecast:
        return await self.provider.fetch_forecast(
            request.location, request.days, request.air_quality, request.alerts
        )

    async def get_current_weather(self, location: str) -> PointForecast:
        return await self.provider.current_weather(location)

    async def search_locations(self, query: str) -> List[str]:
        return await self.provider.search_locations(query)
