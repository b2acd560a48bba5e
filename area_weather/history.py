"""
Historical weather for one location.

Two tiers, tried in order:

1. RECENT_ATTEMPT - only when the range starts within the last week: ask for
   a 7-day forecast and keep the days inside the range. Cheap, but carries no
   precipitation/humidity/wind. Failures here are logged and skipped.
2. HISTORY_QUERY - the dedicated history endpoint (may need a paid plan).
   Failures here propagate.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Callable, List, Optional, Sequence

from .errors import EmptyResultError, InvalidInputError
from .schemas import HistoricalDailyRecord, HistoricalResult
from .weather_clients import ForecastProvider

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 30
RECENT_WINDOW_DAYS = 7
RECENT_FORECAST_DAYS = 7
UNKNOWN_WIND_DIRECTION = "N/A"


def validate_history_range(location: str, start: date, end: date, today: date) -> None:
    """
    Business rule validations, checked before any upstream call.
    """
    if not location or not location.strip():
        raise InvalidInputError("Location is required.")

    if start > end:
        raise InvalidInputError("Invalid date range: end_date must be >= start_date.")

    if end > today:
        raise InvalidInputError("Invalid date range: end_date cannot be in the future.")

    if (end - start).days > MAX_RANGE_DAYS:
        raise InvalidInputError(f"Date range too large. Please use <= {MAX_RANGE_DAYS} days.")


def predominant_wind_direction(directions: Sequence[str]) -> str:
    """Most frequent hourly label; ties go to the earliest hour."""
    if not directions:
        return UNKNOWN_WIND_DIRECTION
    return Counter(directions).most_common(1)[0][0]


class HistoricalResolver:
    def __init__(self, provider: ForecastProvider, today: Optional[Callable[[], date]] = None):
        self.provider = provider
        # Injectable clock so tests can pin "today".
        self._today = today or date.today

    async def resolve(self, location: str, start: date, end: date) -> HistoricalResult:
        today = self._today()
        validate_history_range(location, start, end, today)

        if (today - start).days <= RECENT_WINDOW_DAYS:
            recent = await self._from_recent_forecast(location, start, end)
            if recent is not None:
                return recent

        return await self._from_history_query(location, start, end)

    async def _from_recent_forecast(self, location: str, start: date, end: date) -> Optional[HistoricalResult]:
        logger.info("Trying the forecast endpoint for recent history of %s", location)
        try:
            forecast = await self.provider.fetch_forecast(location, RECENT_FORECAST_DAYS, False, False)
        except Exception as e:  # noqa: BLE001 - the history tier recovers
            logger.warning(
                "Recent-forecast tier failed for %s, falling back to history: %s", location, e, exc_info=True
            )
            return None

        records: List[HistoricalDailyRecord] = [
            HistoricalDailyRecord(
                date=d.date,
                max_temp=d.max_temp,
                min_temp=d.min_temp,
                avg_temp=(d.max_temp + d.min_temp) / 2,
                condition=d.condition,
                condition_icon=d.condition_icon,
            )
            for d in forecast.daily_forecasts
            if start <= d.date <= end
        ]

        if not records:
            logger.info("Forecast endpoint had no days in %s..%s for %s", start, end, location)
            return None

        logger.info("Got %d historical day(s) from the forecast endpoint", len(records))
        return HistoricalResult(
            location=forecast.location,
            country=forecast.country,
            start_date=start,
            end_date=end,
            daily_data=records,
        )

    async def _from_history_query(self, location: str, start: date, end: date) -> HistoricalResult:
        history = await self.provider.fetch_historical_range(location, start, end)

        if not history.days:
            raise EmptyResultError(f"No historical data available for {location} between {start} and {end}.")

        records = [
            HistoricalDailyRecord(
                date=d.date,
                max_temp=d.max_temp,
                min_temp=d.min_temp,
                avg_temp=d.avg_temp,
                total_precipitation_mm=d.total_precipitation_mm,
                avg_humidity=d.avg_humidity,
                condition=d.condition,
                condition_icon=d.condition_icon,
                # WeatherAPI only exposes the day's max wind.
                avg_wind_kph=d.max_wind_kph,
                wind_direction=predominant_wind_direction(d.hourly_wind_directions),
            )
            for d in history.days
        ]

        return HistoricalResult(
            location=history.location or location,
            country=history.country,
            start_date=start,
            end_date=end,
            daily_data=records,
        )
