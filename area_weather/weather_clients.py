"""
Weather clients.

We intentionally separate API logic from FastAPI endpoints:
- easier to test in isolation (the engine only sees the ForecastProvider protocol)
- cleaner main.py
- one place that knows WeatherAPI.com payload shapes and status codes
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .errors import InvalidInputError, NotFoundError, UpstreamUnavailableError, WeatherError
from .schemas import DailyForecast, HistoricalDay, HistoricalRange, PointForecast

logger = logging.getLogger(__name__)

MIN_FORECAST_DAYS = 1
MAX_FORECAST_DAYS = 10
DEFAULT_FORECAST_DAYS = 3

# WeatherAPI.com error code for "No matching location found."
LOCATION_NOT_FOUND_CODE = 1006


class ForecastProvider(Protocol):
    """Upstream capability consumed by the area engine and the historical resolver."""

    async def fetch_forecast(self, location: str, days: int, air_quality: bool, alerts: bool) -> PointForecast:
        ...

    async def fetch_historical_range(self, location: str, start: date, end: date) -> HistoricalRange:
        ...


class WeatherProvider(ForecastProvider, Protocol):
    """ForecastProvider plus the single-location lookups exposed by the API."""

    async def current_weather(self, location: str) -> PointForecast:
        ...

    async def search_locations(self, query: str) -> List[str]:
        ...


def normalize_forecast_days(days: int) -> int:
    """Out-of-range day counts fall back to the default rather than the nearest bound."""
    if days < MIN_FORECAST_DAYS or days > MAX_FORECAST_DAYS:
        return DEFAULT_FORECAST_DAYS
    return days


class WeatherApiClient:
    """
    WeatherAPI.com wrapper.

    Endpoints used:
    - Forecast (+ astronomy):
        /v1/forecast.json?key=KEY&q=...&days=N&aqi=yes|no&alerts=yes|no&astronomy=yes
    - History range:
        /v1/history.json?key=KEY&q=...&dt=YYYY-MM-DD&end_dt=YYYY-MM-DD
    - Current conditions:
        /v1/current.json?key=KEY&q=...&aqi=no
    - Location search:
        /v1/search.json?key=KEY&q=...

    `q` accepts a place name or "lat,lon"; the area engine always sends coordinates.
    """

    def __init__(
        self,
        api_key: str,
        base: str = "https://api.weatherapi.com/v1",
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base = base.rstrip("/")
        self.timeout_s = timeout_s
        # Injected in tests (httpx.MockTransport); None means real network.
        self.transport = transport

    async def fetch_forecast(self, location: str, days: int, air_quality: bool, alerts: bool) -> PointForecast:
        """
        Multi-day forecast for one location, daily series included.
        """
        if not location or not location.strip():
            raise InvalidInputError("Location is required.")

        params = {
            "q": location,
            "days": normalize_forecast_days(days),
            "aqi": "yes" if air_quality else "no",
            "alerts": "yes" if alerts else "no",
            "astronomy": "yes",
        }
        data = await self._get("forecast.json", params, location)
        forecast = self.to_point_forecast(data, location)

        logger.info(
            "Forecast received for %s: %d day(s)", forecast.location, len(forecast.daily_forecasts)
        )
        return forecast

    async def fetch_historical_range(self, location: str, start: date, end: date) -> HistoricalRange:
        """
        Daily history between start and end (inclusive), with hourly wind samples.
        May require a paid WeatherAPI plan; failures surface as UpstreamUnavailableError.
        """
        params = {"q": location, "dt": start.isoformat(), "end_dt": end.isoformat()}
        data = await self._get("history.json", params, location)
        return self.to_historical_range(data, location)

    async def current_weather(self, location: str) -> PointForecast:
        """
        Current conditions only (no daily series).
        """
        if not location or not location.strip():
            raise InvalidInputError("Location is required.")

        data = await self._get("current.json", {"q": location, "aqi": "no"}, location)
        return self.to_point_forecast(data, location)

    async def search_locations(self, query: str) -> List[str]:
        """
        Autocomplete helper: "name, region, country" strings.
        Short queries and upstream failures both yield an empty list.
        """
        if not query or len(query.strip()) < 3:
            return []

        try:
            data = await self._get("search.json", {"q": query}, query)
        except WeatherError as e:
            logger.error("Location search failed for %r: %s", query, e)
            return []

        if not isinstance(data, list):
            return []

        return [
            f"{item.get('name', '')}, {item.get('region', '')}, {item.get('country', '')}"
            for item in data
            if isinstance(item, dict)
        ]

    # -------------------------
    # HTTP plumbing
    # -------------------------

    async def _get(self, endpoint: str, params: Dict[str, Any], location: str) -> Any:
        # params never carries the API key; it is added below.
        logger.info("WeatherAPI request: %s %s", endpoint, params)

        query = {"key": self.api_key, **params}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                r = await client.get(f"{self.base}/{endpoint}", params=query)
        except httpx.HTTPError as e:
            logger.error("WeatherAPI %s transport failure for %s: %s", endpoint, location, e)
            raise UpstreamUnavailableError(
                f"WeatherAPI request failed for {location}: {e}", location=location
            ) from e

        if r.status_code != 200:
            self._raise_for_status(r, endpoint, location)

        try:
            return r.json()
        except ValueError as e:
            raise UpstreamUnavailableError(
                f"WeatherAPI returned a non-JSON payload for {location}.", location=location
            ) from e

    @staticmethod
    def _raise_for_status(r: httpx.Response, endpoint: str, location: str) -> None:
        """
        400 + code 1006 means the location does not exist; everything else
        (bad key, quota, 5xx) is treated as the upstream being unavailable.
        """
        code = None
        try:
            payload = r.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            code = payload["error"].get("code")

        logger.error("WeatherAPI %s failed (%s): %s", endpoint, r.status_code, r.text)

        if r.status_code == 400 and code == LOCATION_NOT_FOUND_CODE:
            raise NotFoundError(f"Location not found: {location}", location=location)

        raise UpstreamUnavailableError(
            f"WeatherAPI error ({r.status_code}) for {location}: {r.text}", location=location
        )

    # -------------------------
    # Payload mapping
    # -------------------------

    @staticmethod
    def fix_icon_url(icon: Optional[str]) -> str:
        """WeatherAPI returns protocol-relative icon URLs ("//cdn...")."""
        if not icon:
            return ""
        return f"https:{icon}" if icon.startswith("//") else icon

    @staticmethod
    def parse_last_updated(value: Optional[str]) -> datetime:
        """WeatherAPI uses "YYYY-MM-DD HH:MM" local time; fall back to now."""
        try:
            return datetime.strptime(value or "", "%Y-%m-%d %H:%M")
        except ValueError:
            return datetime.now()

    @classmethod
    def to_point_forecast(cls, data: Any, location: str) -> PointForecast:
        try:
            loc = data["location"]
            current = data.get("current") or {}
            condition = current.get("condition") or {}
            forecast_days = (data.get("forecast") or {}).get("forecastday") or []

            return PointForecast(
                location=loc.get("name", location),
                country=loc.get("country", ""),
                last_updated=cls.parse_last_updated(current.get("last_updated")),
                current_temperature=float(current.get("temp_c", 0.0)),
                condition=condition.get("text", ""),
                condition_icon=cls.fix_icon_url(condition.get("icon")),
                humidity=int(current.get("humidity", 0)),
                wind_speed=float(current.get("wind_kph", 0.0)),
                wind_direction=current.get("wind_dir", ""),
                daily_forecasts=[cls._to_daily_forecast(fd) for fd in forecast_days],
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.error("Malformed WeatherAPI forecast payload for %s: %s", location, e)
            raise UpstreamUnavailableError(
                f"Malformed forecast payload for {location}.", location=location
            ) from e

    @classmethod
    def _to_daily_forecast(cls, fd: Dict[str, Any]) -> DailyForecast:
        day = fd["day"]
        astro = fd.get("astro") or {}
        condition = day.get("condition") or {}

        return DailyForecast(
            date=date.fromisoformat(fd["date"]),
            max_temp=float(day["maxtemp_c"]),
            min_temp=float(day["mintemp_c"]),
            avg_temp=float(day.get("avgtemp_c", 0.0)),
            condition=condition.get("text", ""),
            condition_icon=cls.fix_icon_url(condition.get("icon")),
            chance_of_rain=float(day.get("daily_chance_of_rain", 0)),
            sunrise=astro.get("sunrise", ""),
            sunset=astro.get("sunset", ""),
            moonrise=astro.get("moonrise", ""),
            moonset=astro.get("moonset", ""),
            moon_phase=astro.get("moon_phase", ""),
            moon_illumination=int(astro.get("moon_illumination", 0)),
            is_moon_up=astro.get("is_moon_up") == 1,
            is_sun_up=astro.get("is_sun_up") == 1,
        )

    @classmethod
    def to_historical_range(cls, data: Any, location: str) -> HistoricalRange:
        try:
            loc = data.get("location") or {}
            forecast_days = (data.get("forecast") or {}).get("forecastday") or []

            days: List[HistoricalDay] = []
            for fd in forecast_days:
                day = fd["day"]
                condition = day.get("condition") or {}
                days.append(HistoricalDay(
                    date=date.fromisoformat(fd["date"]),
                    max_temp=float(day["maxtemp_c"]),
                    min_temp=float(day["mintemp_c"]),
                    avg_temp=float(day.get("avgtemp_c", 0.0)),
                    total_precipitation_mm=float(day.get("totalprecip_mm", 0.0)),
                    avg_humidity=float(day.get("avghumidity", 0.0)),
                    condition=condition.get("text", ""),
                    condition_icon=cls.fix_icon_url(condition.get("icon")),
                    max_wind_kph=float(day.get("maxwind_kph", 0.0)),
                    hourly_wind_directions=[h.get("wind_dir", "") for h in (fd.get("hour") or [])],
                ))

            return HistoricalRange(
                location=loc.get("name", ""),
                country=loc.get("country", ""),
                days=days,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.error("Malformed WeatherAPI history payload for %s: %s", location, e)
            raise UpstreamUnavailableError(
                f"Malformed history payload for {location}.", location=location
            ) from e
