"""Test configuration and fixtures."""

import os

# Settings require an API key at import time.
os.environ.setdefault("WEATHERAPI_KEY", "test-key")

from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from area_weather.errors import NotFoundError, UpstreamUnavailableError
from area_weather.main import app, get_service
from area_weather.schemas import DailyForecast, HistoricalDay, HistoricalRange, PointForecast
from area_weather.services import AreaWeatherService

# Fixed "today" for everything date-relative.
TODAY = date(2025, 6, 15)


def make_day(
    day: date,
    max_temp: float = 20.0,
    min_temp: float = 10.0,
    condition: str = "Clear",
    chance_of_rain: float = 0.0,
) -> DailyForecast:
    return DailyForecast(
        date=day,
        max_temp=max_temp,
        min_temp=min_temp,
        avg_temp=(max_temp + min_temp) / 2,
        condition=condition,
        chance_of_rain=chance_of_rain,
        sunrise="05:30 AM",
        sunset="08:45 PM",
        moon_phase="Waxing Gibbous",
    )


def make_forecast(
    days: List[DailyForecast],
    location: str = "Somewhere",
    country: str = "Italy",
    last_updated: Optional[datetime] = None,
) -> PointForecast:
    return PointForecast(
        location=location,
        country=country,
        last_updated=last_updated or datetime(2025, 6, 15, 8, 0),
        daily_forecasts=days,
    )


def make_history_day(day: date, wind_directions: Optional[List[str]] = None, **overrides) -> HistoricalDay:
    values = dict(
        date=day,
        max_temp=25.0,
        min_temp=15.0,
        avg_temp=19.5,
        total_precipitation_mm=2.4,
        avg_humidity=64.0,
        condition="Patchy rain possible",
        condition_icon="https://cdn.weatherapi.com/weather/64x64/day/176.png",
        max_wind_kph=18.7,
        hourly_wind_directions=wind_directions if wind_directions is not None else ["N", "NE", "N"],
    )
    values.update(overrides)
    return HistoricalDay(**values)


ForecastAnswer = Union[PointForecast, Exception]


class FakeProvider:
    """
    Scripted WeatherProvider.

    - forecasts: location -> PointForecast or exception; `default_forecast` for the rest
    - history: HistoricalRange or exception returned by fetch_historical_range
    Every call is recorded for assertions.
    """

    def __init__(
        self,
        forecasts: Optional[Dict[str, ForecastAnswer]] = None,
        default_forecast: Optional[Union[ForecastAnswer, Callable[[str], ForecastAnswer]]] = None,
        history: Optional[Union[HistoricalRange, Exception]] = None,
        locations: Optional[List[str]] = None,
    ):
        self.forecasts = forecasts or {}
        self.default_forecast = default_forecast
        self.history = history
        self.locations = locations or []
        self.forecast_calls: List[tuple] = []
        self.history_calls: List[tuple] = []
        self.current_calls: List[str] = []

    async def fetch_forecast(self, location, days, air_quality, alerts):
        self.forecast_calls.append((location, days, air_quality, alerts))
        answer = self.forecasts.get(location, self.default_forecast)
        if callable(answer) and not isinstance(answer, (PointForecast, Exception)):
            answer = answer(location)
        if answer is None:
            raise NotFoundError(f"Location not found: {location}", location=location)
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def fetch_historical_range(self, location, start, end):
        self.history_calls.append((location, start, end))
        if self.history is None:
            raise UpstreamUnavailableError("history endpoint not scripted", location=location)
        if isinstance(self.history, Exception):
            raise self.history
        return self.history

    async def current_weather(self, location):
        self.current_calls.append(location)
        answer = self.forecasts.get(location, self.default_forecast)
        if answer is None:
            raise NotFoundError(f"Location not found: {location}", location=location)
        if isinstance(answer, Exception):
            raise answer
        return answer.model_copy(update={"daily_forecasts": []})

    async def search_locations(self, query):
        return [loc for loc in self.locations if query.lower() in loc.lower()]


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def uniform_forecast():
    """Three identical days starting today: max 20, min 10, Clear."""
    return make_forecast([make_day(TODAY + timedelta(days=i)) for i in range(3)])


@pytest.fixture
def provider(uniform_forecast):
    return FakeProvider(default_forecast=uniform_forecast)


@pytest.fixture
def service(provider):
    return AreaWeatherService(provider, max_concurrency=1, today=lambda: TODAY)


@pytest.fixture(scope="function")
def client(service):
    """Create a test client wired to the fake provider."""
    app.dependency_overrides[get_service] = lambda: service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
