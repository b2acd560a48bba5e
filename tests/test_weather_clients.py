"""Tests for the WeatherAPI.com client, against a mocked transport."""

import asyncio
from datetime import date, datetime

import httpx
import pytest

from area_weather.errors import InvalidInputError, NotFoundError, UpstreamUnavailableError
from area_weather.weather_clients import WeatherApiClient, normalize_forecast_days

BASE = "https://weatherapi.test/v1"

FORECAST_PAYLOAD = {
    "location": {"name": "Rome", "region": "Lazio", "country": "Italy"},
    "current": {
        "last_updated": "2025-06-15 08:30",
        "temp_c": 24.0,
        "condition": {"text": "Sunny", "icon": "//cdn.weatherapi.com/weather/64x64/day/113.png"},
        "humidity": 50,
        "wind_kph": 11.2,
        "wind_dir": "NW",
    },
    "forecast": {
        "forecastday": [
            {
                "date": "2025-06-15",
                "day": {
                    "maxtemp_c": 30.1,
                    "mintemp_c": 18.4,
                    "avgtemp_c": 24.0,
                    "daily_chance_of_rain": 10,
                    "condition": {"text": "Sunny", "icon": "//cdn.weatherapi.com/weather/64x64/day/113.png"},
                },
                "astro": {
                    "sunrise": "05:34 AM",
                    "sunset": "08:48 PM",
                    "moonrise": "10:12 PM",
                    "moonset": "06:40 AM",
                    "moon_phase": "Waning Gibbous",
                    "moon_illumination": 78,
                    "is_moon_up": 0,
                    "is_sun_up": 1,
                },
            }
        ]
    },
}

HISTORY_PAYLOAD = {
    "location": {"name": "Rome", "country": "Italy"},
    "forecast": {
        "forecastday": [
            {
                "date": "2025-05-01",
                "day": {
                    "maxtemp_c": 21.0,
                    "mintemp_c": 11.0,
                    "avgtemp_c": 16.2,
                    "totalprecip_mm": 3.1,
                    "avghumidity": 71,
                    "maxwind_kph": 22.3,
                    "condition": {"text": "Light rain", "icon": "//cdn.weatherapi.com/weather/64x64/day/296.png"},
                },
                "hour": [{"wind_dir": "SW"}, {"wind_dir": "SW"}, {"wind_dir": "W"}],
            }
        ]
    },
}


def make_client(handler):
    return WeatherApiClient("secret", base=BASE, transport=httpx.MockTransport(handler))


class Recorder:
    """MockTransport handler that records requests and replies with a fixed response."""

    def __init__(self, status_code=200, json=None, content=None):
        self.status_code = status_code
        self.json = json
        self.content = content
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json)


@pytest.mark.parametrize("days,expected", [(1, 1), (3, 3), (10, 10), (0, 3), (-2, 3), (11, 3), (14, 3)])
def test_normalize_forecast_days(days, expected):
    assert normalize_forecast_days(days) == expected


def test_fetch_forecast_maps_payload():
    handler = Recorder(json=FORECAST_PAYLOAD)

    forecast = asyncio.run(make_client(handler).fetch_forecast("41.9,12.5", 3, False, False))

    assert forecast.location == "Rome"
    assert forecast.country == "Italy"
    assert forecast.last_updated == datetime(2025, 6, 15, 8, 30)
    assert forecast.condition_icon == "https://cdn.weatherapi.com/weather/64x64/day/113.png"
    assert forecast.humidity == 50

    day = forecast.daily_forecasts[0]
    assert day.date == date(2025, 6, 15)
    assert day.max_temp == 30.1
    assert day.chance_of_rain == 10
    assert day.moon_illumination == 78
    assert day.is_sun_up is True
    assert day.is_moon_up is False


def test_fetch_forecast_query_parameters():
    handler = Recorder(json=FORECAST_PAYLOAD)

    asyncio.run(make_client(handler).fetch_forecast("Rome", 12, True, False))

    request = handler.requests[0]
    assert request.url.path == "/v1/forecast.json"
    assert request.url.params["key"] == "secret"
    assert request.url.params["q"] == "Rome"
    # out of range -> default, not the nearest bound
    assert request.url.params["days"] == "3"
    assert request.url.params["aqi"] == "yes"
    assert request.url.params["alerts"] == "no"
    assert request.url.params["astronomy"] == "yes"


def test_blank_location_is_rejected_without_request():
    handler = Recorder(json=FORECAST_PAYLOAD)

    with pytest.raises(InvalidInputError):
        asyncio.run(make_client(handler).fetch_forecast("  ", 3, False, False))

    assert handler.requests == []


def test_unknown_location_is_not_found():
    handler = Recorder(400, json={"error": {"code": 1006, "message": "No matching location found."}})

    with pytest.raises(NotFoundError) as exc_info:
        asyncio.run(make_client(handler).fetch_forecast("Atlantis", 3, False, False))

    assert exc_info.value.location == "Atlantis"


@pytest.mark.parametrize(
    "status_code,body",
    [
        (400, {"error": {"code": 1003, "message": "Parameter q is missing."}}),
        (401, {"error": {"code": 2006, "message": "API key is invalid."}}),
        (403, {"error": {"code": 2007, "message": "API key has exceeded calls per month quota."}}),
        (503, None),
    ],
)
def test_other_http_errors_are_upstream_failures(status_code, body):
    handler = Recorder(status_code, json=body)

    with pytest.raises(UpstreamUnavailableError):
        asyncio.run(make_client(handler).fetch_forecast("Rome", 3, False, False))


def test_transport_error_is_upstream_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        asyncio.run(make_client(handler).fetch_forecast("Rome", 3, False, False))

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_non_json_body_is_upstream_failure():
    handler = Recorder(content=b"<html>maintenance</html>")

    with pytest.raises(UpstreamUnavailableError):
        asyncio.run(make_client(handler).fetch_forecast("Rome", 3, False, False))


def test_malformed_payload_is_upstream_failure():
    handler = Recorder(json={"forecast": {"forecastday": []}})

    with pytest.raises(UpstreamUnavailableError):
        asyncio.run(make_client(handler).fetch_forecast("Rome", 3, False, False))


def test_fetch_historical_range():
    handler = Recorder(json=HISTORY_PAYLOAD)

    history = asyncio.run(make_client(handler).fetch_historical_range("Rome", date(2025, 5, 1), date(2025, 5, 3)))

    request = handler.requests[0]
    assert request.url.path == "/v1/history.json"
    assert request.url.params["dt"] == "2025-05-01"
    assert request.url.params["end_dt"] == "2025-05-03"

    day = history.days[0]
    assert history.location == "Rome"
    assert day.total_precipitation_mm == 3.1
    assert day.avg_humidity == 71
    assert day.max_wind_kph == 22.3
    assert day.hourly_wind_directions == ["SW", "SW", "W"]
    assert day.condition_icon.startswith("https://")


def test_current_weather_has_no_daily_series():
    payload = {k: v for k, v in FORECAST_PAYLOAD.items() if k != "forecast"}
    handler = Recorder(json=payload)

    current = asyncio.run(make_client(handler).current_weather("Rome"))

    assert handler.requests[0].url.path == "/v1/current.json"
    assert current.current_temperature == 24.0
    assert current.wind_direction == "NW"
    assert current.daily_forecasts == []


def test_search_locations_formats_results():
    handler = Recorder(json=[
        {"name": "Rome", "region": "Lazio", "country": "Italy"},
        {"name": "Rome", "region": "Georgia", "country": "United States of America"},
    ])

    results = asyncio.run(make_client(handler).search_locations("Rom"))

    assert results == ["Rome, Lazio, Italy", "Rome, Georgia, United States of America"]


def test_search_locations_short_query_makes_no_request():
    handler = Recorder(json=[])

    assert asyncio.run(make_client(handler).search_locations("Ro")) == []
    assert handler.requests == []


def test_search_locations_swallows_upstream_errors():
    handler = Recorder(503)

    assert asyncio.run(make_client(handler).search_locations("Rome")) == []


def test_fix_icon_url():
    assert WeatherApiClient.fix_icon_url("//cdn/x.png") == "https://cdn/x.png"
    assert WeatherApiClient.fix_icon_url("https://cdn/x.png") == "https://cdn/x.png"
    assert WeatherApiClient.fix_icon_url(None) == ""
