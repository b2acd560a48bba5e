"""
FastAPI entrypoint.

This file focuses on:
- routing
- request/response handling
- mapping domain errors to HTTP status codes
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date

from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from .settings import settings
from .logging_config import setup_logging
from .errors import WeatherError, InvalidInputError, NotFoundError, EmptyResultError, UpstreamUnavailableError
from .schemas import AreaForecastRequest, AreaForecastResult, ForecastRequest, HistoricalResult, PointForecast
from .services import AreaWeatherService
from .weather_clients import WeatherApiClient
from .exporters import (
    export_json,
    export_csv,
    area_forecast_rows,
    area_forecast_markdown,
    history_rows,
    history_markdown,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_json)
    logger.info("Starting %s", settings.app_name)
    yield
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# API client + service (constructed once; stateless across requests).
weatherapi = WeatherApiClient(
    settings.weatherapi_key,
    base=settings.weatherapi_base_url,
    timeout_s=settings.request_timeout_s,
)
service = AreaWeatherService(weatherapi, max_concurrency=settings.max_point_concurrency)


def get_service() -> AreaWeatherService:
    """FastAPI dependency; tests override it with a fake provider."""
    return service


def to_http_error(e: WeatherError) -> HTTPException:
    """Domain error -> HTTP status."""
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, (NotFoundError, EmptyResultError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, UpstreamUnavailableError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@app.get("/health")
def health():
    return {"status": "ok", "service": settings.app_name}


# -------------------------
# Single-location APIs
# -------------------------

@app.get("/api/weather/current", response_model=PointForecast)
async def api_current_weather(
    location: str = Query(..., min_length=1, max_length=255),
    svc: AreaWeatherService = Depends(get_service),
):
    """Current conditions for a place name or "lat,lon"."""
    try:
        return await svc.get_current_weather(location)
    except WeatherError as e:
        raise to_http_error(e)


@app.get("/api/weather/forecast", response_model=PointForecast)
async def api_forecast_get(
    location: str = Query(..., min_length=1, max_length=255),
    days: int = 3,
    air_quality: bool = False,
    alerts: bool = False,
    svc: AreaWeatherService = Depends(get_service),
):
    """Multi-day forecast (days outside 1..10 fall back to 3)."""
    try:
        request = ForecastRequest(location=location, days=days, air_quality=air_quality, alerts=alerts)
        return await svc.get_forecast(request)
    except WeatherError as e:
        raise to_http_error(e)


@app.post("/api/weather/forecast", response_model=PointForecast)
async def api_forecast_post(payload: ForecastRequest, svc: AreaWeatherService = Depends(get_service)):
    try:
        return await svc.get_forecast(payload)
    except WeatherError as e:
        raise to_http_error(e)


@app.get("/api/weather/locations")
async def api_search_locations(
    query: str = Query(..., min_length=3, max_length=255),
    svc: AreaWeatherService = Depends(get_service),
):
    """Location autocomplete ("name, region, country")."""
    return await svc.search_locations(query)


# -------------------------
# Area forecast APIs
# -------------------------

@app.post("/api/weather-extended/area-forecast", response_model=AreaForecastResult)
async def api_area_forecast_post(payload: AreaForecastRequest, svc: AreaWeatherService = Depends(get_service)):
    """
    Aggregated forecast for a rectangle:
    - days clamped to 1..14, sampling_points clamped to 1..25
    - any failing sampling point fails the whole request (502)
    """
    try:
        return await svc.get_area_forecast(payload)
    except WeatherError as e:
        raise to_http_error(e)


@app.get("/api/weather-extended/area-forecast", response_model=AreaForecastResult)
async def api_area_forecast_get(
    lat_top_right: float,
    lon_top_right: float,
    lat_bottom_left: float,
    lon_bottom_left: float,
    days: int = 3,
    sampling_points: int = 5,
    air_quality: bool = False,
    alerts: bool = False,
    svc: AreaWeatherService = Depends(get_service),
):
    request = AreaForecastRequest(
        lat_top_right=lat_top_right,
        lon_top_right=lon_top_right,
        lat_bottom_left=lat_bottom_left,
        lon_bottom_left=lon_bottom_left,
        days=days,
        sampling_points=sampling_points,
        air_quality=air_quality,
        alerts=alerts,
    )
    try:
        return await svc.get_area_forecast(request)
    except WeatherError as e:
        raise to_http_error(e)


# -------------------------
# Historical data API
# -------------------------

@app.get("/api/weather-extended/history", response_model=HistoricalResult)
async def api_history(
    location: str = Query(..., min_length=1, max_length=255),
    start_date: date = Query(...),
    end_date: date = Query(...),
    svc: AreaWeatherService = Depends(get_service),
):
    """Daily history for at most 30 days, ending no later than today."""
    try:
        return await svc.get_historical_data(location, start_date, end_date)
    except WeatherError as e:
        raise to_http_error(e)


# -------------------------
# Export endpoints
# -------------------------

@app.get("/api/weather-extended/area-forecast/export")
async def api_export_area_forecast(
    lat_top_right: float,
    lon_top_right: float,
    lat_bottom_left: float,
    lon_bottom_left: float,
    days: int = 3,
    sampling_points: int = 5,
    fmt: str = Query("json", pattern="^(json|csv|md)$"),
    svc: AreaWeatherService = Depends(get_service),
):
    """Export an area forecast to JSON/CSV/Markdown."""
    request = AreaForecastRequest(
        lat_top_right=lat_top_right,
        lon_top_right=lon_top_right,
        lat_bottom_left=lat_bottom_left,
        lon_bottom_left=lon_bottom_left,
        days=days,
        sampling_points=sampling_points,
    )
    try:
        result = await svc.get_area_forecast(request)
    except WeatherError as e:
        raise to_http_error(e)

    if fmt == "json":
        return PlainTextResponse(export_json(result.model_dump(mode="json")), media_type="application/json")
    if fmt == "csv":
        return PlainTextResponse(export_csv(area_forecast_rows(result)), media_type="text/csv")
    if fmt == "md":
        return PlainTextResponse(area_forecast_markdown(result), media_type="text/markdown")
    raise HTTPException(status_code=400, detail="Unsupported format")


@app.get("/api/weather-extended/history/export")
async def api_export_history(
    location: str = Query(..., min_length=1, max_length=255),
    start_date: date = Query(...),
    end_date: date = Query(...),
    fmt: str = Query("json", pattern="^(json|csv|md)$"),
    svc: AreaWeatherService = Depends(get_service),
):
    """Export historical data to JSON/CSV/Markdown."""
    try:
        result = await svc.get_historical_data(location, start_date, end_date)
    except WeatherError as e:
        raise to_http_error(e)

    if fmt == "json":
        return PlainTextResponse(export_json(result.model_dump(mode="json")), media_type="application/json")
    if fmt == "csv":
        return PlainTextResponse(export_csv(history_rows(result)), media_type="text/csv")
    if fmt == "md":
        return PlainTextResponse(history_markdown(result), media_type="text/markdown")
    raise HTTPException(status_code=400, detail="Unsupported format")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("area_weather.main:app", host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
