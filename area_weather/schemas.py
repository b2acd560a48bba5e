"""
Pydantic schemas.

Why:
- Validation (e.g., strings not empty, correct types)
- Defines the contract of our REST endpoints
- Every value here is request-scoped: built per call, discarded with the response
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List


class GeoPoint(BaseModel):
    """A named coordinate used as a proxy for the weather of a larger area."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    name: str = ""


class GeoRectangle(BaseModel):
    """
    Rectangle given by its top-right and bottom-left corners.
    Corner ordering is checked by geo.validate_rectangle, not here, so that
    the service can report it as InvalidInputError.
    """
    lat_top_right: float
    lon_top_right: float
    lat_bottom_left: float
    lon_bottom_left: float


class GeoArea(GeoRectangle):
    """Rectangle plus its derived center and approximate size."""
    center: GeoPoint
    width_km: float
    height_km: float


# -------------------------
# Per-point forecast (provider output)
# -------------------------

class DailyForecast(BaseModel):
    """One day of a single point's forecast. Astronomy is passed through as-is."""
    date: date
    max_temp: float
    min_temp: float
    avg_temp: float = 0.0
    condition: str = ""
    condition_icon: str = ""
    chance_of_rain: float = 0.0

    sunrise: str = ""
    sunset: str = ""
    moonrise: str = ""
    moonset: str = ""
    moon_phase: str = ""
    moon_illumination: int = 0
    is_moon_up: bool = False
    is_sun_up: bool = False


class PointForecast(BaseModel):
    """Normalized forecast for one location (current conditions + daily series)."""
    location: str
    country: str = ""
    last_updated: datetime
    current_temperature: float = 0.0
    condition: str = ""
    condition_icon: str = ""
    humidity: int = 0
    wind_speed: float = 0.0
    wind_direction: str = ""
    daily_forecasts: List[DailyForecast] = Field(default_factory=list)


# -------------------------
# Area forecast
# -------------------------

class AreaDailyForecast(BaseModel):
    """One aggregated day across all sampling points."""
    date: date
    avg_max_temp: float
    avg_min_temp: float
    avg_temp: float
    avg_chance_of_rain: float
    predominant_condition: str
    # Not resolved at area level: no condition -> icon table exists.
    condition_icon: str = ""
    reliability_score: float
    variability_score: float
    conditions_in_area: List[str] = Field(default_factory=list)


class AreaForecastResult(BaseModel):
    area: GeoArea
    last_updated: datetime
    daily_forecasts: List[AreaDailyForecast] = Field(default_factory=list)
    sampling_points: List[GeoPoint] = Field(default_factory=list)


class AreaForecastRequest(GeoRectangle):
    """
    Payload for an area forecast.
    days / sampling_points are clamped by the service ([1,14] / [1,25]),
    so out-of-range values are accepted here on purpose.
    """
    days: int = 3
    sampling_points: int = 5
    air_quality: bool = False
    alerts: bool = False


class ForecastRequest(BaseModel):
    """Payload for a single-location forecast."""
    location: str = Field(..., min_length=1, max_length=255)
    days: int = 3
    air_quality: bool = False
    alerts: bool = False


# -------------------------
# Historical data
# -------------------------

class HistoricalDay(BaseModel):
    """One day as returned by the provider's history endpoint, hourly wind included."""
    date: date
    max_temp: float
    min_temp: float
    avg_temp: float
    total_precipitation_mm: float = 0.0
    avg_humidity: float = 0.0
    condition: str = ""
    condition_icon: str = ""
    max_wind_kph: float = 0.0
    hourly_wind_directions: List[str] = Field(default_factory=list)


class HistoricalRange(BaseModel):
    location: str = ""
    country: str = ""
    days: List[HistoricalDay] = Field(default_factory=list)


class HistoricalDailyRecord(BaseModel):
    date: date
    max_temp: float
    min_temp: float
    avg_temp: float
    total_precipitation_mm: float = 0.0
    avg_humidity: float = 0.0
    condition: str = ""
    condition_icon: str = ""
    avg_wind_kph: float = 0.0
    wind_direction: str = ""


class HistoricalResult(BaseModel):
    location: str
    country: str = ""
    start_date: date
    end_date: date
    daily_data: List[HistoricalDailyRecord] = Field(default_factory=list)
