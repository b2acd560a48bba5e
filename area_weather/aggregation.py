"""
Area aggregation.

Folds one forecast per sampling point into one forecast per day for the
whole rectangle, with two heuristic scores:

- variability: how much the points disagree (temperatures and conditions)
- reliability: confidence proxy, decreasing with the forecast horizon and
  with the variability observed across points

Both scores are on a 0-100 scale, rounded to one decimal.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from statistics import fmean, pvariance
from typing import List, Optional, Sequence

from .geo import build_area
from .schemas import (
    AreaDailyForecast,
    AreaForecastResult,
    DailyForecast,
    GeoPoint,
    GeoRectangle,
    PointForecast,
)

MAX_SCORE = 100.0

# Reliability: ~95% for today, -3.5 points per day ahead, never below 30.
BASE_RELIABILITY = 95.0
RELIABILITY_DECAY_PER_DAY = 3.5
MIN_BASE_RELIABILITY = 30.0
MAX_RELIABILITY_REDUCTION = 30.0

TEMP_VARIANCE_WEIGHT = 5.0


def aggregate_forecasts(
    forecasts: Sequence[PointForecast],
    rect: GeoRectangle,
    sampling_points: Sequence[GeoPoint],
    today: Optional[date] = None,
) -> AreaForecastResult:
    """
    Build the area forecast.

    - Series of different length are truncated to the shortest one.
    - No forecasts (or a first forecast without days) gives an empty daily list.
    - last_updated is the most recent per-point timestamp.
    """
    today = today or date.today()

    result = AreaForecastResult(
        area=build_area(rect),
        last_updated=max(f.last_updated for f in forecasts) if forecasts else datetime.now(),
        sampling_points=list(sampling_points),
    )

    if not forecasts or not forecasts[0].daily_forecasts:
        return result

    days = min(len(f.daily_forecasts) for f in forecasts)
    for day in range(days):
        result.daily_forecasts.append(
            aggregate_day([f.daily_forecasts[day] for f in forecasts], today)
        )

    return result


def aggregate_day(daily: List[DailyForecast], today: date) -> AreaDailyForecast:
    """Combine the same day index across all points (point order matters for ties)."""
    conditions = [d.condition for d in daily]
    forecast_date = daily[0].date

    return AreaDailyForecast(
        date=forecast_date,
        avg_max_temp=fmean(d.max_temp for d in daily),
        avg_min_temp=fmean(d.min_temp for d in daily),
        # Per-point midpoint first, then the mean.
        avg_temp=fmean((d.max_temp + d.min_temp) / 2 for d in daily),
        avg_chance_of_rain=fmean(d.chance_of_rain for d in daily),
        predominant_condition=predominant_condition(conditions),
        reliability_score=reliability_score(forecast_date, daily, today),
        variability_score=variability_score(daily),
        conditions_in_area=list(dict.fromkeys(conditions)),
    )


def predominant_condition(conditions: Sequence[str]) -> str:
    """
    Most frequent label. Counter.most_common orders equal counts by first
    occurrence, so ties go to the earliest sampling point.
    """
    if not conditions:
        return ""
    return Counter(conditions).most_common(1)[0][0]


def temperature_variability(daily: Sequence[DailyForecast]) -> float:
    spread = pvariance([d.max_temp for d in daily]) + pvariance([d.min_temp for d in daily])
    return min(spread * TEMP_VARIANCE_WEIGHT, MAX_SCORE)


def condition_variability(daily: Sequence[DailyForecast]) -> float:
    # 0 when every point agrees; grows with the number of distinct labels.
    distinct = len({d.condition for d in daily})
    return min((distinct - 1) * MAX_SCORE / len(daily), MAX_SCORE)


def variability_score(daily: Sequence[DailyForecast]) -> float:
    return round((temperature_variability(daily) + condition_variability(daily)) / 2, 1)


def reliability_score(forecast_date: date, daily: Sequence[DailyForecast], today: date) -> float:
    days_in_future = (forecast_date - today).days
    base = max(BASE_RELIABILITY - days_in_future * RELIABILITY_DECAY_PER_DAY, MIN_BASE_RELIABILITY)

    reduction = min(
        temperature_variability(daily) * 0.5 + condition_variability(daily) * 0.5,
        MAX_RELIABILITY_REDUCTION,
    )
    return round(base - reduction, 1)
