"""
Export helpers.

We keep exporters small and dependency-free:
- JSON: pretty printed, the full result
- CSV: 1 row per day (list cells serialized as JSON)
- Markdown: simple report table
"""

from __future__ import annotations
import csv
import io
import json
from typing import List, Dict, Any, Sequence

from .schemas import AreaForecastResult, HistoricalResult

AREA_COLUMNS = [
    "date", "avg_max_temp", "avg_min_temp", "avg_temp", "avg_chance_of_rain",
    "predominant_condition", "reliability_score", "variability_score",
]

HISTORY_COLUMNS = [
    "date", "max_temp", "min_temp", "avg_temp", "total_precipitation_mm",
    "avg_humidity", "condition", "avg_wind_kph", "wind_direction",
]


def area_forecast_rows(result: AreaForecastResult) -> List[Dict[str, Any]]:
    """One dict per aggregated day, JSON-ready values."""
    return [d.model_dump(mode="json") for d in result.daily_forecasts]


def history_rows(result: HistoricalResult) -> List[Dict[str, Any]]:
    return [d.model_dump(mode="json") for d in result.daily_data]


def export_json(payload: Any) -> str:
    """Export any JSON-compatible payload as pretty JSON."""
    return json.dumps(payload, indent=2, default=str)


def export_csv(rows: List[Dict[str, Any]]) -> str:
    """
    Export rows as CSV.

    One line per row. The only list column is the area forecast's
    conditions_in_area; it is written as a JSON array string so the cell
    survives a round trip through csv readers.
    """
    output = io.StringIO()
    if not rows:
        return ""

    fieldnames = list(rows[0].keys())
    writer = csv.DictWriter(output, fieldnames=fieldnames)
    writer.writeheader()

    for r in rows:
        writer.writerow({
            k: (json.dumps(v) if isinstance(v, (list, dict)) else v)
            for k, v in r.items()
        })

    return output.getvalue()


def export_markdown(title: str, rows: List[Dict[str, Any]], cols: Sequence[str], notes: Sequence[str] = ()) -> str:
    """
    Export a simple Markdown report.

    Only `cols` are rendered, to keep the table readable.
    """
    if not rows:
        return f"# {title}\n\n_No data._\n"

    lines = [
        f"# {title}",
        "",
        "| " + " | ".join(cols) + " |",
        "| " + " | ".join(["---"] * len(cols)) + " |",
    ]

    for r in rows:
        row = [str(r.get(c, "")) for c in cols]
        lines.append("| " + " | ".join(row) + " |")

    if notes:
        lines += ["", "## Notes"]
        lines += [f"- {n}" for n in notes]

    lines.append("")
    return "\n".join(lines)


def area_forecast_markdown(result: AreaForecastResult) -> str:
    area = result.area
    title = (
        f"Area forecast ({area.lat_bottom_left}, {area.lon_bottom_left}) - "
        f"({area.lat_top_right}, {area.lon_top_right})"
    )
    notes = [
        f"Area: {area.width_km:.1f} km x {area.height_km:.1f} km",
        f"Sampling points: {len(result.sampling_points)}",
        f"Last updated: {result.last_updated.isoformat()}",
    ]
    return export_markdown(title, area_forecast_rows(result), AREA_COLUMNS, notes)


def history_markdown(result: HistoricalResult) -> str:
    place = f"{result.location}, {result.country}" if result.country else result.location
    title = f"Weather history for {place} ({result.start_date} - {result.end_date})"
    return export_markdown(title, history_rows(result), HISTORY_COLUMNS)
