"""Tabular views over report entries.

Pure transformation: entries become flat rows for spreadsheets and a
per-entity summary row. No I/O happens here.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .models import DataGap, ReportEntry, Stationary, Travel
from .units import average_mph
from .utils import format_duration, local_datetime

Row = Dict[str, Any]

_TYPE_LABELS = {
    Stationary: "Stationary",
    Travel: "Travel",
    DataGap: "No Data",
}


def _minutes(duration_ms: int) -> float:
    return round(duration_ms / 60000.0, 2)


def entry_to_row(entry: ReportEntry, tz_name: str = "UTC") -> Row:
    """Flatten one entry; columns that do not apply are left as ``None``."""

    row: Row = {
        "Type": _TYPE_LABELS[type(entry)],
        "Start": local_datetime(entry.start_time_ms, tz_name),
        "End": local_datetime(entry.end_time_ms, tz_name),
        "Duration (min)": _minutes(entry.duration_ms),
        "Duration (h:mm:ss)": format_duration(entry.duration_ms),
        "Location": None,
        "From": None,
        "To": None,
        "Distance (mi)": None,
        "Avg Speed (mph)": None,
        "Latitude": None,
        "Longitude": None,
        "Samples": None,
    }
    if isinstance(entry, Stationary):
        row.update(
            {
                "Location": entry.address,
                "Latitude": round(entry.latitude, 6),
                "Longitude": round(entry.longitude, 6),
                "Samples": entry.sample_count,
            }
        )
    elif isinstance(entry, Travel):
        row.update(
            {
                "From": entry.start_place.label() or None,
                "To": entry.end_place.label() or None,
                "Distance (mi)": round(entry.distance_miles, 2),
                "Avg Speed (mph)": round(entry.average_mph, 1),
                "Samples": entry.sample_count,
            }
        )
    return row


def build_rows(entries: Sequence[ReportEntry], tz_name: str = "UTC") -> List[Row]:
    return [entry_to_row(entry, tz_name) for entry in entries]


def build_summary(entries: Sequence[ReportEntry]) -> Row:
    """Totals for one report: time per entry type, miles and overall speed."""

    stationary_ms = travel_ms = gap_ms = 0
    miles = 0.0
    counts = {Stationary: 0, Travel: 0, DataGap: 0}
    for entry in entries:
        counts[type(entry)] += 1
        if isinstance(entry, Stationary):
            stationary_ms += entry.duration_ms
        elif isinstance(entry, Travel):
            travel_ms += entry.duration_ms
            miles += entry.distance_miles
        else:
            gap_ms += entry.duration_ms
    return {
        "Stationary Periods": counts[Stationary],
        "Travel Segments": counts[Travel],
        "Data Gaps": counts[DataGap],
        "Stationary Time (h:mm:ss)": format_duration(stationary_ms),
        "Travel Time (h:mm:ss)": format_duration(travel_ms),
        "No Data Time (h:mm:ss)": format_duration(gap_ms),
        "Total Distance (mi)": round(miles, 2),
        "Avg Travel Speed (mph)": round(average_mph(miles, travel_ms), 1),
    }


__all__ = ["Row", "build_rows", "build_summary", "entry_to_row"]
