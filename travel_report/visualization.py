"""Render a travel report and its raw track on an interactive map."""

from __future__ import annotations

import html
from pathlib import Path
from typing import Optional, Sequence, Union

import folium  # Using folium to build an interactive Leaflet map.
import numpy as np

from .geo import leg_speeds
from .models import LatLon, LocationSample, ReportEntry, Stationary, Travel
from .segmenter import sort_samples
from .units import speed_color
from .utils import format_duration

PathLike = Union[str, Path]

_STATIONARY_COLOR = "#2c7bb6"
_START_COLOR = "green"
_END_COLOR = "red"


def _map_center(
    samples: Sequence[LocationSample], entries: Sequence[ReportEntry]
) -> LatLon:
    if samples:
        lats = np.array([sample.latitude for sample in samples], dtype=float)
        lons = np.array([sample.longitude for sample in samples], dtype=float)
        return float(lats.mean()), float(lons.mean())
    for entry in entries:
        if isinstance(entry, Stationary):
            return entry.anchor
        if isinstance(entry, Travel):
            return entry.start_point
    return 0.0, 0.0


def create_report_map(
    entries: Sequence[ReportEntry],
    samples: Sequence[LocationSample] = (),
    *,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Create a map of the raw track coloured by speed plus report markers.

    Args:
        entries: Final report entries.
        samples: Raw samples of the same entity (any order).
        output_html_path: Optional path to persist the map as an HTML file.

    Returns:
        A :class:`folium.Map` instance containing the overlay.
    """

    ordered = sort_samples(samples)
    folium_map = folium.Map(
        location=_map_center(ordered, entries), zoom_start=13, control_scale=True
    )

    for start, end, mph in leg_speeds(ordered):
        folium.PolyLine(
            [start, end],
            color=speed_color(mph),
            weight=4,
            opacity=0.8,
            tooltip=f"{mph:.1f} mph",
        ).add_to(folium_map)

    for entry in entries:
        if isinstance(entry, Stationary):
            popup = folium.Popup(
                html=(
                    f"<strong>{html.escape(entry.address)}</strong><br>"
                    f"Stayed {format_duration(entry.duration_ms)}"
                ),
                max_width=300,
            )
            folium.CircleMarker(
                location=entry.anchor,
                radius=8,
                color=_STATIONARY_COLOR,
                fill=True,
                fill_color=_STATIONARY_COLOR,
                tooltip="Stationary",
                popup=popup,
            ).add_to(folium_map)

    if ordered:
        folium.Marker(
            location=ordered[0].point,
            tooltip="Start",
            icon=folium.Icon(color=_START_COLOR),
        ).add_to(folium_map)
    if len(ordered) > 1:
        folium.Marker(
            location=ordered[-1].point,
            tooltip="End",
            icon=folium.Icon(color=_END_COLOR),
        ).add_to(folium_map)

    if output_html_path is not None:
        output_path = Path(output_html_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


__all__ = ["create_report_map"]
