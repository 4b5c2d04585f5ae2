"""General utility helpers shared across modules."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo


def format_duration(duration_ms: int) -> str:
    """Format milliseconds as ``H:MM:SS`` (negative values clamp to zero)."""

    total_seconds = max(0, int(duration_ms) // 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Resolve an IANA timezone name.

    Raises:
        ValueError: If the name is unknown on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfoNotFoundError, or ValueError for malformed keys
        raise ValueError(f"Unknown timezone: {tz_name!r}") from exc


def local_datetime(timestamp_ms: int, tz_name: str = "UTC") -> datetime:
    """Return a naive wall-clock datetime in ``tz_name`` (Excel cannot store tz)."""

    aware = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)
    return aware.astimezone(tzinfo_from_name(tz_name)).replace(tzinfo=None)
