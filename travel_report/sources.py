"""Location sample loading (CSV, JSON records or Excel) and grouping."""

from __future__ import annotations

from collections import OrderedDict
import logging
import numbers
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .errors import LocationInputError
from .models import LocationSample

LOGGER = logging.getLogger(__name__)

_LATITUDE_COL = "latitude"
_LONGITUDE_COL = "longitude"
_TIMESTAMP_COL = "timestamp"
_ENTITY_COL = "entity_id"
_REQUIRED_COLS = {_LATITUDE_COL, _LONGITUDE_COL, _TIMESTAMP_COL}

# Header spellings accepted for each canonical column.
_COLUMN_ALIASES = {
    "lat": _LATITUDE_COL,
    "lon": _LONGITUDE_COL,
    "lng": _LONGITUDE_COL,
    "long": _LONGITUDE_COL,
    "time": _TIMESTAMP_COL,
    "timestamp_ms": _TIMESTAMP_COL,
    "userid": _ENTITY_COL,
    "user_id": _ENTITY_COL,
    "entity": _ENTITY_COL,
    "speed_mps": "speed",
    "bearing_deg": "bearing",
    "batterylevel": "battery_level",
    "appstatus": "app_status",
}

DEFAULT_ENTITY_ID = "default"


def _read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in {".csv", ".txt"}:
        return pd.read_csv(path)
    if suffix == ".json":
        return pd.read_json(path, orient="records", convert_dates=False)
    if suffix in {".xlsx", ".xlsm"}:
        return pd.read_excel(path)
    raise LocationInputError(f"Unsupported location file type: {path.suffix}")


def _normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for column in df.columns:
        key = str(column).strip().lower()
        renamed[column] = _COLUMN_ALIASES.get(key, key)
    return df.rename(columns=renamed)


def _is_blank(value: object) -> bool:
    return value is None or bool(pd.isna(value)) or str(value).strip() == ""


def parse_timestamp_ms(value: object) -> Optional[int]:
    """Epoch milliseconds from a number or an ISO-8601 string (UTC if naive)."""

    if _is_blank(value):
        return None
    if isinstance(value, numbers.Real):
        return int(value)
    text = str(value).strip()
    try:
        return int(float(text))
    except ValueError:
        pass
    try:
        stamp = pd.Timestamp(text)
    except (ValueError, TypeError):
        return None
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return int(stamp.value // 1_000_000)


def _optional_float(value: object) -> Optional[float]:
    if _is_blank(value):
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _optional_int(value: object) -> Optional[int]:
    number = _optional_float(value)
    return int(number) if number is not None else None


def _optional_str(value: object) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()


def _entity_label(value: object) -> Optional[str]:
    # Numeric ids read back as floats when the column has blanks.
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return _optional_str(value)


def samples_from_frame(
    df: pd.DataFrame, *, entity_id: Optional[str] = None
) -> List[LocationSample]:
    """Build samples from a dataframe, skipping rows with unusable values.

    Raises:
        LocationInputError: If a required column is missing.
    """

    df = _normalise_columns(df)
    missing = _REQUIRED_COLS - set(df.columns)
    if missing:
        raise LocationInputError(
            f"Location data missing required columns: {sorted(missing)}"
        )

    samples: List[LocationSample] = []
    skipped = 0
    for idx, row in df.iterrows():
        row_entity = _entity_label(row.get(_ENTITY_COL)) or DEFAULT_ENTITY_ID
        if entity_id is not None and row_entity != entity_id:
            continue
        latitude = _optional_float(row.get(_LATITUDE_COL))
        longitude = _optional_float(row.get(_LONGITUDE_COL))
        timestamp_ms = parse_timestamp_ms(row.get(_TIMESTAMP_COL))
        if latitude is None or longitude is None or timestamp_ms is None:
            skipped += 1
            LOGGER.debug("Skipping unusable location row %s", idx)
            continue
        samples.append(
            LocationSample(
                entity_id=row_entity,
                latitude=latitude,
                longitude=longitude,
                timestamp_ms=timestamp_ms,
                speed_mps=_optional_float(row.get("speed")),
                bearing_deg=_optional_float(row.get("bearing")),
                battery_level=_optional_int(row.get("battery_level")),
                app_status=_optional_str(row.get("app_status")),
            )
        )
    if skipped:
        LOGGER.warning("Skipped %d location rows with missing or invalid values", skipped)
    return samples


def load_samples(
    path: str | Path, *, entity_id: Optional[str] = None
) -> List[LocationSample]:
    """Read location samples from ``path``.

    Raises:
        FileNotFoundError: If the file does not exist.
        LocationInputError: If the file cannot be parsed or lacks columns.
    """

    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Location file not found: {file_path}")
    try:
        df = _read_frame(file_path)
    except LocationInputError:
        raise
    except (ValueError, OSError) as exc:
        raise LocationInputError(f"Unable to read location file {file_path}: {exc}") from exc
    samples = samples_from_frame(df, entity_id=entity_id)
    LOGGER.info("Loaded %d location samples from %s", len(samples), file_path)
    return samples


def group_by_entity(
    samples: Iterable[LocationSample],
) -> Dict[str, List[LocationSample]]:
    """Split samples by entity, keeping first-seen entity order."""

    grouped: "OrderedDict[str, List[LocationSample]]" = OrderedDict()
    for sample in samples:
        grouped.setdefault(sample.entity_id, []).append(sample)
    return dict(grouped)


__all__ = [
    "DEFAULT_ENTITY_ID",
    "group_by_entity",
    "load_samples",
    "parse_timestamp_ms",
    "samples_from_frame",
]
