"""Command line entry point: location file in, travel report workbook out."""

from __future__ import annotations

import argparse
from datetime import datetime
import logging
from pathlib import Path
from typing import Dict, List, Sequence

from .config import OUTPUT_FILE, OUTPUT_FILE_TIMESTAMP_ENABLED, REPORT_TIMEZONE
from .errors import LocationInputError
from .excel_writer import write_report
from .geocoding import build_geocoder
from .models import LocationSample
from .services import ReportServiceConfig, TravelReportService
from .sources import group_by_entity, load_samples
from .utils import tzinfo_from_name
from .visualization import create_report_map


def _setup_logging(level: str = "INFO") -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _resolve_output_path(output: str | None) -> str:
    if output:
        return output
    if OUTPUT_FILE_TIMESTAMP_ENABLED:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{OUTPUT_FILE}_{timestamp}.xlsx"
    return f"{OUTPUT_FILE}.xlsx"


def _map_path(base: str, entity_id: str, multiple: bool) -> Path:
    path = Path(base)
    if not multiple:
        return path
    return path.with_name(f"{path.stem}_{entity_id}{path.suffix or '.html'}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a stationary/travel/no-data timeline from location samples"
    )
    parser.add_argument(
        "input",
        help="Location file (CSV, JSON records or Excel) with latitude, longitude, timestamp",
    )
    parser.add_argument(
        "--entity",
        help="Only report on this entity id (default: every entity in the file)",
    )
    parser.add_argument(
        "--output",
        help="Output workbook path (default: travel_report_<timestamp>.xlsx)",
    )
    parser.add_argument(
        "--map",
        dest="map_path",
        help="Also write an HTML map; one file per entity when several are reported",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip live reverse geocoding and label places by coordinates",
    )
    parser.add_argument(
        "--timezone",
        default=REPORT_TIMEZONE,
        help="IANA timezone for timestamps in the workbook (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _setup_logging(args.log_level)

    try:
        tzinfo_from_name(args.timezone)
    except ValueError as exc:
        logging.error("Invalid --timezone: %s", exc)
        return 1

    try:
        samples = load_samples(args.input, entity_id=args.entity)
    except (LocationInputError, FileNotFoundError) as exc:
        logging.error("Failed to load location file '%s': %s", args.input, exc)
        return 1
    if not samples:
        logging.error("No usable location samples found in '%s'", args.input)
        return 1

    grouped: Dict[str, List[LocationSample]] = group_by_entity(samples)
    service = TravelReportService(
        ReportServiceConfig(geocoder=build_geocoder(offline=args.offline or None))
    )
    reports = service.generate_many(grouped)

    output_file = _resolve_output_path(args.output)
    write_report(output_file, reports, tz_name=args.timezone)
    logging.info(
        "Report saved to %s (entities=%d, entries=%d)",
        output_file,
        len(reports),
        sum(len(entries) for entries in reports.values()),
    )

    if args.map_path:
        multiple = len(reports) > 1
        for entity_id, entries in reports.items():
            path = _map_path(args.map_path, entity_id, multiple)
            create_report_map(entries, grouped[entity_id], output_html_path=path)
            logging.info("Map for entity=%s saved to %s", entity_id, path)
    return 0
