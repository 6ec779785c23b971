"""
Batch pipeline: export files -> records -> filtered day buckets -> report files.

All files are read and converted first; filtering, bucketing and rendering run
afterwards over the accumulated records.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from .bucketing import DateRange, bucket_and_dedup, filter_by_range
from .config import Settings
from .converters import convert_csv
from .errors import CsvFormatError
from .exclusions import ExclusionRules, parse_exclusions_bytes, should_include
from .normalize import decode_csv_bytes
from .records import ReportRecord
from .render import render
from .services import Services

logger = logging.getLogger(__name__)


def load_exclusions(settings: Settings, services: Services) -> ExclusionRules:
    """Decrypt and validate the exclusion rules. FileNotFoundError propagates."""
    cipher = services.file_system.read_bytes(settings.encrypted_exclusions_file)
    plain = services.crypto.decrypt(cipher, settings.passphrase.get_secret_value())
    return parse_exclusions_bytes(plain)


def convert_file(path: Path, services: Services) -> List[ReportRecord]:
    """Convert one export file. A file that cannot be used contributes no records."""
    try:
        text = decode_csv_bytes(services.file_system.read_bytes(path))
        records, converter_name = convert_csv(text)
    except (CsvFormatError, csv.Error) as exc:
        logger.error("Skipping file %s: %s", path.name, exc)
        return []

    logger.info("Read file: %s (%s, %d records)", path.name, converter_name, len(records))
    return records


def collect_records(data_dir: Path, services: Services) -> List[ReportRecord]:
    records: List[ReportRecord] = []
    for path in services.file_system.list_files(data_dir):
        if path.suffix.lower() != ".csv":
            continue
        records.extend(convert_file(path, services))
    return records


def build_reports(
    records: Iterable[ReportRecord], rules: ExclusionRules, date_range: DateRange
) -> Dict[str, str]:
    """Filter, exclude, bucket and render. Returns rendered text per report day."""
    in_range = filter_by_range(records, date_range)
    included = [record for record in in_range if should_include(record, rules)]
    logger.info("Records in range: %d, after exclusions: %d", len(in_range), len(included))

    buckets = bucket_and_dedup(included)
    return {day: render(day, day_records) for day, day_records in buckets.items()}


def run(settings: Settings, date_range: DateRange, services: Services) -> List[Path]:
    rules = load_exclusions(settings, services)
    records = collect_records(settings.data_dir, services)
    logger.info("Converted %d records from %s", len(records), settings.data_dir)

    written: List[Path] = []
    for day, text in build_reports(records, rules, date_range).items():
        path = settings.output_dir / f"{day}.md"
        services.file_system.write_text(path, text)
        logger.info("Report written: %s", path)
        written.append(path)
    return written
