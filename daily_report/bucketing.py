"""Time-range filtering and grouping of records into report days."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import ConfigurationError
from .records import ReportRecord, epoch_ms
from .rules import HOUR_OFFSET, HOUR_OFFSET_MS

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DateRange:
    start_epoch: int
    end_epoch: Optional[int] = None

    def contains(self, epoch: int) -> bool:
        if epoch < self.start_epoch:
            return False
        return self.end_epoch is None or epoch <= self.end_epoch


def _parse_day(value: str, label: str) -> datetime:
    if "T" in value or ":" in value:
        raise ConfigurationError(f"{label} should only contain a date (YYYY-MM-DD), not a time: {value}")
    if not _DATE_RE.match(value):
        raise ConfigurationError(f"{label} must be in YYYY-MM-DD format: {value}")
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise ConfigurationError(f"{label} is not a valid date: {value}") from exc


def parse_date_range(start_date: Optional[str], end_date: Optional[str] = None) -> DateRange:
    """
    Build the inclusive epoch range for a report run.

    The range starts at 07:00 on start_date and ends at 06:59:59.999 on the
    day after end_date. Without end_date the range is open-ended.
    """
    if not start_date:
        raise ConfigurationError("startDate is required. Please provide a start date in YYYY-MM-DD format.")

    start = _parse_day(start_date, "startDate").replace(hour=HOUR_OFFSET)
    start_epoch = epoch_ms(start)
    logger.info("Filtering records by date range:")
    logger.info("  Start date: %s (from %02d:00:00)", start_date, HOUR_OFFSET)

    end_epoch = None
    if end_date:
        end = (_parse_day(end_date, "endDate") + timedelta(days=1)).replace(hour=HOUR_OFFSET)
        end_epoch = epoch_ms(end) - 1
        logger.info("  End date: %s (until %02d:59:59.999 of the next day)", end_date, HOUR_OFFSET - 1)

    if end_epoch is not None and end_epoch < start_epoch:
        raise ConfigurationError(f"endDate {end_date} is before startDate {start_date}")

    return DateRange(start_epoch=start_epoch, end_epoch=end_epoch)


def filter_by_range(records: Iterable[ReportRecord], date_range: DateRange) -> List[ReportRecord]:
    return [record for record in records if date_range.contains(record.epoch)]


def report_day(epoch: int) -> str:
    """Local YYYY-MM-DD of the report day an epoch belongs to."""
    return datetime.fromtimestamp((epoch - HOUR_OFFSET_MS) / 1000).strftime("%Y-%m-%d")


def bucket_and_dedup(records: Iterable[ReportRecord]) -> Dict[str, List[ReportRecord]]:
    """
    Group records by report day, keeping the first record seen per source and day_key().

    Buckets are returned in ascending date order, each sorted by ascending epoch.
    """
    buckets: Dict[str, Dict[Tuple[str, str], ReportRecord]] = {}

    for record in records:
        day = report_day(record.epoch)
        bucket = buckets.setdefault(day, {})
        key = (record.source, record.day_key())
        if key in bucket:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Duplicate dropped on %s: %s", day, record.dump())
            continue
        bucket[key] = record

    return {
        day: sorted(buckets[day].values(), key=lambda r: r.epoch)
        for day in sorted(buckets)
    }
