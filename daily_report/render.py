"""Markdown rendering of a single report day."""

from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from .records import BrowserRecord, CalendarRecord, MessageRecord, ReportRecord

INDENT = "  "


def format_duration(duration_ms: int) -> str:
    """"1h 30m", "2h" or "45m". Negative durations keep a leading minus."""
    sign = "-" if duration_ms < 0 else ""
    hours, minutes = divmod(abs(duration_ms) // 60000, 60)
    if hours and minutes:
        return f"{sign}{hours}h {minutes}m"
    if hours:
        return f"{sign}{hours}h"
    return f"{sign}{minutes}m"


def format_time_of_day(epoch: int) -> str:
    return datetime.fromtimestamp(epoch / 1000).strftime("%H:%M")


def _render_record(record: ReportRecord) -> List[str]:
    head = f"- {format_time_of_day(record.epoch)} [{record.source}]"

    if isinstance(record, BrowserRecord):
        return [head, f"{INDENT}{record.title}", f"{INDENT}{record.url}"]

    if isinstance(record, MessageRecord):
        lines = [f"{head} #{record.channel}"]
        lines.extend(f"{INDENT}{line}".rstrip() for line in record.message.split("\n"))
        return lines

    if isinstance(record, CalendarRecord):
        return [f"{head} ({format_duration(record.duration)}) {record.title}"]

    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def render(day: str, records: Sequence[ReportRecord]) -> str:
    lines = [f"# {day}", ""]
    for record in records:
        lines.extend(_render_record(record))
    return "\n".join(lines) + "\n"
