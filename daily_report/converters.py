"""
Per-source converters and the header-based dispatcher.

Each converter removes the noise intrinsic to its source (reloads, unaccepted
invitations, notification counters) before records enter the generic pipeline.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Protocol, Sequence, Tuple
from urllib.parse import urlsplit, urlunsplit

from .errors import UnrecognizedHeaderError
from .normalize import Row, read_csv_rows
from .records import BrowserRecord, CalendarRecord, MessageRecord, ReportRecord, epoch_ms
from .rules import NOTION_BASE_URL

logger = logging.getLogger(__name__)

_NOTION_PAGE_RE = re.compile(r"https://www\.notion\.so/.*?-?([0-9a-f]{32})")
_GITHUB_PR_RE = re.compile(r"https://github\.com/(.*?)/(.*?)/pull/(\d+)")
_NOTIFICATION_COUNT_RE = re.compile(r"^\((\d+\+?)\)\s")
_WEEKDAY_TOKEN_RE = re.compile(r"\s[A-Za-z]{3}\s")


class Converter(Protocol):
    name: str

    def expected_headers(self) -> Sequence[str]: ...

    def convert(self, rows: Sequence[Row]) -> List[ReportRecord]: ...


def parse_datetime_to_epoch(value: str) -> int:
    """Parse an ISO-8601 date/time. Naive values are local time. Raises ValueError."""
    return epoch_ms(datetime.fromisoformat(value.strip()))


def canonicalize_url(url: str) -> str:
    """Collapse Notion and GitHub PR URLs to their canonical form and drop query/fragment."""
    notion_match = _NOTION_PAGE_RE.match(url)
    if notion_match:
        url = f"{NOTION_BASE_URL}{notion_match.group(1)}"

    pr_match = _GITHUB_PR_RE.match(url)
    if pr_match:
        owner, repo, number = pr_match.groups()
        url = f"https://github.com/{owner}/{repo}/pull/{number}"

    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class BrowserHistoryConverter:
    name = "browser-history"

    def expected_headers(self) -> Sequence[str]:
        return ("date", "time", "title", "url", "transition")

    def convert(self, rows: Sequence[Row]) -> List[ReportRecord]:
        records: List[ReportRecord] = []

        for row in rows:
            if row["transition"] == "reload":
                continue

            title = row["title"].strip()
            if title == "":
                continue

            raw_url = row["url"].strip()
            if raw_url == "":
                logger.warning("Browser row without URL skipped: %r", title)
                continue

            if _NOTION_PAGE_RE.match(raw_url):
                title = _NOTIFICATION_COUNT_RE.sub("", title)

            try:
                # US order
                month, day, year = (int(part) for part in row["date"].split("/"))
                hour, minute, second = (int(part) for part in row["time"].split(":"))
                epoch = epoch_ms(datetime(year, month, day, hour, minute, second))
            except ValueError:
                logger.error("Invalid date format: %s %s", row["date"], row["time"])
                continue

            records.append(BrowserRecord(epoch=epoch, title=title, url=canonicalize_url(raw_url)))

        return records


class SlackMessageConverter:
    name = "slack-messages"

    def expected_headers(self) -> Sequence[str]:
        return ("datetime", "channelName", "sender", "message")

    def convert(self, rows: Sequence[Row]) -> List[ReportRecord]:
        records: List[ReportRecord] = []

        for row in rows:
            message = row["message"].strip()
            if message == "":
                continue

            channel = row["channelName"].strip()
            if channel == "":
                logger.warning("Message without channel skipped: %s", row["datetime"])
                continue

            # "YYYY-MM-DD Xxx HH:MM:SS": the weekday token is dropped before parsing
            try:
                epoch = parse_datetime_to_epoch(_WEEKDAY_TOKEN_RE.sub(" ", row["datetime"], count=1))
            except ValueError:
                logger.error("Date conversion error: %s", row["datetime"])
                continue

            records.append(MessageRecord(epoch=epoch, channel=channel, message=message))

        return records


class CalendarEventsConverter:
    name = "calendar-events"

    def expected_headers(self) -> Sequence[str]:
        return ("startDatetime", "endDatetime", "type", "title", "calendarName", "status", "location")

    def convert(self, rows: Sequence[Row]) -> List[ReportRecord]:
        records: List[ReportRecord] = []

        for row in rows:
            if row["status"] != "accepted":
                continue

            try:
                start_epoch = parse_datetime_to_epoch(row["startDatetime"])
                end_epoch = parse_datetime_to_epoch(row["endDatetime"])
            except ValueError:
                logger.error(
                    "Invalid date format: start=%s, end=%s", row["startDatetime"], row["endDatetime"]
                )
                continue

            records.append(
                CalendarRecord(
                    epoch=start_epoch,
                    duration=end_epoch - start_epoch,
                    title=row["title"],
                    calendar_name=row["calendarName"],
                )
            )

        return records


# Dispatch priority order.
CONVERTERS: Tuple[Converter, ...] = (
    BrowserHistoryConverter(),
    SlackMessageConverter(),
    CalendarEventsConverter(),
)


def select_converter(headers: Sequence[str]) -> Converter:
    """Return the first converter whose expected headers are all present."""
    seen = set(headers)
    for converter in CONVERTERS:
        if set(converter.expected_headers()) <= seen:
            return converter
    raise UnrecognizedHeaderError(list(headers))


def convert_csv(text: str) -> Tuple[List[ReportRecord], str]:
    """
    Convert CSV text with whichever converter recognizes its header.

    Returns (records, converter name). A header with no data rows converts to no records.
    """
    headers, rows = read_csv_rows(text)
    converter = select_converter(headers)
    records = converter.convert(rows)
    logger.debug("%s: %d rows -> %d records", converter.name, len(rows), len(records))
    return records, converter.name
