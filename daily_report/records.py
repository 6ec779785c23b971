"""Normalized activity records shared by every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Union


def epoch_ms(dt: datetime) -> int:
    """Milliseconds since the Unix epoch. Naive datetimes are taken as local time."""
    return round(dt.timestamp() * 1000)


def format_epoch(epoch: int) -> str:
    return datetime.fromtimestamp(epoch / 1000).strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class BrowserRecord:
    """A visited page from a browser history export."""

    source: ClassVar[str] = "Browser"

    epoch: int
    title: str
    url: str

    def dump(self) -> str:
        return f"{format_epoch(self.epoch)} [{self.source}] {self.title} <{self.url}>"

    def day_key(self) -> str:
        return self.url


@dataclass(frozen=True)
class MessageRecord:
    """A posted chat message."""

    source: ClassVar[str] = "Slack"

    epoch: int
    channel: str
    message: str

    def dump(self) -> str:
        return f"{format_epoch(self.epoch)} [{self.source}] #{self.channel}: {self.message!r}"

    def day_key(self) -> str:
        return self.message


@dataclass(frozen=True)
class CalendarRecord:
    """An accepted calendar event. duration is in milliseconds."""

    source: ClassVar[str] = "Calendar"

    epoch: int
    duration: int
    title: str
    calendar_name: str

    def dump(self) -> str:
        return (
            f"{format_epoch(self.epoch)} [{self.source}] {self.title} "
            f"({self.duration // 60000} min, {self.calendar_name})"
        )

    def day_key(self) -> str:
        return self.title


ReportRecord = Union[BrowserRecord, MessageRecord, CalendarRecord]
