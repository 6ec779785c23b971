from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .bucketing import report_day
from .records import ReportRecord


class ConvertedRecord(BaseModel):
    source: str
    epoch: int
    report_day: str
    day_key: str
    dump: str

    @classmethod
    def from_record(cls, record: ReportRecord) -> "ConvertedRecord":
        return cls(
            source=record.source,
            epoch=record.epoch,
            report_day=report_day(record.epoch),
            day_key=record.day_key(),
            dump=record.dump(),
        )


class ConvertResponse(BaseModel):
    converter: str
    count: int = 0
    records: List[ConvertedRecord] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool = True
