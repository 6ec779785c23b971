"""
User-configurable exclusion rules and the matching engine.

Browser and message rules are deny-lists: a match drops the record.
Calendar rules are an allow-list: only listed calendars are kept, and with no
list configured no calendar event passes.
"""

from __future__ import annotations

import logging
import re
from typing import Annotated, FrozenSet, Optional, Tuple

import json5
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ExclusionsValidationError
from .records import BrowserRecord, CalendarRecord, MessageRecord, ReportRecord
from .rules import PRIVATE_USE_END, PRIVATE_USE_START, TIMES_CHANNEL_PREFIX

logger = logging.getLogger(__name__)

NotionId = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{32}$")]

_NOTION_ID_RE = re.compile(r"notion\.so/.*-?([0-9a-f]{32})")
_PRIVATE_USE_RE = re.compile(f"[{chr(PRIVATE_USE_START)}-{chr(PRIVATE_USE_END)}]")


class _RuleModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")


class MessageExclusion(_RuleModel):
    channel: str
    patterns: FrozenSet[str] = Field(default_factory=frozenset)


class ExclusionRules(_RuleModel):
    url_prefixes: FrozenSet[str] = Field(default_factory=frozenset)
    url_contains: FrozenSet[str] = Field(default_factory=frozenset)
    notion_ids: FrozenSet[NotionId] = Field(default_factory=frozenset)
    title_contains: FrozenSet[str] = Field(default_factory=frozenset)
    message_exclusions: Tuple[MessageExclusion, ...] = ()
    included_calendar_names: FrozenSet[str] = Field(default_factory=frozenset)


def parse_exclusions(raw_text: str) -> ExclusionRules:
    """Parse JSON5 rule text and validate it. Raises ExclusionsValidationError."""
    try:
        parsed = json5.loads(raw_text)
    except ValueError as exc:
        raise ExclusionsValidationError("Exclusions file is not valid JSON5", str(exc)) from exc

    if parsed is None:
        parsed = {}

    try:
        rules = ExclusionRules.model_validate(parsed)
    except ValidationError as exc:
        raise ExclusionsValidationError("Error validating exclusions data", str(exc)) from exc

    logger.info("Exclusions data validation successful")
    return rules


def normalize_title(text: str) -> str:
    return _PRIVATE_USE_RE.sub("", text).upper()


def extract_notion_id(url: str) -> Optional[str]:
    match = _NOTION_ID_RE.search(url)
    return match.group(1) if match else None


def _include_browser(record: BrowserRecord, rules: ExclusionRules) -> bool:
    url = record.url

    if any(url.startswith(prefix) for prefix in rules.url_prefixes):
        return False

    if any(fragment in url for fragment in rules.url_contains):
        return False

    notion_id = extract_notion_id(url)
    if notion_id is not None and notion_id in rules.notion_ids:
        return False

    title = normalize_title(record.title)
    if any(normalize_title(pattern) in title for pattern in rules.title_contains):
        return False

    return True


def _include_message(record: MessageRecord, rules: ExclusionRules) -> bool:
    if record.channel.startswith(TIMES_CHANNEL_PREFIX):
        return False

    for exclusion in rules.message_exclusions:
        if exclusion.channel != record.channel:
            continue
        if any(pattern in record.message for pattern in exclusion.patterns):
            return False

    return True


def _include_calendar(record: CalendarRecord, rules: ExclusionRules) -> bool:
    return record.calendar_name in rules.included_calendar_names


def should_include(record: ReportRecord, rules: ExclusionRules) -> bool:
    if isinstance(record, BrowserRecord):
        return _include_browser(record, rules)
    if isinstance(record, MessageRecord):
        return _include_message(record, rules)
    if isinstance(record, CalendarRecord):
        return _include_calendar(record, rules)
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def parse_exclusions_bytes(data: bytes) -> ExclusionRules:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ExclusionsValidationError("Exclusions data is not UTF-8 text", str(exc)) from exc
    return parse_exclusions(text)
