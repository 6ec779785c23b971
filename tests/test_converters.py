from datetime import datetime

import pytest

from daily_report.converters import (
    BrowserHistoryConverter,
    CalendarEventsConverter,
    SlackMessageConverter,
    canonicalize_url,
    convert_csv,
    select_converter,
)
from daily_report.errors import EmptyCsvError, UnrecognizedHeaderError
from daily_report.records import BrowserRecord, CalendarRecord, MessageRecord


def local_ms(*args):
    return round(datetime(*args).timestamp() * 1000)


def browser_row(title="Test Page", url="https://example.com/", transition="link", date="1/1/2023", time="10:00:00"):
    return {"date": date, "time": time, "title": title, "url": url, "transition": transition}


def test_browser_basic_row():
    records = BrowserHistoryConverter().convert([browser_row()])
    assert records == [BrowserRecord(epoch=local_ms(2023, 1, 1, 10, 0, 0), title="Test Page", url="https://example.com/")]


def test_browser_skips_reload():
    records = BrowserHistoryConverter().convert(
        [browser_row(title="Reloaded", transition="reload"), browser_row(title="Another Page")]
    )
    assert [r.title for r in records] == ["Another Page"]


def test_browser_skips_empty_titles():
    records = BrowserHistoryConverter().convert(
        [browser_row(title=""), browser_row(title="   "), browser_row(title="  Valid Title  ")]
    )
    assert [r.title for r in records] == ["Valid Title"]


@pytest.mark.parametrize("title", ["(5) Notion Page", "(99+) Notion Page"])
def test_browser_strips_notification_count_on_notion(title):
    url = "https://www.notion.so/workspace/Notion-Page-1234567890abcdef1234567890abcdef"
    [record] = BrowserHistoryConverter().convert([browser_row(title=title, url=url)])
    assert record.title == "Notion Page"
    assert record.url == "https://www.notion.so/1234567890abcdef1234567890abcdef"


def test_browser_keeps_notification_count_elsewhere():
    [record] = BrowserHistoryConverter().convert([browser_row(title="(5) Inbox", url="https://mail.example.com/")])
    assert record.title == "(5) Inbox"


def test_browser_invalid_date_is_skipped(caplog):
    records = BrowserHistoryConverter().convert(
        [browser_row(date="1/x/2023"), browser_row(time="10:00"), browser_row(title="Good")]
    )
    assert [r.title for r in records] == ["Good"]
    assert "Invalid date format" in caplog.text


def test_browser_skips_missing_url():
    assert BrowserHistoryConverter().convert([browser_row(url="")]) == []


def test_canonicalize_url():
    assert canonicalize_url("https://example.com/path?q=1#top") == "https://example.com/path"
    assert (
        canonicalize_url("https://github.com/acme/widgets/pull/42/files?diff=split")
        == "https://github.com/acme/widgets/pull/42"
    )
    assert (
        canonicalize_url("https://www.notion.so/team/Plan-0123456789abcdef0123456789abcdef?pvs=4")
        == "https://www.notion.so/0123456789abcdef0123456789abcdef"
    )


def test_message_row_parsing():
    rows = [
        {"datetime": "2024-03-01 Fri 10:15:30", "channelName": "general", "sender": "me", "message": "  hello\nworld  "},
        {"datetime": "2024-03-01 Fri 10:16:00", "channelName": "general", "sender": "me", "message": "   "},
    ]
    records = SlackMessageConverter().convert(rows)
    assert records == [MessageRecord(epoch=local_ms(2024, 3, 1, 10, 15, 30), channel="general", message="hello\nworld")]


def test_message_without_channel_is_skipped(caplog):
    rows = [
        {"datetime": "2024-03-01 Fri 10:00:00", "channelName": "   ", "sender": "me", "message": "hi"},
        {"datetime": "2024-03-01 Fri 10:01:00", "channelName": " dev ", "sender": "me", "message": "hello"},
    ]
    records = SlackMessageConverter().convert(rows)
    assert records == [MessageRecord(epoch=local_ms(2024, 3, 1, 10, 1, 0), channel="dev", message="hello")]
    assert "Message without channel skipped" in caplog.text


def test_message_bad_datetime_is_skipped(caplog):
    rows = [{"datetime": "yesterday", "channelName": "general", "sender": "me", "message": "hi"}]
    assert SlackMessageConverter().convert(rows) == []
    assert "yesterday" in caplog.text


def calendar_row(status="accepted", start="2024-03-01T10:00:00", end="2024-03-01T11:30:00"):
    return {
        "startDatetime": start,
        "endDatetime": end,
        "type": "event",
        "title": "Planning",
        "calendarName": "Work",
        "status": status,
        "location": "",
    }


def test_calendar_accepted_only():
    records = CalendarEventsConverter().convert(
        [calendar_row(status="tentative"), calendar_row(status="declined"), calendar_row()]
    )
    assert records == [
        CalendarRecord(epoch=local_ms(2024, 3, 1, 10, 0, 0), duration=90 * 60 * 1000, title="Planning", calendar_name="Work")
    ]


def test_calendar_utc_timestamps():
    [record] = CalendarEventsConverter().convert(
        [calendar_row(start="2024-03-01T01:00:00.000Z", end="2024-03-01T01:45:00.000Z")]
    )
    assert record.epoch == 1709254800000
    assert record.duration == 45 * 60 * 1000


def test_calendar_negative_duration_is_kept():
    [record] = CalendarEventsConverter().convert(
        [calendar_row(start="2024-03-01T11:00:00", end="2024-03-01T10:00:00")]
    )
    assert record.duration == -60 * 60 * 1000


def test_calendar_bad_timestamp_is_skipped():
    assert CalendarEventsConverter().convert([calendar_row(end="not a date")]) == []


def test_select_converter_by_headers():
    assert select_converter(["url", "title", "time", "date", "transition", "visitCount"]).name == "browser-history"
    assert select_converter(["datetime", "channelName", "sender", "message", ""]).name == "slack-messages"
    assert (
        select_converter(["startDatetime", "endDatetime", "type", "title", "calendarName", "status", "location"]).name
        == "calendar-events"
    )


def test_select_converter_unknown_headers():
    with pytest.raises(UnrecognizedHeaderError) as excinfo:
        select_converter(["name", "city"])
    assert excinfo.value.headers == ["name", "city"]
    assert "name, city" in str(excinfo.value)


def test_convert_csv_end_to_end_notion():
    text = (
        "date,time,title,url,transition\n"
        '3/1/2024,08:00:00,"(3) Page","https://www.notion.so/w/Page-abcdef1234567890abcdef1234567890",link\n'
    )
    records, name = convert_csv(text)
    assert name == "browser-history"
    assert records == [
        BrowserRecord(
            epoch=local_ms(2024, 3, 1, 8, 0, 0),
            title="Page",
            url="https://www.notion.so/abcdef1234567890abcdef1234567890",
        )
    ]


def test_convert_csv_header_only():
    records, name = convert_csv("datetime,channelName,sender,message\n")
    assert records == []
    assert name == "slack-messages"


def test_convert_csv_empty_text():
    with pytest.raises(EmptyCsvError):
        convert_csv("")
