# tests/test_analytics/test_summarize_entries.py

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from medialytics.schemas.analytics import AnalyticsSummary, ViewLogEntry
from medialytics.services.analytics_service import summarize_entries, utc_day

MEDIA_ID = uuid4()


def _entry(ip: str, ts: datetime) -> ViewLogEntry:
    return ViewLogEntry(media_id=MEDIA_ID, viewed_by_ip=ip, timestamp=ts)


def test_no_entries_gives_empty_summary():
    assert summarize_entries([]) == AnalyticsSummary(total_views=0, unique_ips=0, views_per_day={})


def test_counts_views_ips_and_days():
    day1 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    day2 = day1 + timedelta(days=1)
    entries = [
        _entry("10.0.0.1", day1),
        _entry("10.0.0.1", day1 + timedelta(hours=3)),
        _entry("10.0.0.2", day1 + timedelta(hours=5)),
        _entry("10.0.0.3", day2),
    ]

    summary = summarize_entries(entries)

    assert summary.total_views == 4
    assert summary.unique_ips == 3
    assert summary.views_per_day == {"2024-05-01": 3, "2024-05-02": 1}
    assert sum(summary.views_per_day.values()) == summary.total_views


def test_days_are_utc_calendar_days():
    # 23:30 at UTC-02:00 is already the next day in UTC
    west = timezone(timedelta(hours=-2))
    summary = summarize_entries([_entry("10.0.0.1", datetime(2024, 3, 1, 23, 30, tzinfo=west))])
    assert summary.views_per_day == {"2024-03-02": 1}


def test_naive_timestamps_are_taken_as_utc():
    assert utc_day(datetime(2024, 12, 31, 23, 59, 59)) == "2024-12-31"


def test_days_without_views_are_absent():
    first = datetime(2024, 1, 1, tzinfo=timezone.utc)
    summary = summarize_entries([_entry("a", first), _entry("b", first + timedelta(days=3))])
    assert set(summary.views_per_day) == {"2024-01-01", "2024-01-04"}
