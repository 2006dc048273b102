"""
Tests for quest schedule rules: end instants and the overnight wrap.
"""

import datetime as dt
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from app.modules.quests import schedule

SG = ZoneInfo("Asia/Singapore")


def quest(date, start, end):
    return SimpleNamespace(date=date, start_time=start, end_time=end)


class TestParseTime:
    def test_hh_mm(self):
        assert schedule.parse_time("09:05") == dt.time(9, 5)

    def test_postgres_seconds(self):
        assert schedule.parse_time("23:00:00") == dt.time(23, 0)

    @pytest.mark.parametrize("value", ["", "9am", "12", "12:xx"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            schedule.parse_time(value)


class TestEndInstant:
    def test_same_day(self):
        end = schedule.end_instant(dt.date(2026, 3, 1), "12:00", "13:00", SG)
        assert end == dt.datetime(2026, 3, 1, 13, 0, tzinfo=SG)

    def test_overnight_moves_to_next_day(self):
        end = schedule.end_instant(dt.date(2026, 3, 1), "23:00", "01:00", SG)
        assert end == dt.datetime(2026, 3, 2, 1, 0, tzinfo=SG)

    def test_equal_times_span_a_full_day(self):
        end = schedule.end_instant(dt.date(2026, 3, 1), "10:00", "10:00", SG)
        assert end == dt.datetime(2026, 3, 2, 10, 0, tzinfo=SG)

    def test_month_rollover(self):
        end = schedule.end_instant(dt.date(2026, 1, 31), "22:00", "02:30", SG)
        assert end == dt.datetime(2026, 2, 1, 2, 30, tzinfo=SG)


class TestIsActive:
    def test_overnight_quest_active_after_midnight(self):
        q = quest(dt.date(2026, 3, 1), "23:00", "01:00")
        assert schedule.is_active(q, dt.datetime(2026, 3, 2, 0, 30, tzinfo=SG), SG)

    def test_overnight_quest_inactive_after_end(self):
        q = quest(dt.date(2026, 3, 1), "23:00", "01:00")
        assert not schedule.is_active(q, dt.datetime(2026, 3, 2, 1, 30, tzinfo=SG), SG)

    def test_inactive_exactly_at_end(self):
        q = quest(dt.date(2026, 3, 1), "12:00", "13:00")
        assert not schedule.is_active(q, dt.datetime(2026, 3, 1, 13, 0, tzinfo=SG), SG)

    def test_active_before_start(self):
        q = quest(dt.date(2026, 3, 1), "12:00", "13:00")
        assert schedule.is_active(q, dt.datetime(2026, 2, 28, 8, 0, tzinfo=SG), SG)

    def test_other_timezones_are_converted(self):
        q = quest(dt.date(2026, 3, 1), "12:00", "13:00")
        # 04:30 UTC is 12:30 in Singapore
        assert schedule.is_active(q, dt.datetime(2026, 3, 1, 4, 30, tzinfo=dt.timezone.utc), SG)
        assert not schedule.is_active(q, dt.datetime(2026, 3, 1, 5, 30, tzinfo=dt.timezone.utc), SG)

    def test_naive_now_is_quest_local(self):
        q = quest(dt.date(2026, 3, 1), "12:00", "13:00")
        assert schedule.is_active(q, dt.datetime(2026, 3, 1, 12, 59), SG)
