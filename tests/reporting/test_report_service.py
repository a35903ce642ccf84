from __future__ import annotations

import random
from datetime import date, datetime, timedelta

import pytest

from conftest import InMemoryBreaks, InMemorySessions, active_session, brk, closed_session
from timekeeping.core.enums import BreakStatus, BreakType, SessionStatus
from timekeeping.core.exceptions import ValidationError
from timekeeping.policy.classifier.tiered_classifier import TieredBreakClassifier
from timekeeping.reporting.service import ReportService, period_start, preset_range, timesheet_period

NOW = datetime(2026, 2, 4, 15, 0)  # Wednesday


class ShuffledSessions(InMemorySessions):
    def list_between(self, **kwargs):
        rows = list(super().list_between(**kwargs))
        random.Random(len(rows)).shuffle(rows)
        return list(reversed(rows))


def _seed(sessions, breaks):
    mon = datetime(2026, 2, 2, 9, 0)
    tue = datetime(2026, 2, 3, 9, 0)
    sessions.add(closed_session(1, 10, mon, mon + timedelta(hours=8), total_hours=7.0))
    breaks.add(brk(1, 1, "lunch", mon + timedelta(hours=3), mon + timedelta(hours=4)))
    sessions.add(closed_session(2, 11, mon, mon + timedelta(hours=9), total_hours=8.5))
    breaks.add(brk(2, 2, "coffee", mon + timedelta(hours=2), mon + timedelta(hours=2, minutes=20)))
    breaks.add(brk(3, 2, "bathroom", mon + timedelta(hours=5), mon + timedelta(hours=5, minutes=10)))
    sessions.add(closed_session(3, 10, tue, tue + timedelta(hours=8), total_hours=7.5))
    breaks.add(brk(4, 3, "lunch", tue + timedelta(hours=4), tue + timedelta(hours=4, minutes=30)))
    sessions.add(active_session(4, 11, NOW - timedelta(hours=2)))
    breaks.add(brk(5, 4, "coffee", NOW - timedelta(minutes=10)))


@pytest.fixture
def svc(sessions_repo, breaks_repo):
    _seed(sessions_repo, breaks_repo)
    return ReportService(sessions_repo, breaks_repo)


def test_weekly_report_rows_newest_first(svc):
    report = svc.build_period_report(period="week", now=NOW)

    assert [r.session_id for r in report.rows] == [4, 3, 2, 1]
    assert report.start == NOW - timedelta(days=7)
    assert report.end is None


def test_rows_carry_display_fields(svc):
    rows = {r.session_id: r for r in svc.build_period_report(now=NOW).rows}

    assert rows[1].work_hours == "7.0h"
    assert rows[4].work_hours == "In progress"
    assert rows[4].on_break
    assert rows[4].breaks[0].minutes is None
    assert rows[2].other_minutes == pytest.approx(30)
    assert rows[2].break_status == BreakStatus.OVER_LIMIT
    assert rows[1].break_status == BreakStatus.OK
    assert [b.label for b in rows[2].breaks] == ["Coffee Break", "Bathroom/CR"]


def test_employee_totals_skip_active_sessions(svc):
    report = svc.build_period_report(now=NOW)
    totals = {e.employee_id: e for e in report.employees}

    assert totals[10].total_hours == pytest.approx(14.5)
    assert totals[10].sessions == 2
    assert totals[11].total_hours == pytest.approx(8.5)
    assert totals[11].in_progress == 1
    assert report.total_hours == pytest.approx(23.0)


def test_tallies_count_completed_breaks_and_ongoing_separately(svc):
    tallies = {t.break_type: t for t in svc.build_period_report(now=NOW).tallies}

    assert list(tallies) == list(BreakType)
    assert tallies[BreakType.LUNCH].count == 2
    assert tallies[BreakType.LUNCH].minutes == pytest.approx(90)
    assert tallies[BreakType.COFFEE].count == 1
    assert tallies[BreakType.COFFEE].ongoing == 1
    assert tallies[BreakType.PERSONAL].count == 0


def test_report_is_independent_of_storage_order(fixed_now):
    plain_breaks = InMemoryBreaks()
    plain = InMemorySessions(plain_breaks)
    _seed(plain, plain_breaks)

    shuffled_breaks = InMemoryBreaks()
    shuffled = ShuffledSessions(shuffled_breaks)
    _seed(shuffled, shuffled_breaks)

    a = ReportService(plain, plain_breaks).build_period_report(now=NOW)
    b = ReportService(shuffled, shuffled_breaks).build_period_report(now=NOW)

    assert a == b


def test_employee_filter_and_only_exceeded(svc):
    mine = svc.build_range_report(preset="this_week", now=NOW, employee_id=10)
    assert {r.employee_id for r in mine.rows} == {10}

    exceeded = svc.build_range_report(preset="this_week", now=NOW, only_exceeded=True)
    assert [r.session_id for r in exceeded.rows] == [3, 2, 1]


def test_analytics_summary(svc):
    report = svc.build_range_report(preset="this_week", now=NOW)
    summary = svc.summarize(report)

    assert summary.employees_tracked == 2
    assert summary.currently_working == 0
    assert summary.on_break == 1
    assert summary.exceeded == 3


def test_tiered_classifier_changes_row_status(sessions_repo, breaks_repo):
    mon = datetime(2026, 2, 2, 9, 0)
    sessions_repo.add(closed_session(1, 1, mon, mon + timedelta(hours=8)))
    breaks_repo.add(brk(1, 1, "coffee", mon + timedelta(hours=1), mon + timedelta(hours=1, minutes=18)))

    svc = ReportService(sessions_repo, breaks_repo, classifier=TieredBreakClassifier())
    (row,) = svc.build_period_report(now=NOW).rows

    assert row.break_status == BreakStatus.WARNING


def test_total_hours_between_uses_closed_sessions(svc):
    assert svc.total_hours_between(10, start=date(2026, 2, 2), end=date(2026, 2, 3)) == pytest.approx(14.5)
    assert svc.total_hours_between(11, start=date(2026, 2, 2), end=date(2026, 2, 4)) == pytest.approx(8.5)


def test_unknown_period_is_rejected():
    with pytest.raises(ValidationError):
        period_start("year", NOW)


@pytest.mark.parametrize(
    "preset, first, last",
    [
        ("today", date(2026, 2, 4), date(2026, 2, 4)),
        ("yesterday", date(2026, 2, 3), date(2026, 2, 3)),
        ("this_week", date(2026, 2, 2), date(2026, 2, 8)),
        ("this_month", date(2026, 2, 1), date(2026, 2, 28)),
    ],
)
def test_preset_ranges_cover_whole_days(preset, first, last):
    start, end = preset_range(preset, NOW)

    assert start == datetime(first.year, first.month, first.day)
    assert end.date() == last
    assert end.hour == 23 and end.minute == 59


def test_custom_range_needs_ordered_dates():
    start, end = preset_range("custom", NOW, custom_from=date(2026, 1, 5), custom_to=date(2026, 1, 9))
    assert (start.date(), end.date()) == (date(2026, 1, 5), date(2026, 1, 9))

    with pytest.raises(ValidationError):
        preset_range("custom", NOW, custom_from=date(2026, 1, 9), custom_to=date(2026, 1, 5))
    with pytest.raises(ValidationError):
        preset_range("custom", NOW)
    with pytest.raises(ValidationError):
        preset_range("fortnight", NOW)


def test_timesheet_period():
    assert timesheet_period(date(2026, 3, 1)) == (date(2026, 2, 16), date(2026, 2, 28))
    assert timesheet_period(date(2026, 3, 15)) == (date(2026, 3, 1), date(2026, 3, 15))
    assert timesheet_period(date(2026, 3, 10)) is None


def test_report_rows_are_read_only_views(svc, sessions_repo):
    svc.build_period_report(now=NOW)

    assert sessions_repo.get_by_id(4).status == SessionStatus.ACTIVE


def test_zero_hour_closed_session_still_shows_hours(sessions_repo, breaks_repo):
    mon = datetime(2026, 2, 2, 9, 0)
    sessions_repo.add(closed_session(1, 1, mon, mon + timedelta(hours=1), total_hours=0.0))

    (row,) = ReportService(sessions_repo, breaks_repo).build_period_report(now=NOW).rows

    assert row.work_hours == "0.0h"
