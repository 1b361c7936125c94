# tests/test_calendar.py
from datetime import date

from backend.logic.calendar import (
    day_agenda,
    days_with_activity,
    month_days,
    month_grid,
    shift_month,
    upcoming_deadlines,
)
from backend.models import CalendarEvent, Status, Tussle


def _t(id, due, status=Status.PENDING):
    return Tussle(id=id, company_id="c1", name=id, sell_price=0, status=status, due_date=due)


def test_shift_month_wraps_years():
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2026, 12, 1) == (2027, 1)
    assert shift_month(2026, 10, -5) == (2026, 5)


def test_month_days():
    assert len(month_days(2024, 2)) == 29
    assert month_days(2026, 10)[-1] == date(2026, 10, 31)


def test_month_grid_starts_on_sunday():
    grid = month_grid(2026, 10)
    # October 1st 2026 is a Thursday
    assert grid[0][:4] == [None, None, None, None]
    assert grid[0][4] == date(2026, 10, 1)
    assert all(len(week) == 7 for week in grid)
    flat = [d for week in grid for d in week if d]
    assert flat == month_days(2026, 10)


def test_day_agenda_merges_events_and_deadlines():
    day = date(2026, 10, 20)
    events = [CalendarEvent(id="e1", date=day, title="Fitting"), CalendarEvent(id="e2", date=date(2026, 10, 21), title="x")]
    deadlines = [_t("t1", day), _t("t2", None)]
    agenda = day_agenda(day, events, deadlines)
    assert [e.id for e in agenda.events] == ["e1"]
    assert [t.id for t in agenda.deadlines] == ["t1"]
    assert not agenda.is_empty
    assert day_agenda(date(2026, 10, 1), events, deadlines).is_empty


def test_days_with_activity():
    events = [CalendarEvent(id="e1", date=date(2026, 10, 2), title="x")]
    deadlines = [_t("t1", date(2026, 10, 5)), _t("t2", None)]
    assert days_with_activity(events, deadlines) == {date(2026, 10, 2), date(2026, 10, 5)}


def test_upcoming_deadlines_pending_only_and_sorted():
    tussles = [
        _t("late", date(2026, 12, 1)),
        _t("done", date(2026, 10, 1), Status.COMPLETED),
        _t("soon", date(2026, 10, 20)),
        _t("undated", None),
    ] + [_t(f"x{i}", date(2027, 1, i + 1)) for i in range(5)]
    due = upcoming_deadlines(tussles)
    assert [t.id for t in due][:2] == ["soon", "late"]
    assert len(due) == 5
