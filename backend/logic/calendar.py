# backend/logic/calendar.py
"""
Calendar views. Event rows and tussle deadlines are separate sources that are
only merged here, at render time.
"""
from __future__ import annotations

import calendar as _cal
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence, Set, Tuple

from backend.models import CalendarEvent, Status, Tussle


@dataclass(frozen=True)
class DayAgenda:
    day: date
    events: Tuple[CalendarEvent, ...]
    deadlines: Tuple[Tussle, ...]

    @property
    def is_empty(self) -> bool:
        return not self.events and not self.deadlines


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def month_days(year: int, month: int) -> List[date]:
    _, n = _cal.monthrange(year, month)
    return [date(year, month, d) for d in range(1, n + 1)]


def month_grid(year: int, month: int) -> List[List[date | None]]:
    """Weeks of the month, Sunday first; days outside the month are None."""
    weeks = _cal.Calendar(firstweekday=6).monthdayscalendar(year, month)
    return [[date(year, month, d) if d else None for d in week] for week in weeks]


def day_agenda(day: date, events: Iterable[CalendarEvent], deadlines: Iterable[Tussle]) -> DayAgenda:
    return DayAgenda(
        day=day,
        events=tuple(e for e in events if e.date == day),
        deadlines=tuple(t for t in deadlines if t.due_date == day),
    )


def days_with_activity(events: Iterable[CalendarEvent], deadlines: Iterable[Tussle]) -> Set[date]:
    days = {e.date for e in events}
    days.update(t.due_date for t in deadlines if t.due_date is not None)
    return days


def upcoming_deadlines(tussles: Sequence[Tussle], limit: int = 5) -> List[Tussle]:
    pending = [t for t in tussles if t.status is Status.PENDING and t.due_date is not None]
    return sorted(pending, key=lambda t: t.due_date)[:limit]
