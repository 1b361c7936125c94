# backend/calendar_events.py
from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from backend.database.store import RecordStore, not_null
from backend.errors import ValidationError
from backend.logic.validation import optional_text, require_text
from backend.models import CalendarEvent, Tussle


def load_calendar(store: RecordStore) -> Tuple[List[CalendarEvent], List[Tussle]]:
    events = [CalendarEvent.from_row(r) for r in store.select("calendar_events", order="date")]
    deadlines = [
        Tussle.from_row(r)
        for r in store.select(
            "tussles",
            columns="id, name, due_date, status, company_id",
            relations=["companies(id, name)"],
            filters=[not_null("due_date")],
            order="due_date",
        )
    ]
    return events, deadlines


def create_event(store: RecordStore, day: Optional[date], title: str, kind: Optional[str] = None) -> CalendarEvent:
    title = require_text(title, "title", "Title")
    if day is None:
        raise ValidationError("Date is required.", field="date")
    row = store.insert("calendar_events", {"date": day.isoformat(), "title": title, "type": optional_text(kind)})
    return CalendarEvent.from_row(row)
