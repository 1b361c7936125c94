# backend/people.py
from __future__ import annotations

from typing import List

from backend.database.store import RecordStore, eq
from backend.errors import PermissionDeniedError
from backend.models import Profile, Role
from backend.session import SessionContext


def load_employees(store: RecordStore, session: SessionContext) -> List[Profile]:
    """Employee roster with salaries; owners only."""
    if not session.is_owner:
        raise PermissionDeniedError("Only owners can view employees.")
    rows = store.select("profiles", filters=[eq("role", Role.EMPLOYEE.value)], order="full_name")
    return [Profile.from_row(r) for r in rows]
