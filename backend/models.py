# ------------------------------------------------------------------------------
# Tussle Tracker
# Module: Typed records
# File: backend/models.py
# ------------------------------------------------------------------------------
"""
Typed records for every collection the screens read.

Rows arrive from PostgREST as plain dicts; each record's ``from_row`` converts
them immediately so nothing downstream works on untyped data. Embedded
relations (``companies(*)``, ``receipts(*)``, ``workers(*)``) are converted too
when present.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from backend.errors import RecordError
from backend.logic.money import Money, to_money


class Role(str, Enum):
    OWNER = "owner"
    EMPLOYEE = "employee"


class Status(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> "Status":
        return Status.COMPLETED if self is Status.PENDING else Status.PENDING


# -----------------------------
# Row helpers
# -----------------------------
def _req(row: Mapping[str, Any], key: str, collection: str) -> Any:
    v = row.get(key)
    if v is None:
        raise RecordError(f"{collection} row is missing '{key}'.", collection=collection)
    return v


def _opt_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v)
    return s if s.strip() else None


def _parse_date(v: Any) -> Optional[date]:
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v)[:10])
    except ValueError:
        raise RecordError(f"Invalid date value: {v!r}")


def _parse_ts(v: Any) -> Optional[datetime]:
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v
    if isinstance(v, date):
        return datetime(v.year, v.month, v.day)
    try:
        return datetime.fromisoformat(str(v).replace("Z", "+00:00"))
    except ValueError:
        raise RecordError(f"Invalid timestamp value: {v!r}")


def _enum(kind, v: Any, collection: str):
    try:
        return kind(v)
    except ValueError:
        raise RecordError(f"Unknown {kind.__name__.lower()} {v!r} in {collection}.", collection=collection)


def _embedded(row: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    v = row.get(key)
    # PostgREST returns a dict for many-to-one embeds; some setups return a one-element list
    if isinstance(v, list):
        return v[0] if v else None
    return v if isinstance(v, Mapping) else None


# -----------------------------
# Records
# -----------------------------
@dataclass(frozen=True)
class Profile:
    id: str
    username: Optional[str]
    full_name: Optional[str]
    role: Role
    salary: Optional[Money] = None
    id_card: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        salary = row.get("salary")
        return cls(
            id=str(_req(row, "id", "profiles")),
            username=_opt_str(row.get("username")),
            full_name=_opt_str(row.get("full_name")),
            role=_enum(Role, _req(row, "role", "profiles"), "profiles"),
            salary=None if salary is None else to_money(salary),
            id_card=_opt_str(row.get("id_card")),
        )

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or "Unnamed"


@dataclass(frozen=True)
class Company:
    id: str
    name: str
    logo_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Company":
        return cls(
            id=str(_req(row, "id", "companies")),
            name=str(row.get("name") or ""),
            logo_url=_opt_str(row.get("logo_url")),
        )


@dataclass(frozen=True)
class Tussle:
    id: str
    company_id: Optional[str]
    name: str
    sell_price: Money
    status: Status
    due_date: Optional[date] = None
    image_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    company: Optional[Company] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Tussle":
        company_row = _embedded(row, "companies")
        company = Company.from_row(company_row) if company_row and company_row.get("id") is not None else None
        company_id = row.get("company_id")
        if company_id is None and company is not None:
            company_id = company.id
        return cls(
            id=str(_req(row, "id", "tussles")),
            company_id=None if company_id is None else str(company_id),
            name=str(row.get("name") or ""),
            sell_price=to_money(row.get("sell_price")),
            status=_enum(Status, row.get("status") or "pending", "tussles"),
            due_date=_parse_date(row.get("due_date")),
            image_url=_opt_str(row.get("image_url")),
            notes=_opt_str(row.get("notes")),
            created_at=_parse_ts(row.get("created_at")),
            company=company,
        )


@dataclass(frozen=True)
class Receipt:
    id: str
    total_amount: Money
    image_url: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Receipt":
        return cls(
            id=str(_req(row, "id", "receipts")),
            total_amount=to_money(row.get("total_amount")),
            image_url=_opt_str(row.get("image_url")),
            uploaded_at=_parse_ts(row.get("uploaded_at")),
        )


@dataclass(frozen=True)
class ExpenseAllocation:
    id: Optional[str]
    tussle_id: str
    receipt_id: Optional[str]
    allocated_amount: Money
    receipt: Optional[Receipt] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ExpenseAllocation":
        receipt_row = _embedded(row, "receipts")
        receipt = Receipt.from_row(receipt_row) if receipt_row and receipt_row.get("id") is not None else None
        receipt_id = row.get("receipt_id")
        if receipt_id is None and receipt is not None:
            receipt_id = receipt.id
        rid = row.get("id")
        return cls(
            id=None if rid is None else str(rid),
            tussle_id=str(_req(row, "tussle_id", "expense_allocations")),
            receipt_id=None if receipt_id is None else str(receipt_id),
            allocated_amount=to_money(row.get("allocated_amount")),
            receipt=receipt,
        )


@dataclass(frozen=True)
class Worker:
    id: str
    name: str
    specialty: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Worker":
        return cls(
            id=str(_req(row, "id", "workers")),
            name=str(row.get("name") or ""),
            specialty=_opt_str(row.get("specialty")),
            phone=_opt_str(row.get("phone")),
        )


@dataclass(frozen=True)
class WorkAssignment:
    id: Optional[str]
    tussle_id: Optional[str]
    worker_id: Optional[str]
    quantity: int
    rate: Money
    total_pay: Money
    status: Status = Status.PENDING
    due_date: Optional[date] = None
    worker: Optional[Worker] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WorkAssignment":
        worker_row = _embedded(row, "workers")
        worker = Worker.from_row(worker_row) if worker_row and worker_row.get("id") is not None else None
        worker_id = row.get("worker_id")
        if worker_id is None and worker is not None:
            worker_id = worker.id
        rid = row.get("id")
        tid = row.get("tussle_id")
        try:
            quantity = int(Decimal(str(row.get("quantity") or 0)))
        except ArithmeticError:
            quantity = 0
        return cls(
            id=None if rid is None else str(rid),
            tussle_id=None if tid is None else str(tid),
            worker_id=None if worker_id is None else str(worker_id),
            quantity=quantity,
            rate=to_money(row.get("rate")),
            # stored value wins; it is never re-derived from quantity and rate
            total_pay=to_money(row.get("total_pay")),
            status=_enum(Status, row.get("status") or "pending", "work_assignments"),
            due_date=_parse_date(row.get("due_date")),
            worker=worker,
        )


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    date: date
    title: str
    type: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CalendarEvent":
        return cls(
            id=str(_req(row, "id", "calendar_events")),
            date=_parse_date(_req(row, "date", "calendar_events")),
            title=str(row.get("title") or ""),
            type=_opt_str(row.get("type")),
        )


# -----------------------------
# Embedded relation flattening
# -----------------------------
def split_tussle_rows(
    rows: List[Dict[str, Any]],
) -> Tuple[List[Tussle], List[ExpenseAllocation], List[WorkAssignment]]:
    """
    Flatten tussle rows fetched with embedded ``expense_allocations`` and
    ``work_assignments`` into three typed lists linked by ``tussle_id``.
    """
    tussles: List[Tussle] = []
    allocations: List[ExpenseAllocation] = []
    assignments: List[WorkAssignment] = []

    for row in rows or []:
        t = Tussle.from_row(row)
        tussles.append(t)
        for a in row.get("expense_allocations") or []:
            allocations.append(ExpenseAllocation.from_row({**a, "tussle_id": t.id}))
        for w in row.get("work_assignments") or []:
            assignments.append(WorkAssignment.from_row({**w, "tussle_id": t.id}))

    return tussles, allocations, assignments
