# backend/logic/aggregation.py
"""
Revenue, cost and profit for a single tussle, a company, or the whole business.

Every scope is the elementwise sum of one per-tussle rule, so company figures
equal the sum of their tussles and business figures equal the sum of all
tussles. The business scope additionally subtracts employee salaries; the
tussle and company scopes never do.

Everything here is a pure function of already-fetched typed records.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Sequence

from backend.logic.calendar import shift_month
from backend.logic.money import ZERO, Money, money_sum, percent
from backend.models import (
    Company,
    ExpenseAllocation,
    Profile,
    Receipt,
    Role,
    Status,
    Tussle,
    WorkAssignment,
    Worker,
)

Granularity = Literal["weekly", "monthly"]

WEEKLY_POINTS = 7
MONTHLY_POINTS = 6


@dataclass(frozen=True)
class Financials:
    revenue: Money = ZERO
    material_cost: Money = ZERO
    labor_cost: Money = ZERO

    @property
    def total_cost(self) -> Money:
        return self.material_cost + self.labor_cost

    @property
    def profit(self) -> Money:
        return self.revenue - self.total_cost

    @property
    def profit_margin(self) -> Decimal:
        return percent(self.profit, self.revenue)

    def __add__(self, other: "Financials") -> "Financials":
        return Financials(
            revenue=self.revenue + other.revenue,
            material_cost=self.material_cost + other.material_cost,
            labor_cost=self.labor_cost + other.labor_cost,
        )


@dataclass(frozen=True)
class BusinessFinancials:
    tussles: Financials
    employee_salaries: Money

    @property
    def revenue(self) -> Money:
        return self.tussles.revenue

    @property
    def material_cost(self) -> Money:
        return self.tussles.material_cost

    @property
    def labor_cost(self) -> Money:
        return self.tussles.labor_cost

    @property
    def labor_and_salaries(self) -> Money:
        return self.tussles.labor_cost + self.employee_salaries

    @property
    def profit(self) -> Money:
        return self.tussles.profit - self.employee_salaries


@dataclass(frozen=True)
class TrendPoint:
    label: str
    start: date
    end: date
    revenue: Money
    costs: Money

    @property
    def profit(self) -> Money:
        return self.revenue - self.costs


# -----------------------------
# Per-tussle rule
# -----------------------------
def _costs_by_tussle(
    allocations: Iterable[ExpenseAllocation],
    assignments: Iterable[WorkAssignment],
) -> Dict[str, Financials]:
    material: Dict[str, list] = defaultdict(list)
    labor: Dict[str, list] = defaultdict(list)
    for a in allocations:
        material[a.tussle_id].append(a.allocated_amount)
    for w in assignments:
        if w.tussle_id is not None:
            labor[w.tussle_id].append(w.total_pay)
    return {
        tid: Financials(material_cost=money_sum(material.get(tid, [])), labor_cost=money_sum(labor.get(tid, [])))
        for tid in set(material) | set(labor)
    }


def tussle_financials(
    tussle: Tussle,
    allocations: Iterable[ExpenseAllocation] = (),
    assignments: Iterable[WorkAssignment] = (),
) -> Financials:
    material = money_sum(a.allocated_amount for a in allocations if a.tussle_id == tussle.id)
    labor = money_sum(w.total_pay for w in assignments if w.tussle_id == tussle.id)
    return Financials(revenue=money_sum([tussle.sell_price]), material_cost=material, labor_cost=labor)


def _sum_over(
    tussles: Iterable[Tussle],
    allocations: Iterable[ExpenseAllocation],
    assignments: Iterable[WorkAssignment],
) -> Financials:
    costs = _costs_by_tussle(allocations, assignments)
    total = Financials()
    for t in tussles:
        c = costs.get(t.id, Financials())
        total = total + Financials(revenue=money_sum([t.sell_price]), material_cost=c.material_cost, labor_cost=c.labor_cost)
    return total


def financials_by_tussle(
    tussles: Sequence[Tussle],
    allocations: Iterable[ExpenseAllocation],
    assignments: Iterable[WorkAssignment],
) -> Dict[str, Financials]:
    costs = _costs_by_tussle(allocations, assignments)
    out: Dict[str, Financials] = {}
    for t in tussles:
        c = costs.get(t.id, Financials())
        out[t.id] = Financials(revenue=money_sum([t.sell_price]), material_cost=c.material_cost, labor_cost=c.labor_cost)
    return out


# -----------------------------
# Scopes
# -----------------------------
def company_financials(
    company_id: str,
    tussles: Iterable[Tussle],
    allocations: Iterable[ExpenseAllocation] = (),
    assignments: Iterable[WorkAssignment] = (),
) -> Financials:
    scoped = [t for t in tussles if t.company_id == company_id]
    return _sum_over(scoped, allocations, assignments)


def employee_salaries(profiles: Iterable[Profile]) -> Money:
    return money_sum(p.salary for p in profiles if p.role is Role.EMPLOYEE)


def business_financials(
    tussles: Iterable[Tussle],
    allocations: Iterable[ExpenseAllocation] = (),
    assignments: Iterable[WorkAssignment] = (),
    profiles: Iterable[Profile] = (),
) -> BusinessFinancials:
    return BusinessFinancials(
        tussles=_sum_over(tussles, allocations, assignments),
        employee_salaries=employee_salaries(profiles),
    )


def status_tally(tussles: Iterable[Tussle]) -> Dict[str, int]:
    tally = {Status.PENDING.value: 0, Status.COMPLETED.value: 0}
    for t in tussles:
        tally[t.status.value] += 1
    return tally


# -----------------------------
# Trend buckets
# -----------------------------
def week_start(d: date) -> date:
    # weeks start on Sunday
    return d - timedelta(days=(d.weekday() + 1) % 7)


def _month_end(year: int, month: int) -> date:
    ny, nm = shift_month(year, month, 1)
    return date(ny, nm, 1) - timedelta(days=1)


def trend_buckets(granularity: Granularity, today: date) -> List[tuple[str, date, date]]:
    """
    (label, start, end) for each bucket, oldest first, ending with the period
    that contains ``today``. Both bounds are inclusive calendar dates.
    """
    buckets: List[tuple[str, date, date]] = []
    if granularity == "weekly":
        current = week_start(today)
        for i in range(WEEKLY_POINTS - 1, -1, -1):
            start = current - timedelta(weeks=i)
            end = start + timedelta(days=6)
            buckets.append((f"{start:%b} {start.day}", start, end))
    elif granularity == "monthly":
        for i in range(MONTHLY_POINTS - 1, -1, -1):
            y, m = shift_month(today.year, today.month, -i)
            start = date(y, m, 1)
            buckets.append((f"{start:%b}", start, _month_end(y, m)))
    else:
        raise ValueError(f"Unknown granularity: {granularity!r}")
    return buckets


def _created_on(t: Tussle, tz: Optional[tzinfo]) -> Optional[date]:
    ts = t.created_at
    if ts is None:
        return None
    if tz is not None and isinstance(ts, datetime) and ts.tzinfo is not None:
        ts = ts.astimezone(tz)
    return ts.date() if isinstance(ts, datetime) else ts


def profit_trend(
    tussles: Sequence[Tussle],
    allocations: Iterable[ExpenseAllocation],
    assignments: Iterable[WorkAssignment],
    granularity: Granularity,
    today: date,
    tz: Optional[tzinfo] = None,
) -> List[TrendPoint]:
    per_tussle = financials_by_tussle(tussles, allocations, assignments)
    points: List[TrendPoint] = []
    for label, start, end in trend_buckets(granularity, today):
        in_bucket = [t for t in tussles if (d := _created_on(t, tz)) is not None and start <= d <= end]
        f = Financials()
        for t in in_bucket:
            f = f + per_tussle[t.id]
        points.append(TrendPoint(label=label, start=start, end=end, revenue=f.revenue, costs=f.total_cost))
    return points


# -----------------------------
# Screen summaries
# -----------------------------
@dataclass(frozen=True)
class CompanySummary:
    company: Company
    revenue: Money
    tussle_count: int


def company_summaries(companies: Iterable[Company], tussles: Iterable[Tussle]) -> List[CompanySummary]:
    by_company: Dict[str, List[Tussle]] = defaultdict(list)
    for t in tussles:
        if t.company_id is not None:
            by_company[t.company_id].append(t)
    out = [
        CompanySummary(
            company=c,
            revenue=money_sum(t.sell_price for t in by_company.get(c.id, [])),
            tussle_count=len(by_company.get(c.id, [])),
        )
        for c in companies
    ]
    return sorted(out, key=lambda s: s.company.name.lower())


def filter_companies(summaries: Iterable[CompanySummary], term: str) -> List[CompanySummary]:
    needle = (term or "").strip().lower()
    return [s for s in summaries if needle in s.company.name.lower()]


@dataclass(frozen=True)
class WorkerSummary:
    worker: Worker
    total_earnings: Money
    active_jobs: int
    total_jobs: int


def worker_summaries(workers: Iterable[Worker], assignments: Iterable[WorkAssignment]) -> List[WorkerSummary]:
    by_worker: Dict[str, List[WorkAssignment]] = defaultdict(list)
    for a in assignments:
        if a.worker_id is not None:
            by_worker[a.worker_id].append(a)
    out = []
    for w in workers:
        mine = by_worker.get(w.id, [])
        out.append(
            WorkerSummary(
                worker=w,
                # only completed piecework counts as earned
                total_earnings=money_sum(a.total_pay for a in mine if a.status is Status.COMPLETED),
                active_jobs=sum(1 for a in mine if a.status is Status.PENDING),
                total_jobs=len(mine),
            )
        )
    return out


def home_stats(tussles: Sequence[Tussle]) -> Dict[str, object]:
    tally = status_tally(tussles)
    return {
        "pending": tally["pending"],
        "completed": tally["completed"],
        "revenue": money_sum(t.sell_price for t in tussles),
    }


def receipt_allocated(receipt_id: str, allocations: Iterable[ExpenseAllocation]) -> Money:
    return money_sum(a.allocated_amount for a in allocations if a.receipt_id == receipt_id)


def receipt_remaining(receipt: Receipt, allocations: Iterable[ExpenseAllocation]) -> Money:
    remaining = receipt.total_amount - receipt_allocated(receipt.id, allocations)
    return remaining if remaining > ZERO else ZERO


def remaining_by_receipt(
    receipts: Iterable[Receipt], allocations: Iterable[ExpenseAllocation]
) -> Mapping[str, Money]:
    allocs = list(allocations)
    return {r.id: receipt_remaining(r, allocs) for r in receipts}
