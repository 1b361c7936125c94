# backend/logic/intake.py
from __future__ import annotations

import structlog

from backend.database.store import RecordStore, icontains
from backend.logic.validation import require_text
from backend.models import Company

log = structlog.get_logger(__name__)


def resolve_company(store: RecordStore, client_name: str) -> Company:
    """
    Resolve a typed client name to exactly one company.

    Case-insensitive substring match against existing names, first match
    wins. With no match a company is created with the trimmed name. Creates
    at most one row; backend failures propagate (no retry).
    """
    name = require_text(client_name, "client_name", "Client name")

    rows = store.select("companies", filters=[icontains("name", name)], limit=1)
    if rows:
        company = Company.from_row(rows[0])
        log.info("intake_matched", query=name, company_id=company.id)
        return company

    company = Company.from_row(store.insert("companies", {"name": name}))
    log.info("intake_created", query=name, company_id=company.id)
    return company


def order_path(company: Company) -> str:
    return f"/companies/{company.id}?open_tussle=1"
