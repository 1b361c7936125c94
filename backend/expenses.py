# backend/expenses.py
"""
Receipts and their allocations to tussles.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

import structlog

from backend.database.store import RecordStore, eq
from backend.errors import StorageError, ValidationError, WriteError
from backend.logic.validation import parse_money, validate_allocation, validate_image
from backend.models import ExpenseAllocation, Receipt
from backend.storage import ImageStorage, Upload

log = structlog.get_logger(__name__)


def load_allocations(store: RecordStore, tussle_id: str) -> List[ExpenseAllocation]:
    rows = store.select("expense_allocations", filters=[eq("tussle_id", tussle_id)], relations=["receipts(*)"])
    return [ExpenseAllocation.from_row(r) for r in rows]


def load_receipts(store: RecordStore) -> Tuple[List[Receipt], List[ExpenseAllocation]]:
    """All receipts, newest first, with every allocation drawn against them."""
    receipts = [Receipt.from_row(r) for r in store.select("receipts", order="uploaded_at", desc=True)]
    allocations = [
        ExpenseAllocation.from_row(r)
        for r in store.select("expense_allocations", columns="id, tussle_id, receipt_id, allocated_amount")
    ]
    return receipts, allocations


def allocate_existing(
    store: RecordStore,
    tussle_id: str,
    receipt: Receipt,
    amount: str,
) -> ExpenseAllocation:
    allocated = parse_money(amount, "allocated_amount", "Allocated amount", strictly_positive=True)
    # re-read so the remaining balance reflects allocations made elsewhere
    existing = [
        ExpenseAllocation.from_row(r)
        for r in store.select("expense_allocations", filters=[eq("receipt_id", receipt.id)])
    ]
    validate_allocation(allocated, receipt, existing)

    row = store.insert(
        "expense_allocations",
        {"tussle_id": tussle_id, "receipt_id": receipt.id, "allocated_amount": float(allocated)},
    )
    log.info("allocation_added", tussle_id=tussle_id, receipt_id=receipt.id, amount=str(allocated))
    return ExpenseAllocation.from_row(row)


def add_receipt(
    store: RecordStore,
    storage: ImageStorage,
    tussle_id: str,
    upload: Optional[Upload],
    total_amount: str,
) -> Tuple[Receipt, ExpenseAllocation]:
    """
    Upload a new receipt image, record the receipt, and allocate its full
    total to the tussle.

    Either all three writes land or none stay behind: a failed receipt
    insert removes the uploaded image, a failed allocation insert removes
    the receipt row and the image. The original ``WriteError`` is re-raised.
    """
    if upload is None:
        raise ValidationError("A receipt image is required.", field="file")
    total = parse_money(total_amount, "total_amount", "Receipt total", strictly_positive=True)
    validate_image(upload.content_type, len(upload.data))

    url = storage.upload_receipt(upload.data, upload.filename, upload.content_type)
    try:
        receipt = Receipt.from_row(store.insert("receipts", {"image_url": url, "total_amount": float(total)}))
    except WriteError:
        _discard_receipt_image(storage, url)
        raise

    try:
        allocation = ExpenseAllocation.from_row(
            store.insert(
                "expense_allocations",
                {"tussle_id": tussle_id, "receipt_id": receipt.id, "allocated_amount": float(total)},
            )
        )
    except WriteError:
        try:
            store.delete("receipts", receipt.id)
        except WriteError as e:
            # unallocated receipt stays listed for allocate_existing
            log.warning("orphan_receipt", receipt_id=receipt.id, error=e.message)
        else:
            _discard_receipt_image(storage, url)
        raise

    log.info("receipt_added", tussle_id=tussle_id, receipt_id=receipt.id, amount=str(total))
    return receipt, allocation


def _discard_receipt_image(storage: ImageStorage, url: str) -> None:
    try:
        storage.delete_image(url, bucket=storage.receipt_bucket)
    except StorageError as e:
        log.warning("orphan_image", url=url, error=e.message)
