from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from .models.invoice import Invoice, InvoiceStatus, InvoiceView
from .numbers import round2, to_decimal

SETTLED_STATUSES = frozenset({InvoiceStatus.paid, InvoiceStatus.cancelled})


def _as_utc(moment: date | datetime) -> datetime:
    if isinstance(moment, datetime):
        return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
    return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)


def _now(now: datetime | None) -> datetime:
    return _as_utc(now) if now is not None else datetime.now(timezone.utc)


def is_overdue(
    due_date: date | datetime | None,
    status: InvoiceStatus | str,
    *,
    now: datetime | None = None,
) -> bool:
    """Display-only overdue flag: a SENT invoice whose due date has passed.

    Invoices already persisted as OVERDUE are left alone, as are drafts and
    settled invoices. The current time is read on every call.
    """
    if due_date is None or InvoiceStatus(status) is not InvoiceStatus.sent:
        return False
    return _as_utc(due_date) < _now(now)


def is_past_due(
    due_date: date | datetime | None,
    status: InvoiceStatus | str,
    *,
    now: datetime | None = None,
) -> bool:
    """Client-portal variant: anything not paid or cancelled past its due date."""
    if due_date is None or InvoiceStatus(status) in SETTLED_STATUSES:
        return False
    return _as_utc(due_date) < _now(now)


def remaining_balance(total_amount: Any, paid_amount: Any) -> float:
    """Signed remainder; negative when overpaid."""
    return round2(to_decimal(total_amount) - to_decimal(paid_amount))


def resolve_invoice_view(invoice: Invoice, *, now: datetime | None = None) -> InvoiceView:
    moment = _now(now)
    return InvoiceView(
        status=invoice.status,
        overdue=is_overdue(invoice.due_date, invoice.status, now=moment),
        past_due=is_past_due(invoice.due_date, invoice.status, now=moment),
        subtotal=invoice.subtotal,
        total_amount=invoice.total_amount,
        paid_amount=round2(invoice.paid_amount),
        remaining_balance=remaining_balance(invoice.total_amount, invoice.paid_amount),
    )


__all__ = ["is_overdue", "is_past_due", "remaining_balance", "resolve_invoice_view", "SETTLED_STATUSES"]
