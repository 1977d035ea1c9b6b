from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Sequence

from pydantic import Field, computed_field, field_validator

from ..calculator import compute_invoice_totals
from ..numbers import parse_lenient_number
from .base import CamelModel
from .line_item import LineItem


class InvoiceStatus(str, Enum):
    draft = "DRAFT"
    sent = "SENT"
    paid = "PAID"
    overdue = "OVERDUE"
    cancelled = "CANCELLED"


class Invoice(CamelModel):
    id: str | None = None
    invoice_number: str | None = None
    title: str | None = None
    brand_id: str | None = None
    client_user_id: str | None = None
    items: Sequence[LineItem] = Field(default_factory=list)
    tax_amount: float = 0.0
    paid_amount: float = 0.0
    status: InvoiceStatus = InvoiceStatus.draft
    due_date: datetime | date | None = None

    @field_validator("tax_amount", "paid_amount", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> float:
        return parse_lenient_number(value)

    @computed_field
    @property
    def subtotal(self) -> float:
        return compute_invoice_totals(self.items, self.tax_amount).subtotal

    @computed_field(alias="totalAmount")
    @property
    def total_amount(self) -> float:
        return compute_invoice_totals(self.items, self.tax_amount).total_amount


class InvoiceView(CamelModel):
    """Display values derived for a single invoice at one point in time."""

    status: InvoiceStatus
    overdue: bool
    past_due: bool
    subtotal: float
    total_amount: float
    paid_amount: float
    remaining_balance: float


__all__ = ["Invoice", "InvoiceStatus", "InvoiceView"]
