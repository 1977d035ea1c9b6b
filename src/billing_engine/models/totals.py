from __future__ import annotations

from .base import CamelModel


class InvoiceTotals(CamelModel):
    subtotal: float
    tax_amount: float
    total_amount: float


__all__ = ["InvoiceTotals"]
