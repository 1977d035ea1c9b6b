from __future__ import annotations

from enum import Enum
from typing import Literal, Sequence

from pydantic import BaseModel


class IssueCode(str, Enum):
    invalid_quantity = "INVALID_QUANTITY"
    invalid_unit_price = "INVALID_UNIT_PRICE"
    missing_description = "MISSING_DESCRIPTION"
    empty_invoice = "EMPTY_INVOICE"
    missing_rate = "MISSING_RATE"
    no_entries_selected = "NO_ENTRIES_SELECTED"
    missing_required_field = "MISSING_REQUIRED_FIELD"


class ValidationIssue(BaseModel):
    code: IssueCode
    message: str
    position: int | None = None
    severity: Literal["error", "warning"] = "error"

    @property
    def blocking(self) -> bool:
        return self.severity == "error"


class BillingEngineError(Exception):
    """Base class for errors raised around the billing engine."""


class PayloadError(BillingEngineError):
    """An API envelope reported failure or carried no usable data."""


class InvoiceValidationError(BillingEngineError):
    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = list(issues)
        summary = "; ".join(issue.message for issue in self.issues) or "invalid invoice"
        super().__init__(summary)


__all__ = [
    "IssueCode",
    "ValidationIssue",
    "BillingEngineError",
    "PayloadError",
    "InvoiceValidationError",
]
