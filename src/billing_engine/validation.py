from __future__ import annotations

import logging
from typing import Collection, Iterable, Sequence

from .aggregator import select_entries
from .errors import InvoiceValidationError, IssueCode, ValidationIssue
from .logging_config import billing_fields
from .models.line_item import LineItem
from .models.time_entry import TimeEntry

logger = logging.getLogger(__name__)


def validate_invoice_items(items: Sequence[LineItem]) -> list[ValidationIssue]:
    """Submission checks for invoice line items.

    The calculator tolerates these values while a draft is being edited;
    callers run this before sending an invoice to the API.
    """
    if not items:
        return [ValidationIssue(code=IssueCode.empty_invoice, message="Invoice must contain at least one item")]

    issues: list[ValidationIssue] = []
    for position, item in enumerate(items, start=1):
        if not item.description.strip():
            issues.append(
                ValidationIssue(
                    code=IssueCode.missing_description,
                    message=f"Please enter description for item {position}",
                    position=position,
                )
            )
        if item.quantity <= 0:
            issues.append(
                ValidationIssue(
                    code=IssueCode.invalid_quantity,
                    message=f"Please enter a valid quantity for item {position}",
                    position=position,
                )
            )
        if item.unit_price < 0:
            issues.append(
                ValidationIssue(
                    code=IssueCode.invalid_unit_price,
                    message=f"Unit price cannot be negative for item {position}",
                    position=position,
                )
            )
    if issues:
        logger.debug("Invoice items rejected", extra=billing_fields(issues=len(issues)))
    return issues


def validate_generation_selection(
    entries: Iterable[TimeEntry],
    selected_ids: Collection[str],
) -> list[ValidationIssue]:
    selected = select_entries(entries, selected_ids)
    if not selected:
        return [
            ValidationIssue(
                code=IssueCode.no_entries_selected,
                message="Please select at least one time entry",
            )
        ]
    return [
        ValidationIssue(
            code=IssueCode.missing_rate,
            message=f"Time entry {entry.id} has no hourly rate and will be billed at 0",
            severity="warning",
        )
        for entry in selected
        if entry.hourly_rate is None
    ]


def validate_generation_fields(
    *,
    brand_id: str | None,
    client_user_id: str | None,
    title: str | None,
) -> list[ValidationIssue]:
    """Brand, client and title must be filled before generating an invoice."""
    fields = {"brandId": brand_id, "clientUserId": client_user_id, "title": title}
    missing = [name for name, value in fields.items() if not (value or "").strip()]
    if not missing:
        return []
    return [
        ValidationIssue(
            code=IssueCode.missing_required_field,
            message=f"Please fill in all required fields ({', '.join(missing)})",
        )
    ]


def validate_generation_request(
    entries: Iterable[TimeEntry],
    selected_ids: Collection[str],
    *,
    brand_id: str | None,
    client_user_id: str | None,
    title: str | None,
) -> list[ValidationIssue]:
    return validate_generation_fields(
        brand_id=brand_id, client_user_id=client_user_id, title=title
    ) + validate_generation_selection(entries, selected_ids)


def ensure_valid(issues: Iterable[ValidationIssue]) -> None:
    blocking = [issue for issue in issues if issue.blocking]
    if blocking:
        raise InvoiceValidationError(blocking)


__all__ = [
    "validate_invoice_items",
    "validate_generation_selection",
    "validate_generation_fields",
    "validate_generation_request",
    "ensure_valid",
]
