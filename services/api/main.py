from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from billing_engine.aggregator import GroupBy, compute_summary, group_entries
from billing_engine.calculator import compute_invoice_totals
from billing_engine.config import get_settings
from billing_engine.errors import InvoiceValidationError, PayloadError
from billing_engine.formatting import format_currency
from billing_engine.logging_config import billing_fields, bind_request_trace, clear_trace, setup_logging
from billing_engine.models.auth import AuthContext
from billing_engine.models.base import CamelModel
from billing_engine.models.envelope import ApiResponse
from billing_engine.models.invoice import Invoice
from billing_engine.models.line_item import LineItem
from billing_engine.models.time_entry import TimeEntry
from billing_engine.numbers import parse_lenient_number
from billing_engine.payload_repository import LocalPayloadRepository
from billing_engine.reports import export_entries_csv
from billing_engine.status import resolve_invoice_view
from billing_engine.validation import ensure_valid, validate_generation_request, validate_invoice_items


class InvoiceItemsRequest(CamelModel):
    items: Sequence[LineItem] = Field(default_factory=list)
    tax_amount: float = 0.0

    @field_validator("tax_amount", mode="before")
    @classmethod
    def _lenient_tax(cls, value: Any) -> float:
        return parse_lenient_number(value)


class GroupEntriesRequest(CamelModel):
    entries: Sequence[TimeEntry]
    group_by: GroupBy = GroupBy.project


class SummaryRequest(CamelModel):
    entries: Sequence[TimeEntry]
    selected_ids: Sequence[str] | None = None


class GenerationPreviewRequest(SummaryRequest):
    brand_id: str | None = None
    client_user_id: str | None = None
    title: str | None = None


class ExportRequest(CamelModel):
    entries: Sequence[TimeEntry]


def _dump(value: BaseModel | Sequence[BaseModel]) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return [item.model_dump(mode="json", by_alias=True) for item in value]


settings = get_settings()

# Setup logging
setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title="Billing Aggregation Engine API", version="0.1.0")

repository = LocalPayloadRepository(base_path=settings.payload_dir.resolve())


@app.middleware("http")
async def assign_trace_id(request: Request, call_next):
    bind_request_trace(request.headers.get("X-Cloud-Trace-Context"), settings.project_id)
    try:
        return await call_next(request)
    finally:
        clear_trace()


def require_auth(
    authorization: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> AuthContext:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return AuthContext(token=token.strip(), role=x_user_role or "CLIENT")


@app.post("/v1/invoices:totals", response_model=ApiResponse)
async def invoice_totals(request: InvoiceItemsRequest) -> ApiResponse:
    totals = compute_invoice_totals(request.items, request.tax_amount)
    return ApiResponse.ok(
        {
            "items": _dump(request.items),
            **_dump(totals),
            "formattedTotal": format_currency(totals.total_amount, settings.currency_symbol, settings.currency_locale),
        }
    )


@app.get("/v1/invoices/{invoice_id}/view", response_model=ApiResponse)
async def stored_invoice_view(invoice_id: str) -> ApiResponse:
    try:
        invoice = repository.get_invoice(invoice_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
    except PayloadError as exc:
        return ApiResponse.fail(str(exc))
    return ApiResponse.ok(_dump(resolve_invoice_view(invoice)))


@app.post("/v1/invoices:validate", response_model=ApiResponse)
async def validate_invoice(request: InvoiceItemsRequest) -> ApiResponse:
    issues = validate_invoice_items(request.items)
    try:
        ensure_valid(issues)
    except InvoiceValidationError as exc:
        logger.info("Invoice validation failed", extra=billing_fields(issues=len(exc.issues)))
        return ApiResponse.fail(str(exc), data={"issues": _dump(exc.issues)})
    return ApiResponse.ok({"issues": _dump(issues)})


@app.post("/v1/invoices:view", response_model=ApiResponse)
async def invoice_view(invoice: Invoice) -> ApiResponse:
    return ApiResponse.ok(_dump(resolve_invoice_view(invoice)))


@app.post("/v1/invoices:generate-preview", response_model=ApiResponse)
async def generation_preview(request: GenerationPreviewRequest) -> ApiResponse:
    selected_ids = request.selected_ids if request.selected_ids is not None else [e.id for e in request.entries]
    issues = validate_generation_request(
        request.entries,
        selected_ids,
        brand_id=request.brand_id,
        client_user_id=request.client_user_id,
        title=request.title,
    )
    summary = compute_summary(request.entries, selected_ids)
    data = {"summary": _dump(summary), "issues": _dump(issues)}
    try:
        ensure_valid(issues)
    except InvoiceValidationError as exc:
        return ApiResponse.fail(str(exc), data=data)
    return ApiResponse.ok(data)


@app.post("/v1/time-entries:group", response_model=ApiResponse)
async def time_entry_groups(request: GroupEntriesRequest) -> ApiResponse:
    groups = group_entries(request.entries, request.group_by)
    return ApiResponse.ok({"groupBy": request.group_by.value, "groupedData": _dump(groups)})


@app.post("/v1/time-entries:summary", response_model=ApiResponse)
async def time_entry_summary(request: SummaryRequest) -> ApiResponse:
    return ApiResponse.ok(_dump(compute_summary(request.entries, request.selected_ids)))


@app.post("/v1/time-entries:export", response_class=PlainTextResponse)
async def time_entry_export(request: ExportRequest, auth: AuthContext = Depends(require_auth)) -> PlainTextResponse:
    logger.info("Exporting time entries", extra=billing_fields(entries=len(request.entries), role=auth.role))
    return PlainTextResponse(export_entries_csv(request.entries), media_type="text/csv")


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})
