from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter

from .errors import PayloadError
from .logging_config import billing_fields
from .models.envelope import ApiResponse
from .models.invoice import Invoice
from .models.time_entry import TimeEntry

logger = logging.getLogger(__name__)

_TIME_ENTRIES = TypeAdapter(list[TimeEntry])


class PayloadRepository(Protocol):
    def get_invoice(self, invoice_id: str) -> Invoice:
        ...

    def get_time_entries(self, batch_id: str) -> list[TimeEntry]:
        ...


class LocalPayloadRepository:
    """Reads API response envelopes saved as JSON files.

    Layout: ``<base_path>/invoices/<id>.json`` and
    ``<base_path>/time-entries/<id>.json``.
    """

    def __init__(self, *, base_path: Path) -> None:
        self._base_path = base_path

    def get_invoice(self, invoice_id: str) -> Invoice:
        data = self._load_data("invoices", invoice_id)
        return Invoice.model_validate(data)

    def get_time_entries(self, batch_id: str) -> list[TimeEntry]:
        data = self._load_data("time-entries", batch_id)
        # Listing endpoints wrap the rows as {"timeEntries": [...]}
        if isinstance(data, dict):
            data = data.get("timeEntries", [])
        return _TIME_ENTRIES.validate_python(data)

    def _load_data(self, kind: str, record_id: str) -> Any:
        file_path = self._base_path / kind / f"{record_id}.json"
        if not file_path.exists():
            raise FileNotFoundError(f"Payload not found: {file_path}")
        with file_path.open("r", encoding="utf-8") as fp:
            envelope = ApiResponse.model_validate(json.load(fp))
        if not envelope.success:
            raise PayloadError(envelope.error or f"Request for {kind}/{record_id} failed")
        if envelope.data is None:
            raise PayloadError(f"Envelope for {kind}/{record_id} carried no data")
        logger.debug("Loaded payload", extra=billing_fields(kind=kind, record_id=record_id))
        return envelope.data


__all__ = ["PayloadRepository", "LocalPayloadRepository"]
