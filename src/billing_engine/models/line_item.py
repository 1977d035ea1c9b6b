from __future__ import annotations

from typing import Any

from pydantic import computed_field, field_validator

from ..calculator import compute_line_total
from ..numbers import parse_lenient_number
from .base import CamelModel


class LineItem(CamelModel):
    id: str | None = None
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0
    project_ref: str | None = None

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> float:
        return parse_lenient_number(value)

    @computed_field(alias="totalPrice")
    @property
    def total_price(self) -> float:
        return compute_line_total(self.quantity, self.unit_price)


__all__ = ["LineItem"]
