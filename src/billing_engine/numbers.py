from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

CENT = Decimal("0.01")
TENTH = Decimal("0.1")

# Enough digits to quantize the product of two finite floats to cents
ROUNDING_PRECISION = 700

# Leading decimal literal, the part of a string a browser's parseFloat reads
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_lenient_number(value: Any) -> float:
    """Coerce form input to a float, falling back to ``0.0``.

    Strings are read the way ``parseFloat`` reads them: leading whitespace is
    skipped and the longest numeric prefix wins, so ``"12abc"`` is 12 and
    ``"1,5"`` is 1. Booleans, ``None``, text without a numeric prefix, NaN,
    infinities and values beyond the float range all collapse to zero.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value.lstrip())
        if match is None:
            return 0.0
        number = float(match.group())
    else:
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal(0)
    try:
        # repr() of a float is its shortest round-tripping form
        return Decimal(repr(parse_lenient_number(value)))
    except InvalidOperation:
        return Decimal(0)


def _quantize(value: Any, step: Decimal) -> float:
    with localcontext() as ctx:
        ctx.prec = ROUNDING_PRECISION
        try:
            rounded = to_decimal(value).quantize(step, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return 0.0
    result = float(rounded)
    if math.isinf(result):
        return 0.0
    return result + 0.0  # normalise -0.0


def round2(value: Any) -> float:
    return _quantize(value, CENT)


def round1(value: Any) -> float:
    return _quantize(value, TENTH)


__all__ = ["parse_lenient_number", "to_decimal", "round2", "round1", "CENT", "TENTH"]
