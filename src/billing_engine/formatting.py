from __future__ import annotations

from typing import Any

from .numbers import round2

DEFAULT_CURRENCY_SYMBOL = "₺"
DEFAULT_LOCALE = "tr-TR"

# (thousands separator, decimal separator)
LOCALE_SEPARATORS: dict[str, tuple[str, str]] = {
    "tr-TR": (".", ","),
    "de-DE": (".", ","),
    "en-US": (",", "."),
    "en-GB": (",", "."),
}


def _split_minutes(minutes: Any) -> tuple[int, int]:
    total = max(int(minutes or 0), 0)
    return divmod(total, 60)


def format_duration(minutes: Any) -> str:
    hours, mins = _split_minutes(minutes)
    return f"{hours}h {mins}m"


def format_hours(minutes: Any) -> str:
    hours, mins = _split_minutes(minutes)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"


def format_currency(
    amount: Any,
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Two-decimal currency string with the locale's separators.

    ``format_currency(1234.5)`` gives ``₺1.234,50``; unknown locales use the
    Turkish separators the dashboard displays.
    """
    group, decimal = LOCALE_SEPARATORS.get(locale, LOCALE_SEPARATORS[DEFAULT_LOCALE])
    value = round2(amount)
    digits = f"{abs(value):,.2f}".translate(str.maketrans({",": group, ".": decimal}))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{digits}"


__all__ = [
    "format_duration",
    "format_hours",
    "format_currency",
    "DEFAULT_CURRENCY_SYMBOL",
    "DEFAULT_LOCALE",
    "LOCALE_SEPARATORS",
]
