from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .formatting import DEFAULT_CURRENCY_SYMBOL, DEFAULT_LOCALE


@dataclass(frozen=True)
class Settings:
    environment: str = "dev"
    project_id: str | None = None
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    currency_locale: str = DEFAULT_LOCALE
    payload_dir: Path = Path("data")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=os.getenv("ENVIRONMENT", "dev"),
            project_id=os.getenv("PROJECT_ID") or None,
            currency_symbol=os.getenv("CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL),
            currency_locale=os.getenv("CURRENCY_LOCALE", DEFAULT_LOCALE),
            payload_dir=Path(os.getenv("PAYLOAD_DIR", "data")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


__all__ = ["Settings", "get_settings"]
