from __future__ import annotations

from pydantic import BaseModel


class AuthContext(BaseModel):
    """Opaque session handed in by the caller; the engine never stores it."""

    token: str
    role: str = "CLIENT"


__all__ = ["AuthContext"]
