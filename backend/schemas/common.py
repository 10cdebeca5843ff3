# backend/schemas/common.py
from typing import Any, Literal, Optional
from pydantic import BaseModel

ErrorKind = Literal[
    "validation", "conflict", "invalid_credentials", "unauthenticated", "not_found", "forbidden", "storage",
]


class StoreResult(BaseModel):
    """Uniform outcome of every store operation."""
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "StoreResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> "StoreResult":
        return cls(success=False, message=message, error=error)
