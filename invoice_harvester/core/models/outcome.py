"""
Outcome model: structured success/failure result returned to the user-facing
layer instead of raised exceptions.
"""

from typing import Any, Literal

from pydantic import BaseModel


class Outcome(BaseModel):
    """
    Result of a user-triggered operation.

    Attributes:
        ok: Whether the operation succeeded
        message: Human-readable summary suitable for a notification
        level: Notification severity
        data: Optional payload (created template, CSV text, ...)
    """

    ok: bool
    message: str
    level: Literal["info", "warning", "error"] = "info"
    data: Any = None

    @classmethod
    def success(cls, message: str, data: Any = None) -> "Outcome":
        return cls(ok=True, message=message, data=data)

    @classmethod
    def warning(cls, message: str) -> "Outcome":
        return cls(ok=False, message=message, level="warning")

    @classmethod
    def failure(cls, message: str) -> "Outcome":
        return cls(ok=False, message=message, level="error")
