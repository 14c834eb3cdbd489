"""Structured error types for the matching and optimization engine.

Only InvalidInputError is a hard failure for callers. Catalog outages are
raised by catalog providers and folded into result data by the matcher and
optimizer; unmatched ingredients and incompatible units are never exceptions
(see MatchType.NOT_FOUND and ProductMatch.match_reason).
"""

from enum import Enum
from typing import Any, Dict, Optional


class EngineErrorCode(Enum):
    """Error codes, string valued for serialization and logging."""

    INVALID_INPUT = "INVALID_INPUT"
    CATALOG_UNAVAILABLE = "CATALOG_UNAVAILABLE"
    CANCELLED = "CANCELLED"


class GroceryEngineError(Exception):
    """Base exception for all engine errors.

    Attributes:
        code: EngineErrorCode identifying the error type
        message: Human-readable error description
        context: Dictionary of relevant error context
    """

    def __init__(
        self,
        code: EngineErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(f"[{code.value}] {message}")

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code!r}, "
            f"message={self.message!r}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context
        }


class InvalidInputError(GroceryEngineError):
    """Raised synchronously, before any catalog lookup, for bad input.

    Examples: empty ingredient name, non-positive quantity, empty store id.
    """

    def __init__(self, field: str, value: Any, reason: str):
        context: Dict[str, Any] = {
            "field": field,
            "value": str(value) if value is not None else None,
            "reason": reason
        }

        message = f"Invalid '{field}': {reason}"
        if value is not None:
            message += f" (value: {value!r})"

        super().__init__(
            code=EngineErrorCode.INVALID_INPUT,
            message=message,
            context=context
        )

        self.field = field
        self.value = value
        self.reason = reason


class CatalogUnavailableError(GroceryEngineError):
    """Raised by a catalog provider when a store cannot be queried.

    Covers network failures, timeouts, HTTP errors and unknown stores.
    """

    def __init__(
        self,
        supermarket_id: str,
        operation: str,
        status_code: Optional[int] = None,
        timeout: bool = False,
        detail: Optional[str] = None
    ):
        context: Dict[str, Any] = {
            "supermarket_id": supermarket_id,
            "operation": operation,
        }
        if status_code is not None:
            context["status_code"] = status_code
        if timeout:
            context["timeout"] = timeout
        if detail:
            context["detail"] = detail

        if timeout:
            message = f"Catalog timeout during {operation} for '{supermarket_id}'"
        elif status_code:
            message = f"Catalog error during {operation} for '{supermarket_id}': HTTP {status_code}"
        else:
            message = f"Catalog unavailable during {operation} for '{supermarket_id}'"
        if detail:
            message += f" ({detail})"

        super().__init__(
            code=EngineErrorCode.CATALOG_UNAVAILABLE,
            message=message,
            context=context
        )

        self.supermarket_id = supermarket_id
        self.operation = operation
        self.status_code = status_code
        self.timeout = timeout


class OptimizationCancelledError(GroceryEngineError):
    """Raised when an optimization is cancelled while lookups are in flight.

    No partial result accompanies this error.
    """

    def __init__(self, operation: str, pending_lookups: int = 0):
        super().__init__(
            code=EngineErrorCode.CANCELLED,
            message=f"{operation} cancelled with {pending_lookups} catalog lookups pending",
            context={"operation": operation, "pending_lookups": pending_lookups}
        )
        self.operation = operation
        self.pending_lookups = pending_lookups
