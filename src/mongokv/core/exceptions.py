"""
Unified exception hierarchy for mongokv.
SINGLE SOURCE of exceptions and error responses for the whole package.
"""

import secrets
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, Field


# ============================================================================
# PART 1: PYTHON EXCEPTIONS (for raise/catch)
# ============================================================================


class ErrorType(str, Enum):
    """Failure kinds a caller can branch on."""

    CONFIGURATION = "configuration_error"
    CONNECTIVITY = "connectivity_error"
    ALREADY_CONNECTED = "already_connected"
    NOT_CONNECTED = "not_connected"
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    TYPE_MISMATCH = "type_mismatch"
    STORE = "store_error"
    INTERNAL = "internal_error"


class MongoKVError(Exception):
    """
    Base error of the mongokv package.

    Features:
    1. Structured serialization
    2. Rich context
    3. Resolution suggestions
    4. Unique ID for tracking
    """

    kind: ErrorType = ErrorType.INTERNAL

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.id: str = secrets.token_hex(16)
        self.timestamp: datetime = datetime.now(timezone.utc)
        self.message: str = message
        self.code: str = code or self.__class__.__name__
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[Exception] = cause
        self.suggestions: List[str] = []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a dictionary.

        Returns:
            {
                "error_id": "hex32chars",
                "code": "StoreError",
                "kind": "store_error",
                "message": "failed to put value: ...",
                "timestamp": "2024-01-20T10:30:00Z",
                "context": {...}
            }
        """
        result: Dict[str, Any] = {
            "error_id": self.id,
            "code": self.code,
            "kind": self.kind.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            "context": self.context,
        }

        if self.cause:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}

        if self.suggestions:
            result["suggestions"] = self.suggestions

        return result

    def add_suggestion(self, suggestion: str) -> None:
        """
        Add a resolution suggestion to the error.

        Example:
            error = ConnectivityError("failed to check connection with database")
            error.add_suggestion("Verify that mongod is running")
        """
        if not suggestion or not isinstance(suggestion, str):
            return

        if suggestion not in self.suggestions:
            self.suggestions.append(suggestion)

    def is_retryable(self) -> bool:
        """Whether the caller may retry the same call."""
        return False


class ConfigurationError(MongoKVError):
    """Malformed or incomplete connection descriptor or settings."""

    kind = ErrorType.CONFIGURATION


class ConnectivityError(MongoKVError):
    """
    Store unreachable, or the session lifecycle was misused.

    A failed ping or client construction is retryable; lifecycle misuse
    (the subclasses below) is not.
    """

    kind = ErrorType.CONNECTIVITY

    def is_retryable(self) -> bool:
        return True


class AlreadyConnectedError(ConnectivityError):
    """connect() called on a session that already holds a client."""

    kind = ErrorType.ALREADY_CONNECTED

    def is_retryable(self) -> bool:
        return False


class NotConnectedError(ConnectivityError):
    """Operation called on a session without a client."""

    kind = ErrorType.NOT_CONNECTED

    def is_retryable(self) -> bool:
        return False


class ValidationError(MongoKVError):
    """
    Invalid argument: collection name, key or value.

    Context:
    {
        "field": "collection_name",
        "value": "",
        "reason": "empty"
    }
    """

    kind = ErrorType.VALIDATION


class NotFoundError(MongoKVError):
    """No document for the requested key."""

    kind = ErrorType.NOT_FOUND


class TypeMismatchError(MongoKVError):
    """Stored value type differs from the requested type."""

    kind = ErrorType.TYPE_MISMATCH


class StoreError(MongoKVError):
    """Any other read, write or index failure reported by MongoDB."""

    kind = ErrorType.STORE

    def is_retryable(self) -> bool:
        """Store errors are sometimes transient (elections, timeouts)."""
        return True


# ============================================================================
# PART 2: RESPONSE MODELS (for callers that serialize errors)
# ============================================================================


class ErrorResponse(BaseModel):
    """Structured error payload, as printed by the CLI."""

    error_type: ErrorType = Field(..., description="Failure kind")
    message: str = Field(..., description="Main error message")
    error_id: Optional[str] = Field(default=None, description="Unique ID for tracking")
    code: Optional[str] = Field(default=None, description="Exception class name")
    retryable: bool = Field(default=False, description="Whether retrying may succeed")
    context: Optional[Dict[str, Any]] = Field(
        default=None, description="Additional error context"
    )
    suggestions: Optional[List[str]] = Field(
        default=None, description="Suggestions to resolve the error"
    )


# ============================================================================
# PART 3: HELPERS (bridge between exceptions and responses)
# ============================================================================


def from_exception(exc: BaseException) -> ErrorResponse:
    """
    Convert an exception into an ErrorResponse.

    Anything that is not a MongoKVError is reported as an internal error.
    """
    if not isinstance(exc, MongoKVError):
        return ErrorResponse(
            error_type=ErrorType.INTERNAL,
            message=str(exc) or type(exc).__name__,
            code=type(exc).__name__,
        )

    return ErrorResponse(
        error_type=exc.kind,
        message=exc.message,
        error_id=exc.id,
        code=exc.code,
        retryable=exc.is_retryable(),
        context=exc.context or None,
        suggestions=exc.suggestions or None,
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ErrorType",
    "MongoKVError",
    "ConfigurationError",
    "ConnectivityError",
    "AlreadyConnectedError",
    "NotConnectedError",
    "ValidationError",
    "NotFoundError",
    "TypeMismatchError",
    "StoreError",
    "ErrorResponse",
    "from_exception",
]
