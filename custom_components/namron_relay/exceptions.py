"""Error types raised by the Namron relay adapter."""

from __future__ import annotations

from typing import Any


class NamronRelayError(Exception):
    """Base class for adapter errors."""


class CatalogError(NamronRelayError):
    """Raised when the attribute catalog violates its invariants."""


class UnsupportedField(NamronRelayError, KeyError):
    """Raised when a write targets a field without a writable descriptor."""

    def __init__(self, field: str) -> None:
        """Store the rejected field name."""

        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        """Return a readable rejection message."""

        return f"Unsupported field: {self.field}"


class InvalidValue(NamronRelayError, ValueError):
    """Raised when input for a field cannot be encoded to a wire value."""

    def __init__(self, field: str, value: Any, reason: str | None = None) -> None:
        """Record the field, the offending input and an optional reason."""

        message = f"Invalid value for {field}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.field = field
        self.value = value
        self.reason = reason


class TransportFailure(NamronRelayError):
    """Raised when the transport rejects or fails a user-initiated request."""

    def __init__(self, operation: str, target: str) -> None:
        """Describe the failed operation and what it targeted."""

        super().__init__(f"{operation} failed for {target}")
        self.operation = operation
        self.target = target
