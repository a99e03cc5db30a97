"""Base exception classes for domain-level errors."""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class ResolutionError(DomainError):
    """Raised when a query cannot be resolved into a playable media item."""

    def __init__(self, query: str, message: str | None = None) -> None:
        msg = message or f"Could not resolve '{query}'"
        super().__init__(msg, code="RESOLUTION_FAILED")
        self.query = query


class HandOffError(DomainError):
    """Raised when the player refuses a resource (invalid or unsupported)."""

    def __init__(self, message: str, resource: Any = None) -> None:
        super().__init__(message, code="HAND_OFF_FAILED")
        self.resource = resource


class PlayerFatalError(DomainError):
    """Reported by the player when playback of its current resource dies."""

    def __init__(
        self, resource: Any, cause: BaseException | None = None, message: str | None = None
    ) -> None:
        msg = message or (f"Player failed: {cause}" if cause else "Player failed")
        super().__init__(msg, code="PLAYER_FATAL")
        self.resource = resource
        self.cause = cause


class ConnectionLostError(DomainError):
    """The voice connection dropped and the reconnect policy gave up."""

    def __init__(self, reason: str, message: str | None = None) -> None:
        msg = message or f"Connection lost: {reason}"
        super().__init__(msg, code="CONNECTION_LOST")
        self.reason = reason
