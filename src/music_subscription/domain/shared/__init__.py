"""
Shared Domain Kernel

Contains exceptions and the event bus shared across the package.
"""

from music_subscription.domain.shared.events import EventBus
from music_subscription.domain.shared.exceptions import (
    ConnectionLostError,
    DomainError,
    HandOffError,
    InvalidOperationError,
    PlayerFatalError,
    ResolutionError,
)

__all__ = [
    "EventBus",
    "DomainError",
    "InvalidOperationError",
    "ResolutionError",
    "HandOffError",
    "PlayerFatalError",
    "ConnectionLostError",
]
