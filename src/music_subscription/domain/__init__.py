# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, messages, exceptions and the event bus
- music/: Media items, playback/connection states and notifications
"""

from music_subscription.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
