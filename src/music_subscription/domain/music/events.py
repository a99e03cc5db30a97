"""Notifications published by a music subscription.

Every event carries the ``request_context`` of the media item it concerns,
exactly as the caller supplied it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from music_subscription.domain.music.entities import MediaItem, MediaMetadata
from music_subscription.domain.music.value_objects import DestroyReason
from music_subscription.domain.shared.exceptions import HandOffError, PlayerFatalError


class SubscriptionEvent(BaseModel):
    """Base class for all subscription notifications."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SongStarted(SubscriptionEvent):
    request_context: Any = None
    metadata: MediaMetadata

    @classmethod
    def from_item(cls, item: MediaItem) -> SongStarted:
        return cls(request_context=item.request_context, metadata=item.metadata)


class SongEnded(SubscriptionEvent):
    request_context: Any = None
    metadata: MediaMetadata

    @classmethod
    def from_item(cls, item: MediaItem) -> SongEnded:
        return cls(request_context=item.request_context, metadata=item.metadata)


class CriticalError(SubscriptionEvent):
    """The player died while playing an already handed-off item."""

    request_context: Any = None
    error: PlayerFatalError


class PlayingError(SubscriptionEvent):
    """An item could not be handed to the player and was skipped."""

    request_context: Any = None
    error: HandOffError


class SubscriptionDestroyed(SubscriptionEvent):
    reason: DestroyReason
    cause: str | None = None
