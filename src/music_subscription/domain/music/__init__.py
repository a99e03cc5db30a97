"""
Music Bounded Context

Domain logic for media items, transport states and subscription notifications.
"""

from music_subscription.domain.music.entities import MediaItem, MediaMetadata
from music_subscription.domain.music.events import (
    CriticalError,
    PlayingError,
    SongEnded,
    SongStarted,
    SubscriptionDestroyed,
)
from music_subscription.domain.music.value_objects import (
    ConnectionStatus,
    DestroyReason,
    DisconnectReason,
    PlayerStatus,
    WrappedDuration,
)

__all__ = [
    # Entities
    "MediaItem",
    "MediaMetadata",
    # Value Objects
    "WrappedDuration",
    "PlayerStatus",
    "ConnectionStatus",
    "DisconnectReason",
    "DestroyReason",
    # Events
    "SongStarted",
    "SongEnded",
    "CriticalError",
    "PlayingError",
    "SubscriptionDestroyed",
]
