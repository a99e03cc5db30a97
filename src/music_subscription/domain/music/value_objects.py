"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from music_subscription.domain.shared.messages import ErrorMessages


@dataclass(frozen=True)
class WrappedDuration:
    """A media duration pre-split into the views callers display."""

    decimal_minutes: float
    flat_minutes: int
    seconds: int
    timestamp: str

    def __str__(self) -> str:
        return self.timestamp

    @classmethod
    def from_seconds(cls, total_seconds: int) -> WrappedDuration:
        if total_seconds < 0:
            raise ValueError(ErrorMessages.NEGATIVE_DURATION)

        minutes, seconds = divmod(int(total_seconds), 60)
        return cls(
            decimal_minutes=total_seconds / 60,
            flat_minutes=minutes,
            seconds=seconds,
            timestamp=f"{minutes}:{seconds:02d}",
        )

    @property
    def total_seconds(self) -> int:
        return self.flat_minutes * 60 + self.seconds


class PlayerStatus(Enum):
    """Audio player states reported by the transport.

    Only IDLE accepts a new resource. Every other state means some
    resource is assigned to the player.
    """

    IDLE = "idle"
    BUFFERING = "buffering"
    PLAYING = "playing"
    PAUSED = "paused"
    AUTOPAUSED = "autopaused"

    @property
    def is_idle(self) -> bool:
        return self == PlayerStatus.IDLE

    @property
    def is_active(self) -> bool:
        return self != PlayerStatus.IDLE


class ConnectionStatus(Enum):
    """Voice connection states reported by the transport."""

    SIGNALLING = "signalling"
    CONNECTING = "connecting"
    READY = "ready"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"

    @property
    def is_handshaking(self) -> bool:
        return self in {ConnectionStatus.SIGNALLING, ConnectionStatus.CONNECTING}

    @property
    def is_terminal(self) -> bool:
        return self == ConnectionStatus.DESTROYED


class DisconnectReason(Enum):
    """Why a connection entered DISCONNECTED."""

    WEBSOCKET_CLOSE = "websocket_close"
    ADAPTER_UNAVAILABLE = "adapter_unavailable"
    ENDPOINT_REMOVED = "endpoint_removed"
    MANUAL = "manual"


class DestroyReason(Enum):
    """Reasons a subscription can be torn down."""

    STOPPED = "stopped"
    CONNECTION_DESTROYED = "connection_destroyed"
