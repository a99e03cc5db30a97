"""Port interfaces for the voice transport: connection and audio player.

Both handles publish state changes to synchronous listeners. A listener is
called with ``(old_state, new_state)`` on the event loop thread, and may
subscribe or unsubscribe listeners (including itself) while being called.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from music_subscription.domain.music.value_objects import (
    ConnectionStatus,
    DisconnectReason,
    PlayerStatus,
)
from music_subscription.domain.shared.exceptions import PlayerFatalError


class PlayableResource(Protocol):
    """Opaque handle the player knows how to play."""

    def close(self) -> None: ...


@dataclass(frozen=True)
class ConnectionState:
    status: ConnectionStatus
    reason: DisconnectReason | None = None
    close_code: int | None = None


@dataclass(frozen=True)
class PlayerState:
    status: PlayerStatus
    resource: PlayableResource | None = None


ConnectionListener = Callable[[ConnectionState, ConnectionState], None]
PlayerListener = Callable[[PlayerState, PlayerState], None]
PlayerErrorListener = Callable[[PlayerFatalError], None]
Unsubscribe = Callable[[], None]


class AudioPlayerPort(ABC):
    """Interface for the audio player that consumes playable resources.

    When the player reports a ``PlayerFatalError`` it must afterwards
    transition to IDLE, like any other end of playback.
    """

    @property
    @abstractmethod
    def state(self) -> PlayerState:
        ...

    @abstractmethod
    def play(self, resource: PlayableResource) -> None:
        """Start playing *resource*.

        Raises when the resource is invalid or unsupported. On success the
        player has left IDLE by the time this returns.
        """
        ...

    @abstractmethod
    def stop(self, force: bool = False) -> bool:
        """Stop the current resource; *force* skips any graceful wind-down."""
        ...

    @abstractmethod
    def on_state_change(self, listener: PlayerListener) -> Unsubscribe:
        ...

    @abstractmethod
    def on_error(self, listener: PlayerErrorListener) -> Unsubscribe:
        ...


class VoiceConnectionPort(ABC):
    """Interface for one voice connection and its signalling lifecycle."""

    @property
    @abstractmethod
    def state(self) -> ConnectionState:
        ...

    @property
    @abstractmethod
    def rejoin_attempts(self) -> int:
        """Consecutive rejoins issued since the connection was last ready."""
        ...

    @abstractmethod
    def rejoin(self) -> bool:
        """Re-establish a dropped connection keeping the same identity."""
        ...

    @abstractmethod
    def destroy(self) -> None:
        """Tear the connection down for good; moves it to DESTROYED."""
        ...

    @abstractmethod
    def subscribe(self, player: AudioPlayerPort) -> None:
        """Route *player*'s audio out through this connection."""
        ...

    @abstractmethod
    def on_state_change(self, listener: ConnectionListener) -> Unsubscribe:
        ...
