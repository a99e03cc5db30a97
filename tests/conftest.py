import asyncio

import pytest

from music_subscription.application.interfaces.transport import (
    AudioPlayerPort,
    ConnectionState,
    PlayerState,
    VoiceConnectionPort,
)
from music_subscription.config.settings import SupervisorSettings
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
    PlayerStatus,
    WrappedDuration,
)
from music_subscription.domain.shared.exceptions import HandOffError, PlayerFatalError

# ============================================================================
# Transport Doubles
# ============================================================================


def _register(listeners, listener):
    listeners.append(listener)

    def unsubscribe():
        if listener in listeners:
            listeners.remove(listener)

    return unsubscribe


class FakeResource:
    """Playable resource double; ``broken`` ones are refused by FakePlayer."""

    def __init__(self, name: str, broken: bool = False) -> None:
        self.name = name
        self.broken = broken
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1

    def __repr__(self) -> str:
        return f"FakeResource({self.name!r})"


class FakePlayer(AudioPlayerPort):
    """Synchronous audio player double.

    ``play()`` goes BUFFERING then PLAYING immediately; tests drive the end
    of playback with ``finish()`` or ``fail()``.
    """

    def __init__(self) -> None:
        self._state = PlayerState(PlayerStatus.IDLE)
        self._state_listeners = []
        self._error_listeners = []
        self.played = []
        self.stop_calls = []

    @property
    def state(self) -> PlayerState:
        return self._state

    def play(self, resource) -> None:
        if not self._state.status.is_idle:
            raise AssertionError("play() called while the player is busy")
        if getattr(resource, "broken", False):
            raise HandOffError("unsupported resource", resource=resource)
        self.played.append(resource)
        self._set(PlayerState(PlayerStatus.BUFFERING, resource))
        self._set(PlayerState(PlayerStatus.PLAYING, resource))

    def stop(self, force: bool = False) -> bool:
        self.stop_calls.append(force)
        if self._state.status.is_idle:
            return False
        self._set(PlayerState(PlayerStatus.IDLE))
        return True

    def on_state_change(self, listener):
        return _register(self._state_listeners, listener)

    def on_error(self, listener):
        return _register(self._error_listeners, listener)

    # -- test controls ------------------------------------------------------

    def finish(self) -> None:
        self._set(PlayerState(PlayerStatus.IDLE))

    def pause(self) -> None:
        self._set(PlayerState(PlayerStatus.PAUSED, self._state.resource))

    def resume(self) -> None:
        self._set(PlayerState(PlayerStatus.PLAYING, self._state.resource))

    def fail(self, cause: Exception) -> PlayerFatalError:
        return self.report(PlayerFatalError(self._state.resource, cause=cause))

    def report(self, error: PlayerFatalError) -> PlayerFatalError:
        """Deliver *error* as it is, then go idle like a dying player does."""
        for listener in list(self._error_listeners):
            listener(error)
        self._set(PlayerState(PlayerStatus.IDLE))
        return error

    @property
    def listener_count(self) -> int:
        return len(self._state_listeners) + len(self._error_listeners)

    def _set(self, new: PlayerState) -> None:
        old, self._state = self._state, new
        for listener in list(self._state_listeners):
            listener(old, new)


class FakeConnection(VoiceConnectionPort):
    """Voice connection double mirroring the transport's rejoin bookkeeping."""

    def __init__(self, status: ConnectionStatus = ConnectionStatus.READY) -> None:
        self._state = ConnectionState(status)
        self._listeners = []
        self._rejoin_attempts = 0
        self.rejoin_calls = 0
        self.destroy_calls = 0
        self.subscribed_player = None
        self.destroy_times = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def rejoin_attempts(self) -> int:
        return self._rejoin_attempts

    @rejoin_attempts.setter
    def rejoin_attempts(self, value: int) -> None:
        self._rejoin_attempts = value

    def rejoin(self) -> bool:
        self.rejoin_calls += 1
        self._rejoin_attempts += 1
        self.transition(ConnectionStatus.SIGNALLING)
        return True

    def destroy(self) -> None:
        self.destroy_calls += 1
        self.destroy_times.append(asyncio.get_running_loop().time())
        if self._state.status != ConnectionStatus.DESTROYED:
            self.transition(ConnectionStatus.DESTROYED)

    def subscribe(self, player) -> None:
        self.subscribed_player = player

    def on_state_change(self, listener):
        return _register(self._listeners, listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def transition(self, status: ConnectionStatus, reason=None, close_code=None) -> None:
        old, self._state = self._state, ConnectionState(status, reason, close_code)
        if status == ConnectionStatus.READY:
            self._rejoin_attempts = 0
        for listener in list(self._listeners):
            listener(old, self._state)


# ============================================================================
# Helpers
# ============================================================================


async def settle(rounds: int = 10) -> None:
    """Let scheduled callbacks and notification tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def make_item(title: str, context=None, *, broken: bool = False, seconds: int = 180) -> MediaItem:
    return MediaItem(
        query=title,
        source_url=f"https://example.com/{title.lower().replace(' ', '-')}",
        resource=FakeResource(title, broken=broken),
        metadata=MediaMetadata(
            title=title,
            duration=WrappedDuration.from_seconds(seconds),
            uploader="Test Uploader",
            cover_art_url="https://example.com/cover.jpg",
        ),
        request_context=context if context is not None else {"requested": title},
    )


class EventRecorder:
    """Collects every notification a subscription publishes, in order."""

    EVENT_TYPES = (SongStarted, SongEnded, CriticalError, PlayingError, SubscriptionDestroyed)

    def __init__(self, bus) -> None:
        self.events = []
        for event_type in self.EVENT_TYPES:
            bus.subscribe(event_type, self._record)

    async def _record(self, event) -> None:
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    @property
    def names(self):
        return [type(e).__name__ for e in self.events]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def fast_settings():
    """Supervisor policy scaled down so timing tests finish in milliseconds."""
    return SupervisorSettings(
        moved_channel_grace_s=0.05,
        reconnect_backoff_unit_s=0.01,
        max_rejoin_attempts=5,
        ready_timeout_s=0.1,
    )


@pytest.fixture
def sample_item():
    return make_item("Test Song", context={"channel": 42, "user": "alice"})
