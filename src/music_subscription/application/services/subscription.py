"""Music subscription: one voice connection, one player, one queue."""

from __future__ import annotations

import asyncio
import logging

from ...config.settings import SupervisorSettings
from ...domain.music.entities import MediaItem
from ...domain.music.events import (
    CriticalError,
    PlayingError,
    SongEnded,
    SongStarted,
    SubscriptionDestroyed,
    SubscriptionEvent,
)
from ...domain.music.value_objects import DestroyReason, PlayerStatus
from ...domain.shared.events import EventBus
from ...domain.shared.exceptions import HandOffError, InvalidOperationError, PlayerFatalError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ..interfaces.transport import AudioPlayerPort, PlayerState, VoiceConnectionPort
from .connection_supervisor import ConnectionSupervisor
from .playback_queue import PlaybackQueue

logger = logging.getLogger(__name__)


class MusicSubscription:
    """Streams queued media over one voice connection.

    Listens to the player to announce songs and chain the queue, and hands
    the connection to a ``ConnectionSupervisor``. Notifications are
    published on ``events``:

    - ``SongStarted`` when the player starts playing an item
    - ``SongEnded`` when an item plays through and the player goes idle
    - ``CriticalError`` when the player dies mid-item; the item is dropped
    - ``PlayingError`` when an item cannot be handed to the player
    - ``SubscriptionDestroyed`` once, when the subscription is torn down

    The subscription is torn down exactly once, by ``stop()`` or by the
    connection reaching DESTROYED; later ``stop()`` calls do nothing.
    """

    def __init__(
        self,
        connection: VoiceConnectionPort,
        player: AudioPlayerPort,
        *,
        settings: SupervisorSettings | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.connection = connection
        self.player = player
        self.events = event_bus or EventBus()
        self.queue = PlaybackQueue(player, on_hand_off_error=self._on_hand_off_error)

        self._destroyed = False
        self._announced: MediaItem | None = None
        self._abandoned: MediaItem | None = None
        self._notifications: set[asyncio.Task[None]] = set()

        self._player_unsubscribers = [
            player.on_state_change(self._on_player_state_change),
            player.on_error(self._on_player_error),
        ]
        self.supervisor = ConnectionSupervisor(
            connection, on_destroyed=self._on_connection_destroyed, settings=settings
        )
        connection.subscribe(player)
        logger.debug(LogTemplates.SUBSCRIPTION_CREATED)

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def current(self) -> MediaItem | None:
        return self.queue.current

    def enqueue(self, item: MediaItem) -> None:
        """Queue *item*; playback starts at once if the player is idle."""
        if self._destroyed:
            logger.warning(LogTemplates.SUBSCRIPTION_REJECTED_ENQUEUE, item.title)
            item.release()
            raise InvalidOperationError(
                operation="enqueue",
                current_state="destroyed",
                message=ErrorMessages.SUBSCRIPTION_DESTROYED,
            )
        self.queue.enqueue(item)

    def stop(self) -> None:
        """Empty the queue, halt the player and destroy the connection."""
        if self._destroyed:
            logger.debug(LogTemplates.SUBSCRIPTION_ALREADY_STOPPED)
            return
        self._teardown(DestroyReason.STOPPED)

    def _on_connection_destroyed(self) -> None:
        if not self._destroyed:
            self._teardown(DestroyReason.CONNECTION_DESTROYED)

    def _teardown(self, reason: DestroyReason) -> None:
        logger.info(LogTemplates.SUBSCRIPTION_STOPPING, reason.value)
        self._destroyed = True
        self.supervisor.close()

        for unsubscribe in self._player_unsubscribers:
            unsubscribe()
        self._player_unsubscribers.clear()

        self.queue.stop()
        self._announced = None
        self._abandoned = None

        if not self.connection.state.status.is_terminal:
            self.connection.destroy()

        failure = self.supervisor.last_failure
        self._emit(
            SubscriptionDestroyed(reason=reason, cause=failure.message if failure else None)
        )

    def _on_player_state_change(self, old: PlayerState, new: PlayerState) -> None:
        if new.status.is_idle and not old.status.is_idle:
            item = self.queue.finish_current()
            self._announced = None
            if item is not None:
                if item is self._abandoned:
                    self._abandoned = None
                    logger.info(LogTemplates.PLAYBACK_ABANDONED, item.title)
                else:
                    logger.info(LogTemplates.PLAYBACK_ENDED, item.title)
                    self._emit(SongEnded.from_item(item))
            self.queue.drain()
        elif new.status == PlayerStatus.PLAYING:
            item = self.queue.current
            # Resuming from a pause is not a new song.
            if item is not None and item is not self._announced:
                self._announced = item
                logger.info(LogTemplates.PLAYBACK_STARTED, item.title)
                self._emit(SongStarted.from_item(item))

    def _on_player_error(self, error: PlayerFatalError) -> None:
        item = self.queue.current
        if item is None or not self._is_playing(item, error):
            logger.warning(LogTemplates.PLAYBACK_UNATTRIBUTED_ERROR, error)
            return

        logger.error(LogTemplates.PLAYBACK_FATAL_ERROR, item.title, error)
        self._abandoned = item
        self._emit(CriticalError(request_context=item.request_context, error=error))

    def _is_playing(self, item: MediaItem, error: PlayerFatalError) -> bool:
        """Whether *error* belongs to *item*, judged by the error or the player."""
        return (
            error.resource is None
            or error.resource is item.resource
            or self.player.state.resource is item.resource
        )

    def _on_hand_off_error(self, item: MediaItem, error: HandOffError) -> None:
        self._emit(PlayingError(request_context=item.request_context, error=error))

    def _emit(self, event: SubscriptionEvent) -> None:
        # Tasks start in creation order, so handlers see events in emit order.
        task = asyncio.create_task(self.events.publish(event))
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)
