"""FIFO playback queue with single-flight hand-off to the audio player."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from ...domain.music.entities import MediaItem
from ...domain.shared.exceptions import HandOffError
from ...domain.shared.messages import LogTemplates
from ..interfaces.transport import AudioPlayerPort

logger = logging.getLogger(__name__)

HandOffErrorCallback = Callable[[MediaItem, HandOffError], None]


class PlaybackQueue:
    """Ordered media items feeding one audio player.

    At most one drain attempt gets past the queue lock at a time, and a new
    item is only handed off while the player is idle, so the player never
    holds more than one item. The player's own state changes, not the
    queue, decide when the next item is due; the owner calls ``drain()``
    when the player goes idle.
    """

    def __init__(
        self,
        player: AudioPlayerPort,
        on_hand_off_error: HandOffErrorCallback | None = None,
    ) -> None:
        self._player = player
        self._on_hand_off_error = on_hand_off_error
        self._items: deque[MediaItem] = deque()
        self._draining = False
        self._stopped = False
        self._current: MediaItem | None = None

    def __len__(self) -> int:
        return len(self._items)

    @property
    def current(self) -> MediaItem | None:
        """The item last handed to the player and not yet finished."""
        return self._current

    @property
    def pending(self) -> tuple[MediaItem, ...]:
        return tuple(self._items)

    @property
    def is_draining(self) -> bool:
        return self._draining

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def enqueue(self, item: MediaItem) -> None:
        """Append *item* and try to start playback straight away."""
        if self._stopped:
            self._stopped = False
            logger.debug(LogTemplates.QUEUE_REARMED)

        self._items.append(item)
        logger.debug(LogTemplates.QUEUE_ENQUEUED, item.title, len(self._items))
        self.drain()

    def stop(self) -> int:
        """Drop every pending item and halt the player immediately.

        Returns the number of pending items released.
        """
        self._stopped = True
        released = len(self._items)
        while self._items:
            self._items.popleft().release()

        # Cleared before the player halts so its idle transition is not
        # mistaken for a natural end of the current item.
        self._current = None
        self._player.stop(force=True)

        logger.info(LogTemplates.QUEUE_STOPPED, released)
        return released

    def finish_current(self) -> MediaItem | None:
        """Detach and return the current item once the player has let go of it."""
        item, self._current = self._current, None
        return item

    def drain(self) -> None:
        """Hand the head item to the player if nothing else is in flight.

        Items the player refuses are reported through ``on_hand_off_error``
        and skipped; the next item is tried immediately.
        """
        while True:
            if self._draining:
                logger.debug(LogTemplates.QUEUE_DRAIN_LOCKED)
                return
            if self._stopped or not self._items or not self._player.state.status.is_idle:
                return

            self._draining = True
            item = self._items.popleft()
            try:
                self._current = item
                with item.hand_off() as resource:
                    self._player.play(resource)
            except Exception as e:
                self._current = None
                self._draining = False
                self._report_hand_off_error(item, e)
                continue

            self._draining = False
            logger.info(LogTemplates.QUEUE_HANDED_OFF, item.title, len(self._items))
            return

    def _report_hand_off_error(self, item: MediaItem, exc: Exception) -> None:
        if isinstance(exc, HandOffError):
            error = exc
        else:
            error = HandOffError(str(exc) or type(exc).__name__, resource=item.resource)
            error.__cause__ = exc

        logger.warning(LogTemplates.QUEUE_HAND_OFF_FAILED, item.title, error)
        if self._on_hand_off_error is not None:
            self._on_hand_off_error(item, error)
