"""Reconnect and teardown policy for a voice connection.

The transport reports raw state changes only. This module decides what a
disconnect means and what to do about it:

- DISCONNECTED with the "moved channel" close code (4014 by default) is
  ambiguous between a channel move, which heals itself, and being removed
  from the channel. The connection gets a short grace window to start
  CONNECTING again before it is destroyed.
- Any other DISCONNECTED is retried with a linear backoff until the
  transport's rejoin counter reaches the cap, then destroyed.
- SIGNALLING/CONNECTING must reach READY within a bound, otherwise the
  connection is destroyed instead of hanging in the handshake forever.
- DESTROYED is terminal: pending waits are cancelled and the owner is told.

Waits are armed inside the state-change callback that starts them, so a
transport that reports several transitions back to back cannot slip past
a wait that has not been scheduled yet. A wait that expires never destroys
a connection that is READY or already DESTROYED.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from ...config.settings import SupervisorSettings
from ...domain.music.value_objects import ConnectionStatus, DisconnectReason
from ...domain.shared.exceptions import ConnectionLostError
from ...domain.shared.messages import LogTemplates
from ..interfaces.transport import ConnectionState, VoiceConnectionPort

logger = logging.getLogger(__name__)


class StatusWaiter:
    """Future for a connection reaching one of *statuses*.

    The listener is registered when the waiter is constructed, not when
    ``wait()`` first runs, so transitions reported in between are not missed.
    """

    def __init__(self, connection: VoiceConnectionPort, *statuses: ConnectionStatus) -> None:
        self.statuses = frozenset(statuses)
        self._reached: asyncio.Future[ConnectionState] = (
            asyncio.get_running_loop().create_future()
        )
        self._unsubscribe: Callable[[], None] | None = None

        if connection.state.status in self.statuses:
            self._reached.set_result(connection.state)
        else:
            self._unsubscribe = connection.on_state_change(self._listener)

    def _listener(self, old: ConnectionState, new: ConnectionState) -> None:
        if new.status in self.statuses and not self._reached.done():
            self._reached.set_result(new)

    def disarm(self) -> None:
        """Stop listening. Safe to call more than once."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait(self, timeout: float) -> ConnectionState:
        """Return the matching state, or raise ``TimeoutError`` after *timeout*."""
        try:
            async with asyncio.timeout(timeout):
                return await self._reached
        finally:
            self.disarm()


async def wait_for_status(
    connection: VoiceConnectionPort, status: ConnectionStatus, timeout: float
) -> ConnectionState:
    """Wait until *connection* reports *status*.

    Returns immediately if it already does. Raises ``TimeoutError`` after
    *timeout* seconds otherwise.
    """
    return await StatusWaiter(connection, status).wait(timeout)


class ConnectionSupervisor:
    """Applies the reconnect policy to one connection's state changes."""

    def __init__(
        self,
        connection: VoiceConnectionPort,
        on_destroyed: Callable[[], None],
        settings: SupervisorSettings | None = None,
    ) -> None:
        self._connection = connection
        self._on_destroyed = on_destroyed
        self._settings = settings or SupervisorSettings()

        self._ready_guard_active = False
        self._closed = False
        self._tasks: set[asyncio.Task[None]] = set()
        self._waiters: set[StatusWaiter] = set()
        self.last_failure: ConnectionLostError | None = None

        self._unsubscribe = connection.on_state_change(self._on_state_change)

    @property
    def settings(self) -> SupervisorSettings:
        return self._settings

    @property
    def ready_guard_active(self) -> bool:
        return self._ready_guard_active

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def backoff_delay(self, attempts: int) -> float:
        """Seconds to wait before the rejoin following *attempts* earlier ones."""
        return (attempts + 1) * self._settings.reconnect_backoff_unit_s

    def close(self) -> None:
        """Stop reacting to the connection and cancel every pending wait."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()

        for waiter in list(self._waiters):
            waiter.disarm()
        self._waiters.clear()

        current = asyncio.current_task() if self._tasks else None
        for task in list(self._tasks):
            if task is not current:
                task.cancel()

    def _on_state_change(self, old: ConnectionState, new: ConnectionState) -> None:
        if self._closed:
            return

        logger.debug(LogTemplates.CONNECTION_STATE_CHANGED, old.status.value, new.status.value)
        status = new.status

        if status == ConnectionStatus.DISCONNECTED:
            self._on_disconnected(new)
        elif status == ConnectionStatus.DESTROYED:
            logger.info(LogTemplates.CONNECTION_DESTROYED)
            self.close()
            self._on_destroyed()
        elif status.is_handshaking and not self._ready_guard_active:
            # Claimed synchronously so rapid re-entries cannot stack bounds.
            self._ready_guard_active = True
            waiter = StatusWaiter(self._connection, ConnectionStatus.READY)
            self._spawn(self._bound_ready(waiter), waiter)

    def _on_disconnected(self, state: ConnectionState) -> None:
        if (
            state.reason == DisconnectReason.WEBSOCKET_CLOSE
            and state.close_code == self._settings.moved_channel_close_code
        ):
            waiter = StatusWaiter(self._connection, ConnectionStatus.CONNECTING)
            self._spawn(self._await_channel_move(waiter, state.close_code), waiter)
            return

        attempts = self._connection.rejoin_attempts
        if attempts < self._settings.max_rejoin_attempts:
            self._spawn(self._rejoin_after_backoff(attempts))
        else:
            logger.warning(LogTemplates.CONNECTION_GIVING_UP, attempts)
            self._destroy(f"gave up after {attempts} rejoin attempts", trigger="rejoin cap")

    async def _await_channel_move(self, waiter: StatusWaiter, close_code: int) -> None:
        grace = self._settings.moved_channel_grace_s
        logger.info(LogTemplates.CONNECTION_MOVE_GRACE, close_code, grace)
        try:
            await waiter.wait(grace)
        except TimeoutError:
            logger.warning(LogTemplates.CONNECTION_REMOVED, close_code)
            self._destroy(
                f"removed from channel (close code {close_code})", trigger="channel move grace"
            )
        else:
            logger.info(LogTemplates.CONNECTION_MOVED, close_code)

    async def _rejoin_after_backoff(self, attempts: int) -> None:
        delay = self.backoff_delay(attempts)
        logger.info(LogTemplates.CONNECTION_REJOIN_SCHEDULED, attempts + 1, delay)
        await asyncio.sleep(delay)

        if self._connection.state.status.is_terminal:
            logger.debug(LogTemplates.CONNECTION_REJOIN_ABANDONED)
            return

        logger.info(LogTemplates.CONNECTION_REJOINING, attempts + 1)
        self._connection.rejoin()

    async def _bound_ready(self, waiter: StatusWaiter) -> None:
        timeout = self._settings.ready_timeout_s
        logger.debug(LogTemplates.CONNECTION_READY_BOUND, timeout)
        try:
            await waiter.wait(timeout)
            logger.info(LogTemplates.CONNECTION_READY)
        except TimeoutError:
            logger.warning(LogTemplates.CONNECTION_READY_TIMEOUT, timeout)
            self._destroy(f"not ready after {timeout:.1f}s", trigger="ready bound")
        finally:
            self._ready_guard_active = False

    def _destroy(self, reason: str, trigger: str) -> None:
        status = self._connection.state.status
        if status.is_terminal or status == ConnectionStatus.READY:
            logger.info(LogTemplates.CONNECTION_DESTROY_SKIPPED, trigger, status.value)
            return
        self.last_failure = ConnectionLostError(reason)
        logger.info(LogTemplates.CONNECTION_DESTROYING, trigger, reason)
        self._connection.destroy()

    def _spawn(
        self, coro: Coroutine[Any, Any, None], waiter: StatusWaiter | None = None
    ) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        if waiter is not None:
            # A task cancelled before it starts never reaches wait()'s cleanup.
            self._waiters.add(waiter)
            task.add_done_callback(lambda _: self._release_waiter(waiter))
        task.add_done_callback(self._on_task_done)

    def _release_waiter(self, waiter: StatusWaiter) -> None:
        waiter.disarm()
        self._waiters.discard(waiter)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(LogTemplates.SUPERVISOR_TASK_FAILED, exc, exc_info=exc)
