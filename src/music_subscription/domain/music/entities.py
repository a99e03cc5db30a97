"""Core domain entities for the music bounded context."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from music_subscription.domain.music.value_objects import WrappedDuration
from music_subscription.domain.shared.exceptions import InvalidOperationError
from music_subscription.domain.shared.messages import ErrorMessages, LogTemplates
from music_subscription.domain.shared.types import HttpUrlStr, MediaTitleStr, NonEmptyStr

logger = logging.getLogger(__name__)


class MediaMetadata(BaseModel):
    """Descriptive metadata shown to listeners."""

    model_config = ConfigDict(frozen=True)

    title: MediaTitleStr
    duration: WrappedDuration | None = None
    uploader: NonEmptyStr | None = None
    cover_art_url: HttpUrlStr | None = None

    @property
    def display_title(self) -> str:
        """Get display title with duration if available."""
        if self.duration is not None:
            return f"{self.title} [{self.duration.timestamp}]"
        return self.title


class MediaItem(BaseModel):
    """A resolved, queueable piece of media.

    Fields never change after construction. The item owns ``resource``
    until it is handed to the player; from then on the player manages the
    resource's lifetime. ``request_context`` is carried through to every
    notification about this item without being inspected.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    query: NonEmptyStr
    source_url: HttpUrlStr | None = None
    resource: Any = Field(repr=False)
    metadata: MediaMetadata
    request_context: Any = Field(default=None, repr=False)

    _handed_off: bool = PrivateAttr(default=False)
    _released: bool = PrivateAttr(default=False)

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def owns_resource(self) -> bool:
        return not (self._handed_off or self._released)

    @contextmanager
    def hand_off(self) -> Iterator[Any]:
        """Lend the resource to the player, transferring ownership on success.

        If the block raises, ownership is not transferred: the resource is
        released and the exception propagates.
        """
        if self._handed_off:
            raise InvalidOperationError(
                operation="hand_off",
                current_state="handed_off",
                message=ErrorMessages.RESOURCE_ALREADY_HANDED_OFF.format(title=self.title),
            )
        if self._released:
            raise InvalidOperationError(
                operation="hand_off",
                current_state="released",
                message=ErrorMessages.RESOURCE_ALREADY_RELEASED.format(title=self.title),
            )

        try:
            yield self.resource
        except BaseException:
            self.release()
            raise
        self._handed_off = True

    def release(self) -> None:
        """Close the resource if this item still owns it."""
        if not self.owns_resource:
            return
        self._released = True

        close = getattr(self.resource, "close", None)
        if close is None:
            return
        try:
            close()
            logger.debug(LogTemplates.RESOURCE_RELEASED, self.title)
        except Exception as e:
            logger.debug(LogTemplates.RESOURCE_CLOSE_ERROR, self.title, e)
