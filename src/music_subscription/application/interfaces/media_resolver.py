"""Port interface for resolving queries into queueable media items."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from music_subscription.domain.music.entities import MediaItem


class MediaResolver(ABC):
    """Interface for turning a URL or search query into a playable item."""

    @abstractmethod
    async def resolve(self, query: str, request_context: Any = None) -> MediaItem:
        """Resolve *query*, raising ``ResolutionError`` when nothing playable is found.

        The returned item owns a freshly created resource and carries
        *request_context* untouched.
        """
        ...

    @abstractmethod
    def is_url(self, query: str) -> bool:
        ...
