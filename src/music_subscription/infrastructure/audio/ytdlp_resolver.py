"""MediaResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from music_subscription.application.interfaces.media_resolver import MediaResolver
from music_subscription.application.interfaces.transport import PlayableResource
from music_subscription.config.settings import AudioSettings
from music_subscription.domain.music.entities import MediaItem, MediaMetadata
from music_subscription.domain.music.value_objects import WrappedDuration
from music_subscription.domain.shared.exceptions import ResolutionError
from music_subscription.domain.shared.messages import ErrorMessages, LogTemplates
from music_subscription.infrastructure.audio.discord_player import FFmpegResource
from music_subscription.infrastructure.audio.models import ExtractedMedia, ExtractOptions

logger = logging.getLogger(__name__)

ResourceFactory = Callable[[str], PlayableResource]

LOG_URL_TRUNCATE: Final[int] = 60
MAX_TITLE_LENGTH: Final[int] = 500

URL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w.?=&%#:+~-]*)/?$", re.IGNORECASE
)


def is_url(text: str) -> bool:
    """Whether *text* looks like a direct locator rather than a search term."""
    return URL_PATTERN.match(text.strip()) is not None


class YtDlpResolver(MediaResolver):
    def __init__(
        self,
        settings: AudioSettings | None = None,
        resource_factory: ResourceFactory | None = None,
    ) -> None:
        self._settings = settings or AudioSettings()
        self._opts = ExtractOptions(format=self._settings.ytdlp_format or "bestaudio/best")
        self._resource_factory = resource_factory or (
            lambda url: FFmpegResource.from_stream_url(url, self._settings)
        )

    def is_url(self, query: str) -> bool:
        return is_url(query)

    def _extract_info_sync(self, query: str) -> ExtractedMedia:
        if self.is_url(query):
            logger.debug(LogTemplates.YTDLP_EXTRACTING, query[:LOG_URL_TRUNCATE])
            target = query
        else:
            logger.debug(LogTemplates.YTDLP_SEARCHING, query)
            target = f"ytsearch1:{query}"

        try:
            with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
                data = ydl.extract_info(target, download=False)
        except Exception as e:
            raise ResolutionError(
                query, ErrorMessages.EXTRACTION_FAILED.format(query=query, error=e)
            ) from e

        if isinstance(data, dict) and "entries" in data:
            entries = [e for e in data.get("entries") or [] if isinstance(e, dict)]
            data = entries[0] if entries else None

        if not isinstance(data, dict):
            raise ResolutionError(query, ErrorMessages.NO_RESULTS.format(query=query))
        return ExtractedMedia.model_validate(dict(data))

    def _info_to_item(self, query: str, info: ExtractedMedia, request_context: Any) -> MediaItem:
        stream_url = info.stream_url
        if not stream_url:
            raise ResolutionError(query, ErrorMessages.NO_STREAM_URL.format(title=info.title))

        metadata = MediaMetadata(
            title=info.title[:MAX_TITLE_LENGTH],
            duration=(
                WrappedDuration.from_seconds(info.duration) if info.duration is not None else None
            ),
            uploader=info.uploaded_by,
            cover_art_url=info.thumbnail,
        )
        try:
            resource = self._resource_factory(stream_url)
        except Exception as e:
            raise ResolutionError(
                query, ErrorMessages.EXTRACTION_FAILED.format(query=query, error=e)
            ) from e

        return MediaItem(
            query=query,
            source_url=info.webpage_url,
            resource=resource,
            metadata=metadata,
            request_context=request_context,
        )

    async def resolve(self, query: str, request_context: Any = None) -> MediaItem:
        try:
            info = await asyncio.to_thread(self._extract_info_sync, query)
            item = self._info_to_item(query, info, request_context)
        except ResolutionError as e:
            logger.warning(LogTemplates.YTDLP_FAILED_RESOLVE, query, e)
            raise

        logger.info(LogTemplates.YTDLP_RESOLVED, query, item.title)
        return item
