"""What the resolver reads from yt-dlp, and what it passes back in.

yt-dlp info dicts are loosely typed: fields go missing, come back empty or
change type between extractors. ``ExtractedMedia`` keeps only the fields a
``MediaItem`` is built from and turns anything unusable into ``None``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from music_subscription.domain.shared.types import HttpUrlStr, NonEmptyStr, NonNegativeInt

UNKNOWN_TITLE = "Unknown Title"


def _text_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


class StreamFormat(BaseModel):
    """One entry of an info dict's ``formats`` list."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None

    @field_validator("url", "acodec", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        return _text_or_none(v)

    @property
    def has_audio(self) -> bool:
        return self.url is not None and self.acodec != "none"


class ExtractedMedia(BaseModel):
    """A single extraction result, reduced to what playback needs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    duration: NonNegativeInt | None = None
    thumbnail: HttpUrlStr | None = None
    uploader: NonEmptyStr | None = None
    uploader_id: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    formats: list[StreamFormat] = Field(default_factory=list)

    @field_validator(
        "webpage_url", "url", "thumbnail", "uploader", "uploader_id", "channel",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        return _text_or_none(v)

    @field_validator("title", mode="before")
    @classmethod
    def _title_or_unknown(cls, v: Any) -> str:
        return _text_or_none(v) or UNKNOWN_TITLE

    @field_validator("duration", mode="before")
    @classmethod
    def _whole_seconds(cls, v: Any) -> int | None:
        # Live streams report None; some extractors send floats or strings.
        try:
            seconds = int(v)
        except (TypeError, ValueError):
            return None
        return seconds if seconds >= 0 else None

    @property
    def stream_url(self) -> str | None:
        """Direct URL if yt-dlp picked one, else the last format with audio."""
        if self.url:
            return self.url
        audio = [f.url for f in self.formats if f.has_audio]
        return audio[-1] if audio else None

    @property
    def uploaded_by(self) -> str | None:
        """Uploader name, with the account handle when yt-dlp provides one."""
        name = self.uploader or self.channel
        if name and self.uploader_id and self.uploader_id != name:
            return f"{name} ({self.uploader_id})"
        return name


class ExtractOptions(BaseModel):
    """``YoutubeDL`` params for metadata-only, single-item extraction."""

    model_config = ConfigDict(frozen=True)

    format: NonEmptyStr = "bestaudio/best"
    noplaylist: bool = True
    quiet: bool = True
    no_warnings: bool = True
    skip_download: bool = True
