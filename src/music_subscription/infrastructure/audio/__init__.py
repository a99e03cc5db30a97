"""Audio infrastructure - yt-dlp resolver, FFmpeg resources and the discord.py player."""

from music_subscription.infrastructure.audio.discord_player import (
    DiscordAudioPlayer,
    FFmpegResource,
)
from music_subscription.infrastructure.audio.models import (
    ExtractedMedia,
    ExtractOptions,
    StreamFormat,
)
from music_subscription.infrastructure.audio.ytdlp_resolver import YtDlpResolver, is_url

__all__ = [
    "DiscordAudioPlayer",
    "ExtractOptions",
    "ExtractedMedia",
    "FFmpegResource",
    "StreamFormat",
    "YtDlpResolver",
    "is_url",
]
