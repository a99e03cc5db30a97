"""
discord.py Audio Player

Infrastructure adapter implementing AudioPlayerPort on top of a
discord.py VoiceClient, plus the FFmpeg-backed resource it plays.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import discord

from music_subscription.application.interfaces.transport import (
    AudioPlayerPort,
    PlayableResource,
    PlayerErrorListener,
    PlayerListener,
    PlayerState,
    Unsubscribe,
)
from music_subscription.config.settings import AudioSettings
from music_subscription.domain.music.value_objects import PlayerStatus
from music_subscription.domain.shared.exceptions import HandOffError, PlayerFatalError
from music_subscription.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class FFmpegResource:
    """An FFmpeg PCM stream wrapped in a volume transformer."""

    def __init__(self, source: discord.AudioSource) -> None:
        self.source = source
        self.closed = False

    @classmethod
    def from_stream_url(
        cls, stream_url: str, settings: AudioSettings | None = None
    ) -> FFmpegResource:
        """Spawn FFmpeg for *stream_url* using the configured options."""
        settings = settings or AudioSettings()
        source = discord.FFmpegPCMAudio(
            stream_url,
            before_options=settings.ffmpeg_options.get("before_options", ""),
            options=settings.ffmpeg_options.get("options", ""),
        )
        return cls(discord.PCMVolumeTransformer(source, volume=settings.default_volume))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.source.cleanup()


class DiscordAudioPlayer(AudioPlayerPort):
    """Plays ``FFmpegResource`` objects through a discord.py voice client.

    discord.py reports the end of playback from its audio thread; the
    callback is marshalled back onto the event loop before any listener
    runs.
    """

    def __init__(self, voice_client: discord.VoiceClient | None = None) -> None:
        self._voice_client = voice_client
        self._state = PlayerState(PlayerStatus.IDLE)
        self._state_listeners: list[PlayerListener] = []
        self._error_listeners: list[PlayerErrorListener] = []

    @property
    def state(self) -> PlayerState:
        return self._state

    def attach(self, voice_client: discord.VoiceClient) -> None:
        """Route output through *voice_client* from the next ``play()`` on."""
        self._voice_client = voice_client

    def play(self, resource: PlayableResource) -> None:
        if not isinstance(resource, FFmpegResource):
            raise HandOffError(
                ErrorMessages.UNSUPPORTED_RESOURCE.format(type_name=type(resource).__name__),
                resource=resource,
            )
        if resource.closed:
            raise HandOffError(ErrorMessages.RESOURCE_CLOSED, resource=resource)

        vc = self._voice_client
        if vc is None or not vc.is_connected():
            raise HandOffError(ErrorMessages.PLAYER_NOT_ATTACHED, resource=resource)

        loop = asyncio.get_running_loop()

        def after_callback(error: Exception | None = None) -> None:
            loop.call_soon_threadsafe(self._on_finished, resource, error)

        try:
            vc.play(resource.source, after=after_callback)
        except (discord.ClientException, TypeError) as e:
            raise HandOffError(str(e), resource=resource) from e

        self._set_state(PlayerState(PlayerStatus.PLAYING, resource))

    def stop(self, force: bool = False) -> bool:
        if self._state.status.is_idle:
            return False

        vc = self._voice_client
        if vc is not None and (vc.is_playing() or vc.is_paused()):
            vc.stop()

        if force:
            # The late after-callback for this resource is recognised as stale.
            resource = self._state.resource
            self._set_state(PlayerState(PlayerStatus.IDLE))
            if resource is not None:
                resource.close()
            logger.debug(LogTemplates.PLAYBACK_FORCED_STOP)
        return True

    def on_state_change(self, listener: PlayerListener) -> Unsubscribe:
        return _register(self._state_listeners, listener)

    def on_error(self, listener: PlayerErrorListener) -> Unsubscribe:
        return _register(self._error_listeners, listener)

    def _on_finished(self, resource: FFmpegResource, error: Exception | None) -> None:
        if self._state.resource is not resource:
            logger.debug(LogTemplates.PLAYBACK_STALE_CALLBACK)
            return

        if error is not None:
            fatal = PlayerFatalError(resource, cause=error)
            for listener in list(self._error_listeners):
                listener(fatal)

        resource.close()
        self._set_state(PlayerState(PlayerStatus.IDLE))

    def _set_state(self, new: PlayerState) -> None:
        old, self._state = self._state, new
        for listener in list(self._state_listeners):
            listener(old, new)


def _register(listeners: list[Any], listener: Any) -> Unsubscribe:
    listeners.append(listener)

    def unsubscribe() -> None:
        if listener in listeners:
            listeners.remove(listener)

    return unsubscribe
