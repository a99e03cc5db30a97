"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from music_subscription.application.interfaces.media_resolver import MediaResolver
from music_subscription.application.interfaces.transport import (
    AudioPlayerPort,
    ConnectionState,
    PlayableResource,
    PlayerState,
    VoiceConnectionPort,
)

__all__ = [
    "MediaResolver",
    "AudioPlayerPort",
    "VoiceConnectionPort",
    "PlayableResource",
    "ConnectionState",
    "PlayerState",
]
