"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the package is defined here once,
so models can simply annotate their fields::

    from music_subscription.domain.shared.types import NonEmptyStr

    class MyModel(BaseModel):
        title: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

PositiveFloat = Annotated[float, Field(gt=0.0)]
"""Float > 0.0, used for wait bounds."""

VolumeFloat = Annotated[float, Field(ge=0.0, le=2.0)]
"""Audio volume multiplier in [0.0, 2.0]."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

MediaTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Media title: 1-500 characters."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""


# ── Domain-specific numeric constraints ─────────────────────────────

WebSocketCloseCode = Annotated[int, Field(ge=1000, le=4999)]
"""WebSocket close code range."""

RejoinAttempts = Annotated[int, Field(ge=0, le=100)]
"""Maximum rejoin attempts before the connection is destroyed."""
