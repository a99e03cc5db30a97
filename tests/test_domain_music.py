"""
Unit Tests for Domain Music Layer

Tests for:
- Value Objects: WrappedDuration, PlayerStatus, ConnectionStatus
- Entities: MediaMetadata, MediaItem (resource ownership)
- Exceptions: DomainError hierarchy
"""

import pytest
from pydantic import ValidationError

from conftest import FakeResource, make_item
from music_subscription.domain.music.entities import MediaItem, MediaMetadata
from music_subscription.domain.music.value_objects import (
    ConnectionStatus,
    PlayerStatus,
    WrappedDuration,
)
from music_subscription.domain.shared.exceptions import (
    ConnectionLostError,
    DomainError,
    HandOffError,
    InvalidOperationError,
    PlayerFatalError,
    ResolutionError,
)

# =============================================================================
# WrappedDuration Value Object Tests
# =============================================================================


class TestWrappedDuration:
    """Unit tests for WrappedDuration value object."""

    def test_from_seconds_splits_minutes_and_seconds(self):
        """Should split total seconds into the displayed views."""
        duration = WrappedDuration.from_seconds(215)

        assert duration.flat_minutes == 3
        assert duration.seconds == 35
        assert duration.decimal_minutes == pytest.approx(215 / 60)
        assert duration.timestamp == "3:35"

    def test_timestamp_pads_seconds(self):
        """Should zero-pad single-digit seconds."""
        assert WrappedDuration.from_seconds(65).timestamp == "1:05"

    def test_zero_duration(self):
        """Should handle a zero-length item."""
        duration = WrappedDuration.from_seconds(0)

        assert duration.timestamp == "0:00"
        assert duration.decimal_minutes == 0

    def test_long_duration_stays_in_minutes(self):
        """Should keep counting minutes past the hour."""
        duration = WrappedDuration.from_seconds(3725)

        assert duration.flat_minutes == 62
        assert duration.seconds == 5
        assert str(duration) == "62:05"

    def test_total_seconds_round_trips(self):
        """Should reconstruct total seconds from the split view."""
        assert WrappedDuration.from_seconds(4321).total_seconds == 4321

    def test_negative_raises_error(self):
        """Should reject negative durations."""
        with pytest.raises(ValueError, match="cannot be negative"):
            WrappedDuration.from_seconds(-1)

    def test_immutable(self):
        """Should be frozen."""
        duration = WrappedDuration.from_seconds(10)
        with pytest.raises(AttributeError):
            duration.seconds = 20  # type: ignore[misc]


# =============================================================================
# Status Enum Tests
# =============================================================================


class TestPlayerStatus:
    """Unit tests for PlayerStatus."""

    def test_only_idle_is_idle(self):
        """Should treat every non-idle state as holding a resource."""
        assert PlayerStatus.IDLE.is_idle
        for status in PlayerStatus:
            if status is not PlayerStatus.IDLE:
                assert status.is_active
                assert not status.is_idle


class TestConnectionStatus:
    """Unit tests for ConnectionStatus."""

    @pytest.mark.parametrize(
        "status,handshaking",
        [
            (ConnectionStatus.SIGNALLING, True),
            (ConnectionStatus.CONNECTING, True),
            (ConnectionStatus.READY, False),
            (ConnectionStatus.DISCONNECTED, False),
            (ConnectionStatus.DESTROYED, False),
        ],
    )
    def test_is_handshaking(self, status, handshaking):
        """Should flag only SIGNALLING and CONNECTING as handshake states."""
        assert status.is_handshaking is handshaking

    def test_only_destroyed_is_terminal(self):
        """Should treat DESTROYED as the only terminal state."""
        assert [s for s in ConnectionStatus if s.is_terminal] == [ConnectionStatus.DESTROYED]


# =============================================================================
# MediaMetadata Tests
# =============================================================================


class TestMediaMetadata:
    """Unit tests for MediaMetadata."""

    def test_display_title_with_duration(self):
        """Should append the timestamp when the duration is known."""
        metadata = MediaMetadata(title="Song", duration=WrappedDuration.from_seconds(125))

        assert metadata.display_title == "Song [2:05]"

    def test_display_title_without_duration(self):
        """Should fall back to the bare title for live or unknown durations."""
        assert MediaMetadata(title="Live Stream").display_title == "Live Stream"

    def test_empty_title_rejected(self):
        """Should reject an empty title."""
        with pytest.raises(ValidationError):
            MediaMetadata(title="")

    def test_cover_art_must_be_http(self):
        """Should reject non-HTTP cover art locators."""
        with pytest.raises(ValidationError):
            MediaMetadata(title="Song", cover_art_url="ftp://example.com/a.jpg")

    def test_frozen(self):
        """Should not allow mutation after construction."""
        metadata = MediaMetadata(title="Song")
        with pytest.raises(ValidationError):
            metadata.title = "Other"  # type: ignore[misc]


# =============================================================================
# MediaItem Entity Tests
# =============================================================================


class TestMediaItem:
    """Unit tests for MediaItem and its resource ownership."""

    def test_carries_request_context_untouched(self):
        """Should keep the exact context object the caller supplied."""
        context = {"reply_to": 123}
        item = make_item("Song", context=context)

        assert item.request_context is context
        assert item.title == "Song"

    def test_fields_are_immutable(self):
        """Should be frozen after construction."""
        item = make_item("Song")
        with pytest.raises(ValidationError):
            item.query = "other"  # type: ignore[misc]

    def test_source_url_optional(self):
        """Should allow items without a source locator."""
        item = MediaItem(
            query="something",
            resource=FakeResource("x"),
            metadata=MediaMetadata(title="Something"),
        )

        assert item.source_url is None
        assert item.request_context is None

    def test_release_closes_owned_resource_once(self):
        """Should close the resource on release, and only once."""
        item = make_item("Song")

        item.release()
        item.release()

        assert item.resource.close_calls == 1
        assert not item.owns_resource

    def test_hand_off_transfers_ownership(self):
        """Should stop managing the resource after a successful hand-off."""
        item = make_item("Song")

        with item.hand_off() as resource:
            assert resource is item.resource

        item.release()

        assert item.resource.close_calls == 0
        assert not item.owns_resource

    def test_failed_hand_off_releases_resource(self):
        """Should release the resource and re-raise when the hand-off fails."""
        item = make_item("Song")

        with pytest.raises(HandOffError):
            with item.hand_off():
                raise HandOffError("nope")

        assert item.resource.close_calls == 1
        assert not item.owns_resource

    def test_second_hand_off_raises(self):
        """Should refuse handing the same resource off twice."""
        item = make_item("Song")
        with item.hand_off():
            pass

        with pytest.raises(InvalidOperationError, match="already handed"):
            with item.hand_off():
                pass

    def test_hand_off_after_release_raises(self):
        """Should refuse handing off a released resource."""
        item = make_item("Song")
        item.release()

        with pytest.raises(InvalidOperationError, match="already released"):
            with item.hand_off():
                pass

    def test_release_tolerates_close_errors(self):
        """Should swallow errors raised while closing the resource."""

        class ExplodingResource:
            def close(self):
                raise RuntimeError("boom")

        item = MediaItem(
            query="q", resource=ExplodingResource(), metadata=MediaMetadata(title="T")
        )

        item.release()

        assert not item.owns_resource

    def test_release_without_close_method(self):
        """Should accept resources that have nothing to close."""
        item = MediaItem(query="q", resource=object(), metadata=MediaMetadata(title="T"))

        item.release()

        assert not item.owns_resource


# =============================================================================
# Exception Tests
# =============================================================================


class TestDomainExceptions:
    """Tests for the domain exception hierarchy."""

    def test_domain_error_defaults_code_to_class_name(self):
        """Should use the class name when no code is given."""
        error = DomainError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.code == "DomainError"

    def test_invalid_operation_default_message(self):
        """Should build a message from operation and state."""
        error = InvalidOperationError(operation="enqueue", current_state="destroyed")

        assert error.message == "Cannot perform 'enqueue' in state 'destroyed'"
        assert error.code == "INVALID_OPERATION"

    def test_resolution_error(self):
        """Should remember the query that failed."""
        error = ResolutionError("never gonna")

        assert error.query == "never gonna"
        assert "never gonna" in error.message
        assert isinstance(error, DomainError)

    def test_hand_off_error_keeps_resource(self):
        """Should keep the refused resource."""
        resource = FakeResource("r")
        error = HandOffError("unsupported", resource=resource)

        assert error.resource is resource
        assert error.code == "HAND_OFF_FAILED"

    def test_player_fatal_error_message_from_cause(self):
        """Should describe the underlying cause."""
        error = PlayerFatalError(resource=None, cause=OSError("pipe closed"))

        assert error.message == "Player failed: pipe closed"
        assert isinstance(error.cause, OSError)

    def test_player_fatal_error_without_cause(self):
        """Should fall back to a generic message."""
        assert PlayerFatalError(resource=None).message == "Player failed"

    def test_player_fatal_error_explicit_message(self):
        """Should prefer an explicit message."""
        error = PlayerFatalError(resource=None, message="decoder crashed")

        assert error.message == "decoder crashed"

    def test_connection_lost_error(self):
        """Should describe why the connection was given up."""
        error = ConnectionLostError("gave up after 5 rejoin attempts")

        assert error.reason == "gave up after 5 rejoin attempts"
        assert error.code == "CONNECTION_LOST"
