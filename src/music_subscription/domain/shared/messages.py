"""Centralized message constants for error messages and log templates."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Media Validation Errors
    NEGATIVE_DURATION = "Duration cannot be negative"

    # Ownership Errors
    RESOURCE_ALREADY_HANDED_OFF = "Resource for '{title}' was already handed to the player"
    RESOURCE_ALREADY_RELEASED = "Resource for '{title}' was already released"

    # Session Errors
    SUBSCRIPTION_DESTROYED = "Subscription has been destroyed"

    # Player Errors
    UNSUPPORTED_RESOURCE = "Unsupported resource type: {type_name}"
    RESOURCE_CLOSED = "Resource has already been closed"
    PLAYER_NOT_ATTACHED = "Player is not attached to a connected voice client"

    # Resolution Errors
    NO_RESULTS = "No results found for '{query}'"
    NO_STREAM_URL = "No stream URL found for '{title}'"
    EXTRACTION_FAILED = "Metadata extraction failed for '{query}': {error}"

    # Settings Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Queue Operations
    QUEUE_ENQUEUED = "Enqueued '%s' (%d waiting)"
    QUEUE_REARMED = "Queue re-armed by enqueue after stop"
    QUEUE_DRAIN_LOCKED = "Drain skipped: another drain holds the queue lock"
    QUEUE_HANDED_OFF = "Handed '%s' to the player (%d waiting)"
    QUEUE_HAND_OFF_FAILED = "Hand-off failed for '%s': %s"
    QUEUE_STOPPED = "Queue stopped, released %d pending items"

    # Media Resources
    RESOURCE_RELEASED = "Released resource for '%s'"
    RESOURCE_CLOSE_ERROR = "Error closing resource for '%s': %r"

    # Connection Supervision
    CONNECTION_STATE_CHANGED = "Connection %s -> %s"
    CONNECTION_MOVE_GRACE = "Connection closed with code %d, waiting %.1fs for it to reconnect"
    CONNECTION_MOVED = "Connection recovered after close code %d"
    CONNECTION_REMOVED = "Connection did not recover after close code %d"
    CONNECTION_REJOIN_SCHEDULED = "Rejoin attempt %d scheduled in %.1fs"
    CONNECTION_REJOINING = "Issuing rejoin (attempt %d)"
    CONNECTION_REJOIN_ABANDONED = "Connection destroyed while waiting to rejoin"
    CONNECTION_GIVING_UP = "Giving up after %d rejoin attempts"
    CONNECTION_READY_BOUND = "Waiting up to %.1fs for the connection to become ready"
    CONNECTION_READY = "Connection ready"
    CONNECTION_READY_TIMEOUT = "Connection not ready after %.1fs"
    CONNECTION_DESTROYING = "Destroying connection (%s): %s"
    CONNECTION_DESTROY_SKIPPED = "Skipping destroy (%s): connection is %s"
    CONNECTION_DESTROYED = "Connection destroyed"
    SUPERVISOR_TASK_FAILED = "Supervisor task failed: %r"

    # Subscription Lifecycle
    SUBSCRIPTION_CREATED = "Subscription created"
    SUBSCRIPTION_STOPPING = "Stopping subscription (%s)"
    SUBSCRIPTION_ALREADY_STOPPED = "Subscription already stopped, ignoring"
    SUBSCRIPTION_REJECTED_ENQUEUE = "Rejected enqueue of '%s': subscription destroyed"

    # Playback
    PLAYBACK_STARTED = "Started playing '%s'"
    PLAYBACK_ENDED = "Finished playing '%s'"
    PLAYBACK_ABANDONED = "Abandoned '%s' after player error"
    PLAYBACK_FATAL_ERROR = "Player error while playing '%s': %s"
    PLAYBACK_UNATTRIBUTED_ERROR = "Ignoring player error not tied to the current item: %s"
    PLAYBACK_FORCED_STOP = "Player force-stopped"
    PLAYBACK_STALE_CALLBACK = "Ignoring stale after-callback for a replaced resource"

    # Event Bus
    EVENT_SUBSCRIBED = "Subscribed handler to: %s"
    EVENT_UNSUBSCRIBED = "Unsubscribed handler from %s"
    EVENT_NO_HANDLERS = "No handlers for %s"
    EVENT_PUBLISHING = "Publishing %s to %d handlers"
    EVENT_HANDLER_ERROR = "Error in handler for %s: %s"
    EVENT_HANDLERS_CLEARED = "Cleared all event handlers"

    # yt-dlp Operations
    YTDLP_SEARCHING = "Searching for '%s'"
    YTDLP_EXTRACTING = "Extracting info for URL: %s"
    YTDLP_RESOLVED = "Resolved '%s' to '%s'"
    YTDLP_FAILED_RESOLVE = "Failed to resolve '%s': %s"
