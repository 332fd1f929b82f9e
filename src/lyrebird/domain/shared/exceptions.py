"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class QueueIndexError(DomainError):
    """Raised when a queue position is out of bounds or targets the now-playing slot."""

    def __init__(self, index: int, message: str | None = None) -> None:
        msg = message or f"Index out of bounds for {index}"
        super().__init__(msg, code="QUEUE_INDEX")
        self.index = index


class EmptyQueueError(DomainError):
    """Raised when an operation needs a now-playing item and the queue is empty."""

    def __init__(self, message: str = "queue is empty") -> None:
        super().__init__(message, code="EMPTY_QUEUE")


class PlaybackStateError(DomainError):
    """Raised when pause/resume is requested in the wrong playback state."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        msg = message or f"Cannot {operation} in the current playback state"
        super().__init__(msg, code="PLAYBACK_STATE")
        self.operation = operation


class JoinError(DomainError):
    """Base class for failures while joining a voice room."""


class AlreadyJoinedError(JoinError):
    def __init__(self, guild_id: int) -> None:
        super().__init__("Already in a voice channel", code="ALREADY_JOINED")
        self.guild_id = guild_id


class NotInChannelError(JoinError):
    def __init__(self) -> None:
        super().__init__("You are not in a voice channel", code="NOT_IN_CHANNEL")


class VoiceConnectionError(JoinError):
    def __init__(self, guild_id: int, channel_id: int) -> None:
        super().__init__(
            f"Could not connect to voice channel {channel_id}", code="VOICE_CONNECTION"
        )
        self.guild_id = guild_id
        self.channel_id = channel_id


class RegistryDrainingError(JoinError):
    """Raised when a join arrives after the registry started draining for a restart."""

    def __init__(self) -> None:
        super().__init__("Restart in progress, not joining", code="REGISTRY_DRAINING")


class NotJoinedError(DomainError):
    def __init__(self, guild_id: int) -> None:
        super().__init__("Not in a voice channel", code="NOT_JOINED")
        self.guild_id = guild_id


class ResolutionError(DomainError):
    """Raised when a source descriptor cannot be resolved to playable audio."""

    def __init__(self, arg: str, message: str | None = None) -> None:
        msg = message or f"Could not resolve '{arg}'"
        super().__init__(msg, code="RESOLUTION_FAILED")
        self.arg = arg


class SnapshotFormatError(DomainError):
    """Raised when a transfer file is unreadable or does not match the snapshot schema."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="SNAPSHOT_FORMAT")


class RestartNotAllowedError(DomainError):
    """Raised when a restart is requested by a non-owner or outside the supervisor."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason, code="RESTART_NOT_ALLOWED")


class RestartFailedError(DomainError):
    """Raised when the hand-over could not be written and the sessions were restored in place."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason, code="RESTART_FAILED")
