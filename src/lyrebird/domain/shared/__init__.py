"""
Shared Domain Kernel

Contains types and exceptions shared across all bounded contexts.
"""

from lyrebird.domain.shared.exceptions import (
    AlreadyJoinedError,
    DomainError,
    EmptyQueueError,
    JoinError,
    NotInChannelError,
    NotJoinedError,
    PlaybackStateError,
    QueueIndexError,
    RegistryDrainingError,
    ResolutionError,
    RestartFailedError,
    RestartNotAllowedError,
    SnapshotFormatError,
    VoiceConnectionError,
)

__all__ = [
    "DomainError",
    "QueueIndexError",
    "EmptyQueueError",
    "PlaybackStateError",
    "JoinError",
    "AlreadyJoinedError",
    "NotInChannelError",
    "VoiceConnectionError",
    "RegistryDrainingError",
    "NotJoinedError",
    "ResolutionError",
    "SnapshotFormatError",
    "RestartNotAllowedError",
    "RestartFailedError",
]
