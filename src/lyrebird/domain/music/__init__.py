"""
Music Bounded Context

Domain logic for queue items, per-session queues, and queue pagination.
"""

from lyrebird.domain.music.entities import (
    QueueItem,
    ResolveSource,
    SessionRecord,
    SourceDescriptor,
    TrackMetadata,
)
from lyrebird.domain.music.queue_store import QueueStore
from lyrebird.domain.music.value_objects import (
    ItemState,
    NavigationAction,
    NavigationEvent,
    PageStatus,
    PaginationState,
)

__all__ = [
    # Entities
    "QueueItem",
    "ResolveSource",
    "SessionRecord",
    "SourceDescriptor",
    "TrackMetadata",
    # Queue
    "QueueStore",
    # Value Objects
    "ItemState",
    "NavigationAction",
    "NavigationEvent",
    "PageStatus",
    "PaginationState",
]
