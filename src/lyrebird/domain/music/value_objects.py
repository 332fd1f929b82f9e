"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ItemState(Enum):
    """Lifecycle of a queue item.

    - PENDING -> READY (resolution succeeded)
    - READY -> PLAYING (transport started it)
    - Any -> STOPPED (removed, cleared, drained)
    - Any -> ERRORED (resolution or transport failure)
    """

    PENDING = "pending"
    READY = "ready"
    PLAYING = "playing"
    STOPPED = "stopped"
    ERRORED = "errored"

    @property
    def is_live(self) -> bool:
        return self not in {ItemState.STOPPED, ItemState.ERRORED}


class NavigationAction(Enum):
    PREVIOUS = "queue:previous"
    NEXT = "queue:next"
    REFRESH = "queue:refresh"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NavigationEvent:
    """A page-navigation event decoded once from a raw component id."""

    action: NavigationAction
    raw: str = ""

    @classmethod
    def decode(cls, raw: str) -> NavigationEvent:
        for action in NavigationAction:
            if action is not NavigationAction.UNKNOWN and action.value == raw:
                return cls(action, raw)
        return cls(NavigationAction.UNKNOWN, raw)

    @property
    def is_unknown(self) -> bool:
        return self.action is NavigationAction.UNKNOWN


class PaginationState(Enum):
    """Cursor lifecycle. EXPIRED and CLOSED are terminal."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CLOSED = "closed"

    @property
    def is_terminal(self) -> bool:
        return self is not PaginationState.ACTIVE


class PageStatus(Enum):
    OK = "ok"
    EMPTY = "empty"
    OUT_OF_RANGE = "out_of_range"
