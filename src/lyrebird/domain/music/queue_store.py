"""Per-session playback queue with serialized mutation.

Position 0 is the item currently streaming. The reordering commands
(move/swap/remove) never touch it; skip and clear are the only ways to end it.
Every public operation runs as a single :meth:`QueueStore.modify` call, so two
mutations of the same queue never interleave no matter how many command
invocations race for it.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from lyrebird.domain.music.entities import QueueItem
from lyrebird.domain.shared.exceptions import (
    EmptyQueueError,
    PlaybackStateError,
    QueueIndexError,
)
from lyrebird.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...application.interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)

R = TypeVar("R")


class QueueStore:
    """Ordered sequence of queue items owned by one session."""

    def __init__(
        self,
        guild_id: int,
        voice_adapter: VoiceAdapter,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.guild_id = guild_id
        self._voice = voice_adapter
        self._items: list[QueueItem] = []
        self._lock = asyncio.Lock()
        self._rng = rng or random.Random()

    async def modify(self, mutator: Callable[[list[QueueItem]], R]) -> R:
        """Run *mutator* against the live list while holding the queue lock.

        Whatever the mutator returns or raises is passed through. Mutators must
        validate before changing anything so a raised error leaves the queue as
        it was.
        """
        async with self._lock:
            return mutator(self._items)

    # ── Reads ───────────────────────────────────────────────────────

    async def length(self) -> int:
        return await self.modify(len)

    async def is_empty(self) -> bool:
        return await self.modify(lambda items: not items)

    async def current_queue_slice(self, window: range) -> tuple[QueueItem, ...]:
        """Read-only copy of the items in *window*, clamped to ``[0, length)``."""

        def read(items: list[QueueItem]) -> tuple[QueueItem, ...]:
            start = max(window.start, 0)
            stop = min(window.stop, len(items))
            return tuple(items[start:stop])

        return await self.modify(read)

    async def snapshot(self) -> tuple[QueueItem, ...]:
        return await self.modify(tuple)

    # ── Reordering ──────────────────────────────────────────────────

    async def move(self, from_pos: int, to_pos: int) -> QueueItem:
        """Move the item at *from_pos* to *to_pos*; past-the-end targets append."""

        def mutate(items: list[QueueItem]) -> QueueItem:
            if from_pos == 0 or to_pos == 0:
                raise QueueIndexError(0, ErrorMessages.CANNOT_MOVE_CURRENT)
            if not 0 < from_pos < len(items):
                raise QueueIndexError(from_pos)
            if to_pos < 0:
                raise QueueIndexError(to_pos)

            item = items.pop(from_pos)
            if to_pos > len(items):
                items.append(item)
            else:
                items.insert(to_pos, item)
            return item

        item = await self.modify(mutate)
        logger.info(LogTemplates.QUEUE_MOVED, from_pos, to_pos, self.guild_id)
        return item

    async def swap(self, a: int, b: int) -> None:
        def mutate(items: list[QueueItem]) -> None:
            if a == 0 or b == 0:
                raise QueueIndexError(0, ErrorMessages.CANNOT_SWAP_CURRENT)
            for index in (a, b):
                if not 0 < index < len(items):
                    raise QueueIndexError(index)
            items[a], items[b] = items[b], items[a]

        await self.modify(mutate)
        logger.info(LogTemplates.QUEUE_SWAPPED, a, b, self.guild_id)

    async def remove(self, index: int) -> QueueItem:
        """Remove and stop the item at *index*."""

        def mutate(items: list[QueueItem]) -> QueueItem:
            if index == 0:
                raise QueueIndexError(0, ErrorMessages.CANNOT_REMOVE_CURRENT)
            if not 0 < index < len(items):
                raise QueueIndexError(index, ErrorMessages.NO_ITEM_AT_INDEX.format(index=index))
            item = items.pop(index)
            item.stop()
            return item

        item = await self.modify(mutate)
        logger.info(LogTemplates.QUEUE_REMOVED, item.item_id, index, self.guild_id)
        return item

    async def shuffle(self) -> None:
        """Shuffle everything after the now-playing item."""

        def mutate(items: list[QueueItem]) -> None:
            upcoming = items[1:]
            self._rng.shuffle(upcoming)
            items[1:] = upcoming

        await self.modify(mutate)
        logger.info(LogTemplates.QUEUE_SHUFFLED, self.guild_id)

    # ── Playback control ────────────────────────────────────────────

    async def clear(self) -> int:
        """Stop playback and empty the queue, now-playing item included."""

        def mutate(items: list[QueueItem]) -> int:
            removed = list(items)
            items.clear()
            for item in removed:
                item.stop()
            if removed:
                self._voice.stop(self.guild_id)
            return len(removed)

        count = await self.modify(mutate)
        logger.info(LogTemplates.QUEUE_CLEARED, count, self.guild_id)
        return count

    async def skip(self) -> QueueItem:
        """End the now-playing item; the track-end callback advances the queue."""

        def mutate(items: list[QueueItem]) -> QueueItem:
            if not items:
                raise EmptyQueueError()
            current = items[0]
            current.looping = False
            if not self._voice.stop(self.guild_id):
                logger.debug(LogTemplates.QUEUE_SKIP_NOTHING_STREAMING, self.guild_id)
            return current

        return await self.modify(mutate)

    async def pause(self) -> None:
        def mutate(items: list[QueueItem]) -> None:
            if not items:
                raise PlaybackStateError("pause", ErrorMessages.NOTHING_PLAYING)
            if self._voice.is_paused(self.guild_id):
                raise PlaybackStateError("pause", ErrorMessages.ALREADY_PAUSED)
            if not self._voice.pause(self.guild_id):
                raise PlaybackStateError("pause")

        await self.modify(mutate)

    async def resume(self) -> None:
        def mutate(items: list[QueueItem]) -> None:
            if not items:
                raise PlaybackStateError("resume", ErrorMessages.NOTHING_PLAYING)
            if not self._voice.is_paused(self.guild_id):
                raise PlaybackStateError("resume", ErrorMessages.NOT_PAUSED)
            if not self._voice.resume(self.guild_id):
                raise PlaybackStateError("resume")

        await self.modify(mutate)

    async def toggle_loop(self) -> bool:
        """Flip the loop flag of the now-playing item and return the new value."""

        def mutate(items: list[QueueItem]) -> bool:
            if not items:
                raise EmptyQueueError(ErrorMessages.NOTHING_PLAYING)
            items[0].looping = not items[0].looping
            return items[0].looping

        return await self.modify(mutate)
