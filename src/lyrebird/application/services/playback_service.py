"""Playback Application Service - drives a session queue through the voice transport."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lyrebird.domain.music.entities import QueueItem, SourceDescriptor
from lyrebird.domain.music.value_objects import ItemState
from lyrebird.domain.shared.exceptions import DomainError, NotJoinedError, ResolutionError
from lyrebird.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.audio_resolver import AudioResolver, SearchResult
    from ..interfaces.voice_adapter import VoiceAdapter
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    queued: list[QueueItem] = field(default_factory=list)
    failed: int = 0


class PlaybackService:
    """Resolves sources into queue items and keeps position 0 streaming."""

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        voice_adapter: VoiceAdapter,
        audio_resolver: AudioResolver,
    ) -> None:
        self._registry = registry
        self._voice = voice_adapter
        self._resolver = audio_resolver
        self._voice.set_on_track_end_callback(self._on_track_end)

    async def enqueue(self, guild_id: int, source: SourceDescriptor) -> tuple[QueueItem, int]:
        """Resolve *source* and append it to the guild's queue.

        Resolution happens before the queue lock is taken, so a slow lookup
        never blocks other commands on the same queue. Returns the item and
        the position it landed at. Position 0 means playback was attempted;
        the item is ERRORED and already dropped if the transport refused it.
        """
        session = self._registry.require(guild_id)
        item = QueueItem(source=source)

        try:
            resolved = await self._resolver.resolve(source)
        except ResolutionError:
            item.mark_errored()
            raise
        item.attach_resolution(resolved.metadata, resolved.stream_url)

        def append(items: list[QueueItem]) -> int:
            if session.closed:
                item.stop()
                raise NotJoinedError(guild_id)
            items.append(item)
            position = len(items) - 1
            if position == 0:
                self._start_front(guild_id, items)
            return position

        position = await session.queue.modify(append)
        logger.info(LogTemplates.ITEM_ENQUEUED, item.item_id, position, guild_id)
        return item, position

    async def enqueue_many(self, guild_id: int, sources: Iterable[SourceDescriptor]) -> BatchResult:
        """Enqueue *sources* in order. A failing item is counted and skipped.

        Losing the session stops the batch: NotJoinedError propagates.
        """
        result = BatchResult()
        for source in sources:
            try:
                item, _ = await self.enqueue(guild_id, source)
            except NotJoinedError:
                raise
            except DomainError as e:
                result.failed += 1
                logger.warning(LogTemplates.BATCH_ITEM_FAILED, source.arg, guild_id, e.message)
                continue

            if item.state is ItemState.ERRORED:
                result.failed += 1
            else:
                result.queued.append(item)

        logger.info(LogTemplates.BATCH_FINISHED, guild_id, len(result.queued), result.failed)
        return result

    async def search(self, terms: str) -> list[SearchResult]:
        return await self._resolver.search(terms)

    def _start_front(self, guild_id: int, items: list[QueueItem]) -> bool:
        """Start the head of *items*, dropping heads the transport refuses.

        Runs inside a queue mutation.
        """
        while items:
            head = items[0]
            if head.state is not ItemState.STOPPED and self._voice.play(guild_id, head):
                head.mark_playing()
                logger.info(LogTemplates.ITEM_STARTED, head.item_id, guild_id)
                return True
            head.mark_errored()
            items.pop(0)
            logger.warning(LogTemplates.ITEM_PLAY_FAILED, head.item_id, guild_id)
        return False

    async def _on_track_end(self, guild_id: int, finished: QueueItem) -> None:
        session = self._registry.get(guild_id)
        if session is None:
            logger.debug(LogTemplates.TRACK_END_NO_SESSION, guild_id)
            return

        def advance(items: list[QueueItem]) -> None:
            # Clear, leave and drain already removed it; nothing to advance.
            if not items or items[0] is not finished:
                return
            if finished.looping and finished.state is ItemState.PLAYING:
                if self._voice.play(guild_id, finished):
                    logger.debug(LogTemplates.ITEM_LOOPED, finished.item_id, guild_id)
                    return
                finished.mark_errored()
            items.pop(0)
            finished.stop()
            self._start_front(guild_id, items)

        await session.queue.modify(advance)

    def elapsed(self, guild_id: int) -> float | None:
        return self._voice.elapsed_seconds(guild_id)
