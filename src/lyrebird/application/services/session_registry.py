"""Session Registry - tracks which guilds have an active voice session.

The registry map is the only process-wide mutable state. Its lock is held
only for inserting or removing an entry; joining, leaving and draining one
room are serialized by a per-room lock so that a slow voice connection in one
guild never blocks registry operations in another.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lyrebird.domain.music.entities import QueueItem, SessionRecord
from lyrebird.domain.music.queue_store import QueueStore
from lyrebird.domain.shared.exceptions import (
    AlreadyJoinedError,
    NotInChannelError,
    NotJoinedError,
    PlaybackStateError,
    RegistryDrainingError,
    VoiceConnectionError,
)
from lyrebird.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One active voice room: its channel binding and its queue.

    Every command task touching the room shares this handle; its lifetime ends
    at leave or drain. ``closed`` flips under the queue lock at teardown so an
    append that lost the race is refused instead of landing in a dead queue.
    """

    guild_id: int
    channel_id: int
    queue: QueueStore
    closed: bool = False


@dataclass
class _RoomLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


def _stop_all(items: list[QueueItem]) -> list[QueueItem]:
    taken = list(items)
    items.clear()
    for item in taken:
        item.stop()
    return taken


class SessionRegistry:
    def __init__(self, voice_adapter: VoiceAdapter) -> None:
        self._voice = voice_adapter
        self._sessions: dict[int, Session] = {}
        self._lock = asyncio.Lock()
        self._room_locks: dict[int, _RoomLock] = {}
        self._draining = False

    @asynccontextmanager
    async def _room_lock(self, guild_id: int) -> AsyncIterator[None]:
        """Hold the room's lock; the entry is dropped once unused and the room is empty."""
        entry = self._room_locks.get(guild_id)
        if entry is None:
            entry = self._room_locks[guild_id] = _RoomLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and guild_id not in self._sessions:
                del self._room_locks[guild_id]

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def rooms(self) -> Iterator[int]:
        return iter(list(self._sessions))

    @property
    def is_draining(self) -> bool:
        return self._draining

    def get(self, guild_id: int) -> Session | None:
        return self._sessions.get(guild_id)

    def require(self, guild_id: int) -> Session:
        session = self._sessions.get(guild_id)
        if session is None:
            raise NotJoinedError(guild_id)
        return session

    async def join(
        self, guild_id: int, channel_id: int | None, *, must_join: bool = True
    ) -> Session:
        """Join *channel_id* in *guild_id*.

        With ``must_join`` an existing session is an error; without it the
        existing session is returned unchanged.
        """
        async with self._room_lock(guild_id):
            if self._draining:
                raise RegistryDrainingError()

            existing = self._sessions.get(guild_id)
            if existing is not None:
                if must_join:
                    raise AlreadyJoinedError(guild_id)
                return existing

            if channel_id is None:
                raise NotInChannelError()

            if not await self._voice.connect(guild_id, channel_id):
                raise VoiceConnectionError(guild_id, channel_id)

            session = Session(
                guild_id=guild_id,
                channel_id=channel_id,
                queue=QueueStore(guild_id, self._voice),
            )
            # A drain that began during connect has already listed the rooms.
            async with self._lock:
                draining = self._draining
                if not draining:
                    self._sessions[guild_id] = session

            if draining:
                await self._voice.disconnect(guild_id)
                raise RegistryDrainingError()

        logger.info(LogTemplates.SESSION_JOINED, guild_id, channel_id)
        return session

    async def autojoin(self, guild_id: int, channel_id: int | None) -> Session:
        return await self.join(guild_id, channel_id, must_join=False)

    async def leave(self, guild_id: int) -> None:
        async with self._room_lock(guild_id):
            session = self._sessions.get(guild_id)
            if session is None:
                raise NotJoinedError(guild_id)

            def clear(items: list[QueueItem]) -> None:
                session.closed = True
                if _stop_all(items):
                    self._voice.stop(guild_id)

            await session.queue.modify(clear)
            async with self._lock:
                del self._sessions[guild_id]
            await self._voice.disconnect(guild_id)

        logger.info(LogTemplates.SESSION_LEFT, guild_id)

    async def drain_all(self) -> list[SessionRecord]:
        """Empty every session into replay records and disconnect.

        Runs shielded: once started, cancelling the caller does not interrupt
        it, because a half-finished drain would drop queue state.
        """
        return await asyncio.shield(self._drain())

    async def reopen(self) -> None:
        """Accept joins again after a drain whose hand-over was abandoned."""
        async with self._lock:
            self._draining = False
        logger.warning(LogTemplates.REGISTRY_REOPENED)

    async def _drain(self) -> list[SessionRecord]:
        async with self._lock:
            self._draining = True
            guild_ids = list(self._sessions)

        records: list[SessionRecord] = []
        for guild_id in guild_ids:
            async with self._room_lock(guild_id):
                session = self._sessions.get(guild_id)
                if session is None:
                    continue
                records.append(await self._drain_session(session))

        logger.info(LogTemplates.SESSIONS_DRAINED, len(records))
        return records

    async def _drain_session(self, session: Session) -> SessionRecord:
        try:
            await session.queue.pause()
        except PlaybackStateError as e:
            logger.debug(LogTemplates.SESSION_DRAIN_PAUSE_SKIPPED, session.guild_id, e.message)

        def take(items: list[QueueItem]) -> list[QueueItem]:
            session.closed = True
            replayable = [item for item in items if item.is_replayable]
            _stop_all(items)
            return replayable

        kept = await session.queue.modify(take)
        channel_id = self._voice.get_current_channel_id(session.guild_id) or session.channel_id

        async with self._lock:
            self._sessions.pop(session.guild_id, None)
        await self._voice.disconnect(session.guild_id)

        logger.info(LogTemplates.SESSION_DRAINED, session.guild_id, len(kept))
        return SessionRecord(
            room=session.guild_id,
            channel=channel_id,
            queue=[item.source for item in kept],
        )
