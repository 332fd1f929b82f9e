from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from lyrebird.application.interfaces.audio_resolver import AudioResolver, ResolvedAudio, SearchResult
from lyrebird.application.interfaces.voice_adapter import TrackEndCallback, VoiceAdapter
from lyrebird.domain.music.entities import QueueItem, ResolveSource, SourceDescriptor, TrackMetadata
from lyrebird.domain.shared.exceptions import ResolutionError

# ============================================================================
# Fakes
# ============================================================================


class FakeVoiceAdapter(VoiceAdapter):
    """In-memory transport. Track ends are fired explicitly with :meth:`end_track`."""

    def __init__(self) -> None:
        self.channels: dict[int, int] = {}
        self.current: dict[int, QueueItem] = {}
        self.paused: set[int] = set()
        self.deafened: set[int] = set()
        self.played: list[tuple[int, str]] = []
        self.stop_calls: list[int] = []
        self.refuse_connect: set[int] = set()
        self.refuse_play = False
        self.elapsed: float | None = None
        self.callback: TrackEndCallback | None = None

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        if channel_id in self.refuse_connect:
            return False
        self.channels[guild_id] = channel_id
        return True

    async def disconnect(self, guild_id: int) -> bool:
        self.channels.pop(guild_id, None)
        self.current.pop(guild_id, None)
        self.paused.discard(guild_id)
        return True

    def play(self, guild_id: int, item: QueueItem) -> bool:
        if self.refuse_play or guild_id not in self.channels:
            return False
        self.current[guild_id] = item
        self.paused.discard(guild_id)
        self.played.append((guild_id, item.item_id))
        return True

    def stop(self, guild_id: int) -> bool:
        self.stop_calls.append(guild_id)
        if guild_id not in self.current:
            return False
        self.paused.discard(guild_id)
        return True

    def pause(self, guild_id: int) -> bool:
        if guild_id not in self.current or guild_id in self.paused:
            return False
        self.paused.add(guild_id)
        return True

    def resume(self, guild_id: int) -> bool:
        if guild_id not in self.paused:
            return False
        self.paused.discard(guild_id)
        return True

    def is_connected(self, guild_id: int) -> bool:
        return guild_id in self.channels

    def is_playing(self, guild_id: int) -> bool:
        return guild_id in self.current and guild_id not in self.paused

    def is_paused(self, guild_id: int) -> bool:
        return guild_id in self.paused

    def elapsed_seconds(self, guild_id: int) -> float | None:
        return self.elapsed if guild_id in self.current else None

    def get_current_channel_id(self, guild_id: int) -> int | None:
        return self.channels.get(guild_id)

    async def set_deafened(self, guild_id: int, deafened: bool) -> bool:
        if guild_id not in self.channels:
            return False
        if deafened:
            self.deafened.add(guild_id)
        else:
            self.deafened.discard(guild_id)
        return True

    def is_deafened(self, guild_id: int) -> bool:
        return guild_id in self.deafened

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self.callback = callback

    async def end_track(self, guild_id: int) -> None:
        """Simulate the transport finishing whatever it is streaming."""
        item = self.current.pop(guild_id)
        assert self.callback is not None
        await self.callback(guild_id, item)


class FakeResolver(AudioResolver):
    """Resolves every source to a title equal to its argument."""

    def __init__(self) -> None:
        self.failing: set[str] = set()
        self.hanging: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.calls: list[str] = []
        self.searches: list[str] = []

    async def resolve(self, source: SourceDescriptor) -> ResolvedAudio:
        self.calls.append(source.arg)
        if self.gate is not None:
            await self.gate.wait()
        if source.arg in self.hanging:
            await asyncio.Event().wait()
        if source.arg in self.failing:
            raise ResolutionError(source.arg)
        return ResolvedAudio(
            metadata=TrackMetadata(title=source.arg, artist="Artist", duration_seconds=180),
            stream_url=f"https://stream.example/{len(self.calls)}",
        )

    async def search(self, terms: str, limit: int = 10) -> list[SearchResult]:
        """Every search lists *limit* hits named ``<terms> <n>``."""
        self.searches.append(terms)
        if terms in self.failing:
            raise ResolutionError(terms)
        return [
            SearchResult(url=f"https://example.com/{terms}/{n}", title=f"{terms} {n}", artist="Artist")
            for n in range(1, limit + 1)
        ]


def make_item(arg: str, *, duration: int | None = 180) -> QueueItem:
    """A resolved queue item whose display is ``Artist - <arg>``."""
    item = QueueItem(source=ResolveSource.url(f"https://example.com/{arg}"))
    item.attach_resolution(
        TrackMetadata(title=arg, artist="Artist", duration_seconds=duration),
        f"https://stream.example/{arg}",
    )
    return item


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def voice():
    return FakeVoiceAdapter()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def registry(voice):
    from lyrebird.application.services.session_registry import SessionRegistry

    return SessionRegistry(voice)


@pytest.fixture
def playback(registry, voice, resolver):
    from lyrebird.application.services.playback_service import PlaybackService

    return PlaybackService(registry=registry, voice_adapter=voice, audio_resolver=resolver)


@pytest.fixture
def container(voice, resolver):
    from lyrebird.config.container import Container
    from lyrebird.config.settings import Settings

    return Container(
        settings=Settings(_env_file=None, is_run_by_runner="1", bot_owner_id=42),
        _voice_adapter=voice,
        _audio_resolver=resolver,
    )


@pytest.fixture
def interaction():
    import discord

    i = MagicMock(spec=discord.Interaction)
    i.response = MagicMock()
    i.response.is_done.return_value = False
    i.response.send_message = AsyncMock()
    i.response.defer = AsyncMock(side_effect=lambda *a, **k: i.response.is_done.configure_mock(return_value=True))
    i.followup = MagicMock()
    i.followup.send = AsyncMock()
    i.original_response = AsyncMock(return_value=MagicMock(id=555, edit=AsyncMock()))

    i.guild = MagicMock()
    i.guild.id = 111

    member = MagicMock(spec=discord.Member)
    member.id = 222
    member.voice = MagicMock()
    member.voice.channel = MagicMock()
    member.voice.channel.id = 333
    i.user = member
    return i


def sent(mock: AsyncMock) -> str:
    """Content of the last message sent through *mock*."""
    args, kwargs = mock.call_args
    return kwargs.get("content", args[0] if args else None)
