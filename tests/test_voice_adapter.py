"""Tests for DiscordVoiceAdapter and the frame-counting TrackedSource."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_item

from lyrebird.infrastructure.discord.adapters import voice_adapter as va


class FakeVoiceChannel:
    def __init__(self, channel_id: int = 456) -> None:
        self.id = channel_id
        self.name = "voice"
        self.connect = AsyncMock()


class FakeStageChannel:
    pass


class FakeVoiceClient:
    def __init__(self, channel: FakeVoiceChannel, guild) -> None:
        self.channel = channel
        self.guild = guild
        self.source = None
        self.playing = False
        self.play = MagicMock(side_effect=self._play)
        self.disconnect = AsyncMock()

    def _play(self, source, *, after=None) -> None:
        self.source = source
        self.after = after
        self.playing = True

    def is_connected(self) -> bool:
        return True

    def is_playing(self) -> bool:
        return self.playing

    def is_paused(self) -> bool:
        return False


def _pcm_source(frames: int) -> MagicMock:
    source = MagicMock(spec=va.discord.AudioSource)
    source.is_opus.return_value = False
    source.read.side_effect = [b"\x00" * 3840] * frames + [b""]
    return source


@pytest.fixture
def patched_discord(monkeypatch):
    monkeypatch.setattr(va.discord, "VoiceChannel", FakeVoiceChannel)
    monkeypatch.setattr(va.discord, "StageChannel", FakeStageChannel)
    monkeypatch.setattr(va.discord, "VoiceClient", FakeVoiceClient)
    monkeypatch.setattr(va.discord, "FFmpegPCMAudio", MagicMock(side_effect=lambda *a, **k: _pcm_source(0)))


@pytest.fixture
def guild():
    g = MagicMock()
    g.id = 123
    g.name = "guild"
    g.voice_client = None
    g.change_voice_state = AsyncMock()
    return g


@pytest.fixture
def bot(guild):
    b = MagicMock()
    b.get_guild.side_effect = lambda gid: guild if gid == 123 else None
    return b


@pytest.fixture
def adapter(bot):
    return va.DiscordVoiceAdapter(bot)


# =============================================================================
# TrackedSource
# =============================================================================


class TestTrackedSource:
    def test_counts_frames_read(self):
        tracked = va.TrackedSource(_pcm_source(50), volume=1.0)

        while tracked.read():
            pass

        assert tracked.frames == 50
        assert tracked.elapsed_seconds == pytest.approx(1.0)

    def test_empty_read_is_not_counted(self):
        tracked = va.TrackedSource(_pcm_source(0), volume=0.5)

        assert tracked.read() == b""
        assert tracked.elapsed_seconds == 0.0


# =============================================================================
# Connection
# =============================================================================


class TestConnect:
    @pytest.mark.asyncio
    async def test_unknown_guild(self, adapter, patched_discord):
        assert await adapter.connect(999, 456) is False

    @pytest.mark.asyncio
    async def test_not_a_voice_channel(self, adapter, guild, patched_discord):
        guild.get_channel.return_value = object()

        assert await adapter.connect(123, 456) is False

    @pytest.mark.asyncio
    async def test_connects(self, adapter, guild, patched_discord):
        channel = FakeVoiceChannel()
        guild.get_channel.return_value = channel

        assert await adapter.connect(123, 456) is True
        channel.connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_already_in_channel(self, adapter, guild, patched_discord):
        channel = FakeVoiceChannel()
        guild.get_channel.return_value = channel
        guild.voice_client = FakeVoiceClient(channel, guild)

        assert await adapter.connect(123, 456) is True
        channel.connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout(self, bot, guild, patched_discord):
        from lyrebird.config.settings import AudioSettings

        adapter = va.DiscordVoiceAdapter(bot, AudioSettings(connect_timeout_seconds=0.01))
        channel = FakeVoiceChannel()

        async def hang():
            await asyncio.sleep(1)

        channel.connect = AsyncMock(side_effect=hang)
        guild.get_channel.return_value = channel

        assert await adapter.connect(123, 456) is False

    @pytest.mark.asyncio
    async def test_disconnect_without_client(self, adapter, patched_discord):
        assert await adapter.disconnect(123) is True


# =============================================================================
# Playback
# =============================================================================


class TestPlayback:
    def test_play_without_voice_client(self, adapter, patched_discord):
        assert adapter.play(123, make_item("a")) is False

    @pytest.mark.asyncio
    async def test_play_and_track_end(self, adapter, bot, guild, patched_discord):
        bot.loop = asyncio.get_running_loop()
        vc = FakeVoiceClient(FakeVoiceChannel(), guild)
        guild.voice_client = vc
        ended = []

        async def on_end(guild_id, item):
            ended.append((guild_id, item))

        adapter.set_on_track_end_callback(on_end)
        item = make_item("a")

        assert adapter.play(123, item) is True
        assert isinstance(vc.source, va.TrackedSource)
        assert adapter.elapsed_seconds(123) == 0.0

        vc.after(None)
        for _ in range(5):
            await asyncio.sleep(0)

        assert ended == [(123, item)]

    @pytest.mark.asyncio
    async def test_callback_errors_are_contained(self, adapter):
        adapter.set_on_track_end_callback(AsyncMock(side_effect=RuntimeError("boom")))

        await adapter._handle_track_end(123, make_item("a"))

    def test_stop_when_idle(self, adapter, guild, patched_discord):
        guild.voice_client = FakeVoiceClient(FakeVoiceChannel(), guild)

        assert adapter.stop(123) is False

    def test_elapsed_without_source(self, adapter, guild, patched_discord):
        guild.voice_client = FakeVoiceClient(FakeVoiceChannel(), guild)

        assert adapter.elapsed_seconds(123) is None


# =============================================================================
# Deafen
# =============================================================================


class TestDeafen:
    @pytest.mark.asyncio
    async def test_set_deafened(self, adapter, guild, patched_discord):
        channel = FakeVoiceChannel()
        guild.voice_client = FakeVoiceClient(channel, guild)

        assert await adapter.set_deafened(123, True) is True
        guild.change_voice_state.assert_awaited_once_with(channel=channel, self_deaf=True)

    @pytest.mark.asyncio
    async def test_set_deafened_not_connected(self, adapter, patched_discord):
        assert await adapter.set_deafened(123, True) is False

    def test_is_deafened_reads_own_voice_state(self, adapter, guild):
        guild.me.voice.self_deaf = True

        assert adapter.is_deafened(123) is True

        guild.me.voice = None
        assert adapter.is_deafened(123) is False
