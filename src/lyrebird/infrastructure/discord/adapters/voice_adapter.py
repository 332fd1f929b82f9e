"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from lyrebird.application.interfaces.voice_adapter import TrackEndCallback, VoiceAdapter
from lyrebird.config.settings import AudioSettings
from lyrebird.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ....domain.music.entities import QueueItem

logger = logging.getLogger(__name__)

# discord.py reads one 20 ms Opus frame per AudioSource.read() call
FRAME_SECONDS: float = 0.02


class TrackedSource(discord.PCMVolumeTransformer):
    """Volume transformer that counts the frames it has handed out."""

    def __init__(self, original: discord.AudioSource, volume: float) -> None:
        super().__init__(original, volume=volume)
        self.frames = 0

    def read(self) -> bytes:
        data = super().read()
        if data:
            self.frames += 1
        return data

    @property
    def elapsed_seconds(self) -> float:
        return self.frames * FRAME_SECONDS


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._on_track_end: TrackEndCallback | None = None

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            return False

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            return False

        vc = self._get_voice_client(guild_id)
        if vc is not None and vc.is_connected():
            if vc.channel is not None and vc.channel.id == channel_id:
                return True
            await self.disconnect(guild_id)

        try:
            async with asyncio.timeout(self._settings.connect_timeout_seconds):
                await channel.connect()
            logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

    async def disconnect(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        try:
            await vc.disconnect(force=True)
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
        return True

    def play(self, guild_id: int, item: QueueItem) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            return False

        if not item.stream_url:
            logger.error(LogTemplates.VOICE_NO_STREAM_URL, item.item_id)
            return False

        loop = self._bot.loop

        def after_callback(error: Exception | None = None) -> None:
            # Runs on the audio player thread.
            if error:
                logger.warning(LogTemplates.PLAYBACK_ERROR, guild_id, error)
            asyncio.run_coroutine_threadsafe(self._handle_track_end(guild_id, item), loop)

        try:
            source = discord.FFmpegPCMAudio(
                item.stream_url,
                before_options=self._settings.ffmpeg_before_options,
                options=self._settings.ffmpeg_options,
            )
            vc.play(TrackedSource(source, self._settings.default_volume), after=after_callback)
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

        logger.info(LogTemplates.PLAYBACK_STARTED, item.display, guild_id)
        return True

    def stop(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not (vc.is_playing() or vc.is_paused()):
            return False

        vc.stop()
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return True

    def pause(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.is_playing():
            return False

        vc.pause()
        logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
        return True

    def resume(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.is_paused():
            return False

        vc.resume()
        logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
        return True

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    def is_playing(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_playing()

    def is_paused(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_paused()

    def elapsed_seconds(self, guild_id: int) -> float | None:
        vc = self._get_voice_client(guild_id)
        if vc is None or not isinstance(vc.source, TrackedSource):
            return None
        return vc.source.elapsed_seconds

    def get_current_channel_id(self, guild_id: int) -> int | None:
        vc = self._get_voice_client(guild_id)
        if vc and vc.channel:
            return vc.channel.id
        return None

    async def set_deafened(self, guild_id: int, deafened: bool) -> bool:
        vc = self._get_voice_client(guild_id)
        if vc is None or vc.channel is None:
            return False

        await vc.guild.change_voice_state(channel=vc.channel, self_deaf=deafened)
        logger.info(LogTemplates.VOICE_DEAFEN_CHANGED, deafened, guild_id)
        return True

    def is_deafened(self, guild_id: int) -> bool:
        guild = self._bot.get_guild(guild_id)
        if guild is None or guild.me is None or guild.me.voice is None:
            return False
        return bool(guild.me.voice.self_deaf)

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self._on_track_end = callback

    async def _handle_track_end(self, guild_id: int, item: QueueItem) -> None:
        if self._on_track_end is None:
            logger.warning(LogTemplates.PLAYBACK_NO_CALLBACK, guild_id)
            return

        logger.debug(LogTemplates.PLAYBACK_CALLING_CALLBACK, guild_id)
        try:
            await self._on_track_end(guild_id, item)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_CALLBACK_ERROR, guild_id)
