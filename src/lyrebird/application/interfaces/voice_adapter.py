"""Port interface for Discord voice operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from lyrebird.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import QueueItem

TrackEndCallback = Callable[[DiscordSnowflake, "QueueItem"], Awaitable[None]]


class VoiceAdapter(ABC):
    """Interface for voice connections and the audio transport.

    Transport controls (play/stop/pause/resume) are synchronous so they can be
    issued from inside a queue mutation without releasing the queue lock.
    """

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> bool:
        """Connect to a voice channel."""
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Disconnect from voice in a guild."""
        ...

    @abstractmethod
    def play(self, guild_id: DiscordSnowflake, item: QueueItem) -> bool:
        """Start streaming a resolved item. The track-end callback fires when it finishes."""
        ...

    @abstractmethod
    def stop(self, guild_id: DiscordSnowflake) -> bool:
        """End the current item; the track-end callback still fires."""
        ...

    @abstractmethod
    def pause(self, guild_id: DiscordSnowflake) -> bool:
        """Pause current playback. False if nothing is playing."""
        ...

    @abstractmethod
    def resume(self, guild_id: DiscordSnowflake) -> bool:
        """Resume paused playback. False if not paused."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def is_playing(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def is_paused(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def elapsed_seconds(self, guild_id: DiscordSnowflake) -> float | None:
        """Playback position of the current item, or None when nothing is streaming."""
        ...

    @abstractmethod
    def get_current_channel_id(self, guild_id: DiscordSnowflake) -> DiscordSnowflake | None:
        """Get the current voice channel ID, or None if not connected."""
        ...

    @abstractmethod
    async def set_deafened(self, guild_id: DiscordSnowflake, deafened: bool) -> bool:
        ...

    @abstractmethod
    def is_deafened(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        """Set callback for when an item ends, naturally or by stop()."""
        ...
