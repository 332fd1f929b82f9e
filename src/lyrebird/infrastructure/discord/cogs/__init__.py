"""Discord cogs - command handlers."""

from lyrebird.infrastructure.discord.cogs.admin_cog import AdminCog
from lyrebird.infrastructure.discord.cogs.playback_cog import PlaybackCog
from lyrebird.infrastructure.discord.cogs.queue_cog import QueueCog
from lyrebird.infrastructure.discord.cogs.voice_cog import VoiceCog

__all__ = [
    "VoiceCog",
    "PlaybackCog",
    "QueueCog",
    "AdminCog",
]
