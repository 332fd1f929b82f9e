"""Reusable guard functions for Discord slash commands.

Free functions that accept explicit dependencies rather than relying on a
specific cog instance, so every cog can share them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from lyrebird.domain.shared.exceptions import JoinError
from lyrebird.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from ....application.services.session_registry import Session, SessionRegistry


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def send_reply(interaction: discord.Interaction, message: str) -> None:
    """Send a public status reply."""
    if interaction.response.is_done():
        await interaction.followup.send(message)
    else:
        await interaction.response.send_message(message)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member. Returns None with error on failure."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_VERIFY_VOICE_FAILED)
        return None

    return user


def member_channel_id(member: discord.Member) -> int | None:
    """The voice channel the member is sitting in, if any."""
    if member.voice is None or member.voice.channel is None:
        return None
    return member.voice.channel.id


async def require_session(
    interaction: discord.Interaction, registry: SessionRegistry
) -> Session | None:
    """Look up the guild's session without joining. Replies and returns None when absent."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    session = registry.get(interaction.guild.id)
    if session is None:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NOT_IN_VOICE)
    return session


async def autojoin_session(
    interaction: discord.Interaction, registry: SessionRegistry
) -> Session | None:
    """Return the guild's session, joining the member's channel if there is none."""
    member = await get_member(interaction)
    if member is None:
        return None

    assert interaction.guild is not None

    try:
        return await registry.autojoin(interaction.guild.id, member_channel_id(member))
    except JoinError as e:
        await send_ephemeral(interaction, DiscordUIMessages.ERROR_AUTOJOIN_FAILED.format(error=e.message))
        return None
