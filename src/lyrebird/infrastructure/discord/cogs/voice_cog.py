"""Slash-command cog for the voice connection: join, leave, deafen, undeafen."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from lyrebird.domain.shared.exceptions import DomainError
from lyrebird.domain.shared.messages import DiscordUIMessages, ErrorMessages
from lyrebird.infrastructure.discord.guards.voice_guards import (
    get_member,
    member_channel_id,
    require_session,
    send_ephemeral,
    send_reply,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class VoiceCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @app_commands.command(name="join", description="Join your voice channel.")
    async def join(self, interaction: discord.Interaction) -> None:
        member = await get_member(interaction)
        if member is None:
            return

        assert interaction.guild is not None

        try:
            await self.container.session_registry.join(
                interaction.guild.id, member_channel_id(member), must_join=True
            )
        except DomainError as e:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_JOIN_FAILED.format(error=e.message))
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_JOINED)

    @app_commands.command(name="leave", description="Leave the voice channel and drop the queue.")
    async def leave(self, interaction: discord.Interaction) -> None:
        if not interaction.guild:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        try:
            await self.container.session_registry.leave(interaction.guild.id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_LEFT)

    @app_commands.command(name="deafen", description="Deafen the bot.")
    async def deafen(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        voice = self.container.voice_adapter
        if voice.is_deafened(session.guild_id):
            await send_ephemeral(interaction, DiscordUIMessages.STATE_ALREADY_DEAFENED)
            return

        if not await voice.set_deafened(session.guild_id, True):
            await send_ephemeral(interaction, ErrorMessages.DEAFEN_FAILED)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_DEAFENED)

    @app_commands.command(name="undeafen", description="Undeafen the bot.")
    async def undeafen(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        if not await self.container.voice_adapter.set_deafened(session.guild_id, False):
            await send_ephemeral(interaction, ErrorMessages.UNDEAFEN_FAILED)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_UNDEAFENED)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(VoiceCog(bot, container))
