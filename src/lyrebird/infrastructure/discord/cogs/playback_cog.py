"""Slash-command cog for playback: play, splay, search, skip, pause, resume, loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from lyrebird.domain.music.entities import ResolveSource, SourceDescriptor
from lyrebird.domain.music.value_objects import ItemState
from lyrebird.domain.shared.exceptions import DomainError
from lyrebird.domain.shared.messages import DiscordUIMessages, ErrorMessages
from lyrebird.infrastructure.discord.guards.voice_guards import (
    autojoin_session,
    require_session,
    send_ephemeral,
    send_reply,
)
from lyrebird.infrastructure.discord.views.search_view import SearchSelectView
from lyrebird.utils.reply import format_search_results

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class PlaybackCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _enqueue(self, interaction: discord.Interaction, source: SourceDescriptor) -> None:
        # Acknowledged before joining; every reply below goes through the followup.
        await interaction.response.defer(thinking=True)
        session = await autojoin_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            item, position = await self.container.playback_service.enqueue(session.guild_id, source)
        except DomainError as e:
            await interaction.followup.send(e.message, ephemeral=True)
            return

        if item.state is ItemState.ERRORED:
            await interaction.followup.send(
                DiscordUIMessages.ERROR_PLAYBACK_FAILED.format(track=item.display), ephemeral=True
            )
        elif position == 0:
            await interaction.followup.send(DiscordUIMessages.ACTION_NOW_PLAYING.format(track=item.display))
        else:
            await interaction.followup.send(
                DiscordUIMessages.ACTION_QUEUED.format(track=item.display, position=position)
            )

    @app_commands.command(name="play", description="Play audio from a URL.")
    @app_commands.describe(url="Link to a video or audio page")
    async def play(self, interaction: discord.Interaction, url: str) -> None:
        url = url.strip()
        if not url.startswith("http"):
            await send_ephemeral(interaction, ErrorMessages.PLAY_REQUIRES_URL)
            return

        await self._enqueue(interaction, ResolveSource.url(url))

    @app_commands.command(name="splay", description="Search and play the first result.")
    @app_commands.describe(query="Search terms")
    async def splay(self, interaction: discord.Interaction, query: str) -> None:
        query = query.strip()
        if not query:
            await send_ephemeral(interaction, ErrorMessages.SEARCH_REQUIRES_TERMS)
            return

        await self._enqueue(interaction, ResolveSource.search(query))

    @app_commands.command(name="search", description="Search and pick any number of results to queue.")
    @app_commands.describe(query="Search terms")
    async def search(self, interaction: discord.Interaction, query: str) -> None:
        query = query.strip()
        if not query:
            await send_ephemeral(interaction, ErrorMessages.SEARCH_REQUIRES_TERMS)
            return

        await interaction.response.defer(thinking=True)
        session = await autojoin_session(interaction, self.container.session_registry)
        if session is None:
            return

        playback = self.container.playback_service
        try:
            results = await playback.search(query)
        except DomainError as e:
            await interaction.followup.send(e.message, ephemeral=True)
            return

        if not results:
            await interaction.followup.send(ErrorMessages.NO_RESULTS.format(arg=query), ephemeral=True)
            return

        view = SearchSelectView(results)
        message = await interaction.followup.send(format_search_results(query, results), view=view, wait=True)
        view.set_message(message)

        timed_out = await view.wait()
        if timed_out or not view.selected:
            return

        sources = [ResolveSource.url(result.url) for result in view.selected]
        try:
            batch = await playback.enqueue_many(session.guild_id, sources)
        except DomainError as e:
            await interaction.followup.send(e.message, ephemeral=True)
            return

        await interaction.followup.send(
            DiscordUIMessages.ACTION_BATCH_QUEUED.format(queued=len(batch.queued), total=len(sources))
        )

    @app_commands.command(name="skip", description="Skip the current item.")
    async def skip(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            await session.queue.skip()
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_SKIPPED)

    @app_commands.command(name="pause", description="Pause playback.")
    async def pause(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            await session.queue.pause()
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_PAUSED)

    @app_commands.command(name="resume", description="Resume playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            await session.queue.resume()
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_RESUMED)

    @app_commands.command(name="loop", description="Toggle looping of the current item.")
    async def loop(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            looping = await session.queue.toggle_loop()
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(
            interaction,
            DiscordUIMessages.ACTION_LOOP_ON if looping else DiscordUIMessages.ACTION_LOOP_OFF,
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(PlaybackCog(bot, container))
