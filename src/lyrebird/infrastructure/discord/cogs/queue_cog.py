"""Slash-command cog for queue management: view, move, swap, remove, clear, shuffle."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from lyrebird.application.services.pagination import PaginationController
from lyrebird.domain.music.value_objects import PageStatus
from lyrebird.domain.shared.exceptions import DomainError
from lyrebird.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from lyrebird.infrastructure.discord.guards.voice_guards import (
    require_session,
    send_ephemeral,
    send_reply,
)
from lyrebird.infrastructure.discord.views.queue_view import QueuePaginationView
from lyrebird.utils.reply import format_queue_page, truncate

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class QueueCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._pagers: set[asyncio.Task[object]] = set()

    async def cog_unload(self) -> None:
        for task in list(self._pagers):
            task.cancel()

    @app_commands.command(name="queue", description="Show the current queue.")
    @app_commands.describe(page="Page number to start on")
    async def queue(
        self, interaction: discord.Interaction, page: app_commands.Range[int, 1] = 1
    ) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        pagination = self.container.settings.pagination
        playback = self.container.playback_service
        controller = PaginationController(
            store=session.queue,
            page_size=pagination.page_size,
            timeout=pagination.timeout_seconds,
            elapsed=lambda: playback.elapsed(session.guild_id),
            initial_page=page - 1,
        )

        first = await controller.open()
        if first.status is PageStatus.EMPTY:
            controller.close()
            await send_reply(interaction, DiscordUIMessages.QUEUE_EMPTY)
            return

        view = QueuePaginationView(controller)
        await interaction.response.send_message(format_queue_page(first), view=view)
        view.set_message(await interaction.original_response())

        task = asyncio.create_task(view.run())
        self._pagers.add(task)
        task.add_done_callback(self._pagers.discard)
        logger.debug(LogTemplates.PAGINATION_STARTED, session.guild_id, controller.page)

    @app_commands.command(name="move", description="Move a queued item to another position.")
    @app_commands.describe(from_pos="Current position", to_pos="New position")
    @app_commands.rename(from_pos="from", to_pos="to")
    async def move(self, interaction: discord.Interaction, from_pos: int, to_pos: int) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            item = await session.queue.move(from_pos, to_pos)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(
            interaction,
            DiscordUIMessages.ACTION_MOVED.format(track=truncate(item.display), position=to_pos),
        )

    @app_commands.command(name="swap", description="Swap two queued items.")
    @app_commands.describe(a="First position", b="Second position")
    async def swap(self, interaction: discord.Interaction, a: int, b: int) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            await session.queue.swap(a, b)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_SWAPPED.format(a=a, b=b))

    @app_commands.command(name="remove", description="Remove a queued item.")
    @app_commands.describe(index="Position to remove")
    async def remove(self, interaction: discord.Interaction, index: int) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        try:
            item = await session.queue.remove(index)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_REMOVED.format(track=truncate(item.display)))

    @app_commands.command(name="clear", description="Stop playback and clear the queue.")
    async def clear(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        count = await session.queue.clear()
        if count == 0:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_QUEUE_ALREADY_EMPTY)
            return

        await send_reply(interaction, DiscordUIMessages.ACTION_QUEUE_CLEARED.format(count=count))

    @app_commands.command(name="shuffle", description="Shuffle the upcoming items.")
    async def shuffle(self, interaction: discord.Interaction) -> None:
        session = await require_session(interaction, self.container.session_registry)
        if session is None:
            return

        await session.queue.shuffle()
        await send_reply(interaction, DiscordUIMessages.ACTION_SHUFFLED)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(QueueCog(bot, container))
