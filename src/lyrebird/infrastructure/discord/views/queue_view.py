"""Paginated queue listing with previous / next / refresh buttons."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from lyrebird.domain.music.value_objects import (
    NavigationAction,
    NavigationEvent,
    PaginationState,
)
from lyrebird.domain.shared.messages import LogTemplates
from lyrebird.infrastructure.discord.views.base_view import BaseInteractiveView
from lyrebird.utils.reply import format_queue_page

if TYPE_CHECKING:
    from ....application.services.pagination import PaginationController, QueuePage

logger = logging.getLogger(__name__)


class QueuePaginationView(BaseInteractiveView):
    """Buttons feed decoded navigation events to a :class:`PaginationController`.

    The view has no timeout of its own: the controller's lease decides when
    listening stops, and the buttons are disabled once it does.
    """

    def __init__(self, controller: PaginationController) -> None:
        super().__init__(timeout=None)
        self.controller = controller
        self._events: asyncio.Queue[NavigationEvent] = asyncio.Queue()
        self._detach_task: asyncio.Task[None] | None = None

    def set_message(self, message: discord.Message) -> None:
        super().set_message(message)
        self.controller.bind_message(message.id)

    async def _push(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.defer()
        self._events.put_nowait(NavigationEvent.decode(button.custom_id or ""))

    @discord.ui.button(
        label="◀ Previous",
        style=discord.ButtonStyle.secondary,
        custom_id=NavigationAction.PREVIOUS.value,
    )
    async def previous_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._push(interaction, button)

    @discord.ui.button(
        label="Next ▶",
        style=discord.ButtonStyle.secondary,
        custom_id=NavigationAction.NEXT.value,
    )
    async def next_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._push(interaction, button)

    @discord.ui.button(
        label="\U0001f504 Refresh",
        style=discord.ButtonStyle.primary,
        custom_id=NavigationAction.REFRESH.value,
    )
    async def refresh(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._push(interaction, button)

    async def run(self) -> PaginationState:
        return await self.controller.run(self._events.get, self._render, self._detach)

    async def _render(self, page: QueuePage) -> None:
        if self._message is None:
            return
        try:
            await self._message.edit(content=format_queue_page(page), view=self)
        except discord.NotFound:
            self.controller.close()
        except discord.HTTPException as e:
            logger.warning(LogTemplates.PAGINATION_RENDER_FAILED, self._message.id, e)

    def _detach(self, state: PaginationState) -> None:
        self._disable_buttons()
        self.stop()
        if self._message is not None and state is PaginationState.EXPIRED:
            self._detach_task = asyncio.get_running_loop().create_task(self._show_disabled())

    async def _show_disabled(self) -> None:
        if self._message is None:
            return
        try:
            await self._message.edit(view=self)
        except discord.HTTPException as e:
            logger.debug(LogTemplates.PAGINATION_RENDER_FAILED, self._message.id, e)
