"""Multi-select menu over keyword search results."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

import discord

from lyrebird.domain.shared.messages import DiscordUIMessages, LogTemplates
from lyrebird.infrastructure.discord.views.base_view import BaseInteractiveView
from lyrebird.utils.reply import truncate

if TYPE_CHECKING:
    from ....application.interfaces.audio_resolver import SearchResult

logger = logging.getLogger(__name__)

SEARCH_SELECT_TIMEOUT: Final[float] = 60.0
SELECT_LABEL_MAX: Final[int] = 100


class SearchSelectView(BaseInteractiveView):
    """Collects one pick of any number of results, then removes itself.

    ``selected`` holds the picks in the order Discord reports them and stays
    empty when the view times out.
    """

    def __init__(self, results: list[SearchResult], *, timeout: float = SEARCH_SELECT_TIMEOUT) -> None:
        super().__init__(timeout=timeout)
        self.results = results
        self.selected: list[SearchResult] = []

        options = [
            discord.SelectOption(
                label=truncate(f"{i + 1} - {result.title_or_url}", SELECT_LABEL_MAX),
                value=str(i),
            )
            for i, result in enumerate(results)
        ]
        select = discord.ui.Select(
            placeholder=DiscordUIMessages.SEARCH_PLACEHOLDER,
            min_values=1,
            max_values=len(options),
            options=options,
        )
        select.callback = self.select_callback
        self.add_item(select)

    async def select_callback(self, interaction: discord.Interaction) -> None:
        values = (interaction.data or {}).get("values", [])
        self.selected = [self.results[int(value)] for value in values]
        await interaction.response.edit_message(view=None)
        self.stop()

    async def on_timeout(self) -> None:
        if self._message is None:
            return
        try:
            await self._message.edit(view=None)
        except discord.HTTPException as e:
            logger.debug(LogTemplates.SEARCH_VIEW_CLEANUP_FAILED, self._message.id, e)
