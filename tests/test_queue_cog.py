"""Tests for QueueCog: the paginated queue view and queue reordering commands."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_item, sent

from lyrebird.domain.shared.messages import DiscordUIMessages, ErrorMessages
from lyrebird.infrastructure.discord.cogs.queue_cog import QueueCog
from lyrebird.infrastructure.discord.views.queue_view import QueuePaginationView


@pytest.fixture
def cog(container):
    return QueueCog(MagicMock(), container)


async def _fill(container, count: int):
    session = await container.session_registry.join(111, 333)
    items = [make_item(f"T{i}") for i in range(count)]
    await session.queue.modify(lambda live: live.extend(items))
    return session


# =============================================================================
# /queue
# =============================================================================


class TestQueueView:
    @pytest.mark.asyncio
    async def test_without_session(self, cog, interaction):
        await cog.queue.callback(cog, interaction, page=1)

        assert sent(interaction.response.send_message) == DiscordUIMessages.STATE_NOT_IN_VOICE

    @pytest.mark.asyncio
    async def test_empty_queue(self, cog, container, interaction):
        await container.session_registry.join(111, 333)

        await cog.queue.callback(cog, interaction, page=1)

        assert sent(interaction.response.send_message) == "queue is empty"
        assert not cog._pagers

    @pytest.mark.asyncio
    async def test_opens_clamped_page_with_view(self, cog, container, interaction):
        await _fill(container, 25)

        await cog.queue.callback(cog, interaction, page=9)

        kwargs = interaction.response.send_message.call_args.kwargs
        content = interaction.response.send_message.call_args.args[0]
        assert isinstance(kwargs["view"], QueuePaginationView)
        assert content.splitlines()[0] == "20: Artist - T20"
        assert content.splitlines()[-1] == "page 3 of 3"
        assert len(cog._pagers) == 1

        await cog.cog_unload()
        await asyncio.gather(*cog._pagers, return_exceptions=True)
        assert kwargs["view"].is_finished()

    @pytest.mark.asyncio
    async def test_button_event_edits_message(self, cog, container, interaction):
        await _fill(container, 25)
        await cog.queue.callback(cog, interaction, page=1)
        view = interaction.response.send_message.call_args.kwargs["view"]
        message = await interaction.original_response()

        button_interaction = MagicMock()
        button_interaction.response.defer = AsyncMock()
        await view.next_page.callback(button_interaction)
        for _ in range(10):
            await asyncio.sleep(0)

        content = message.edit.call_args.kwargs["content"]
        assert content.splitlines()[0] == "10: Artist - T10"
        assert content.splitlines()[-1] == "page 2 of 3"

        await cog.cog_unload()
        await asyncio.gather(*cog._pagers, return_exceptions=True)


# =============================================================================
# Reordering
# =============================================================================


class TestReorderCommands:
    @pytest.mark.asyncio
    async def test_move(self, cog, container, interaction):
        session = await _fill(container, 3)

        await cog.move.callback(cog, interaction, from_pos=2, to_pos=1)

        assert sent(interaction.response.send_message) == DiscordUIMessages.ACTION_MOVED.format(
            track="Artist - T2", position=1
        )
        titles = [item.metadata.title for item in await session.queue.snapshot()]
        assert titles == ["T0", "T2", "T1"]

    @pytest.mark.asyncio
    async def test_move_current_rejected(self, cog, container, interaction):
        await _fill(container, 3)

        await cog.move.callback(cog, interaction, from_pos=0, to_pos=1)

        assert sent(interaction.response.send_message) == ErrorMessages.CANNOT_MOVE_CURRENT
        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_swap(self, cog, container, interaction):
        await _fill(container, 3)

        await cog.swap.callback(cog, interaction, a=1, b=2)

        assert sent(interaction.response.send_message) == DiscordUIMessages.ACTION_SWAPPED.format(a=1, b=2)

    @pytest.mark.asyncio
    async def test_remove(self, cog, container, interaction):
        await _fill(container, 3)

        await cog.remove.callback(cog, interaction, index=1)

        assert sent(interaction.response.send_message) == DiscordUIMessages.ACTION_REMOVED.format(
            track="Artist - T1"
        )

    @pytest.mark.asyncio
    async def test_remove_out_of_range(self, cog, container, interaction):
        await _fill(container, 3)

        await cog.remove.callback(cog, interaction, index=7)

        assert sent(interaction.response.send_message) == "No item at index 7"

    @pytest.mark.asyncio
    async def test_clear(self, cog, container, interaction):
        await _fill(container, 4)

        await cog.clear.callback(cog, interaction)

        assert sent(interaction.response.send_message) == DiscordUIMessages.ACTION_QUEUE_CLEARED.format(count=4)

    @pytest.mark.asyncio
    async def test_clear_empty(self, cog, container, interaction):
        await container.session_registry.join(111, 333)

        await cog.clear.callback(cog, interaction)

        assert sent(interaction.response.send_message) == DiscordUIMessages.STATE_QUEUE_ALREADY_EMPTY

    @pytest.mark.asyncio
    async def test_shuffle(self, cog, container, interaction):
        session = await _fill(container, 6)

        await cog.shuffle.callback(cog, interaction)

        assert sent(interaction.response.send_message) == DiscordUIMessages.ACTION_SHUFFLED
        assert (await session.queue.snapshot())[0].metadata.title == "T0"
