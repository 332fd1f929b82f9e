"""
Unit Tests for Bot Lifecycle

Tests for src/lyrebird/infrastructure/discord/bot.py:
- Intents, prefix and container wiring on construction
- setup_hook: wiring, cog loading, per-guild sync
- Cog loading continues past individual failures
- The global slash-command error handler
- on_ready replays the transfer file exactly once
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import discord
import pytest
from discord.ext import commands

from lyrebird.infrastructure.discord.bot import COGS, LyrebirdBot, create_bot


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.command_prefix = "!"
    settings.sync_guild_ids = ()
    settings.restart_recover_path = None
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.set_bot = MagicMock()
    container.wire = MagicMock()
    container.restart_service.recover = AsyncMock()
    return container


@pytest.fixture
def bot(mock_container, mock_settings):
    return LyrebirdBot(container=mock_container, settings=mock_settings)


# =============================================================================
# Initialization
# =============================================================================


class TestBotInitialization:
    @pytest.mark.asyncio
    async def test_intents(self, bot):
        assert bot.intents.message_content is True
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True

    @pytest.mark.asyncio
    async def test_command_prefix(self, mock_container, mock_settings):
        mock_settings.command_prefix = "?"

        assert LyrebirdBot(container=mock_container, settings=mock_settings).command_prefix == "?"

    @pytest.mark.asyncio
    async def test_help_disabled_and_container_attached(self, bot, mock_container):
        assert bot.help_command is None
        assert bot.container is mock_container
        mock_container.set_bot.assert_called_once_with(bot)

    @pytest.mark.asyncio
    async def test_create_bot(self, mock_container, mock_settings):
        bot = create_bot(mock_container, mock_settings)

        assert isinstance(bot, LyrebirdBot)
        assert bot.settings is mock_settings


# =============================================================================
# setup_hook
# =============================================================================


class TestSetupHook:
    @pytest.mark.asyncio
    async def test_wires_container_and_loads_cogs(self, bot, mock_container):
        with patch.object(bot, "_load_cogs", new_callable=AsyncMock) as load:
            await bot.setup_hook()

        mock_container.wire.assert_called_once()
        load.assert_awaited_once()
        assert bot.tree.on_error == bot._on_app_command_error

    @pytest.mark.asyncio
    async def test_syncs_configured_guilds(self, bot, mock_settings):
        mock_settings.sync_guild_ids = (10, 20)

        with (
            patch.object(bot, "_load_cogs", new_callable=AsyncMock),
            patch.object(bot.tree, "copy_global_to") as copy,
            patch.object(bot.tree, "sync", new_callable=AsyncMock, return_value=[]) as sync,
        ):
            await bot.setup_hook()

        assert copy.call_count == 2
        assert [c.kwargs["guild"].id for c in sync.await_args_list] == [10, 20]

    @pytest.mark.asyncio
    async def test_guild_sync_failure_is_logged(self, bot, mock_settings):
        mock_settings.sync_guild_ids = (10,)
        error = discord.HTTPException(MagicMock(status=403), "Missing Access")

        with (
            patch.object(bot, "_load_cogs", new_callable=AsyncMock),
            patch.object(bot.tree, "copy_global_to"),
            patch.object(bot.tree, "sync", new_callable=AsyncMock, side_effect=error),
        ):
            await bot.setup_hook()

    @pytest.mark.asyncio
    async def test_load_cogs_continues_on_failure(self, bot):
        def load(name):
            if name.endswith("queue_cog"):
                raise commands.ExtensionFailed(name, RuntimeError("bad"))

        with patch.object(bot, "load_extension", new_callable=AsyncMock, side_effect=load) as ext:
            await bot._load_cogs()

        assert [c.args[0] for c in ext.await_args_list] == list(COGS)


# =============================================================================
# Error handler
# =============================================================================


class TestAppCommandErrorHandler:
    @pytest.mark.asyncio
    async def test_sends_ephemeral_response(self, bot):
        interaction = MagicMock()
        interaction.response.is_done.return_value = False
        interaction.response.send_message = AsyncMock()

        await bot._on_app_command_error(interaction, Exception("Test error"))

        call_args = interaction.response.send_message.call_args
        assert call_args.kwargs["ephemeral"] is True
        assert "Test error" in call_args.args[0]

    @pytest.mark.asyncio
    async def test_uses_followup_and_unwraps_original(self, bot):
        interaction = MagicMock()
        interaction.response.is_done.return_value = True
        interaction.followup.send = AsyncMock()
        error = MagicMock()
        error.original = ValueError("inner")

        await bot._on_app_command_error(interaction, error)

        assert "inner" in interaction.followup.send.call_args.args[0]

    @pytest.mark.asyncio
    async def test_send_failure_is_swallowed(self, bot):
        interaction = MagicMock()
        interaction.response.is_done.return_value = False
        interaction.response.send_message = AsyncMock(
            side_effect=discord.HTTPException(MagicMock(status=404), "Unknown interaction")
        )

        await bot._on_app_command_error(interaction, Exception("boom"))


# =============================================================================
# on_ready and recovery
# =============================================================================


class TestOnReady:
    async def _ready(self, bot):
        mock_user = MagicMock()
        mock_user.id = 123456789
        with (
            patch.object(type(bot), "user", PropertyMock(return_value=mock_user)),
            patch.object(type(bot), "guilds", PropertyMock(return_value=[MagicMock()])),
        ):
            await bot.on_ready()

    @pytest.mark.asyncio
    async def test_cold_start_does_not_recover(self, bot, mock_container):
        await self._ready(bot)

        mock_container.restart_service.recover.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_once_across_reconnects(self, bot, mock_container, mock_settings):
        mock_settings.restart_recover_path = Path("/tmp/lyrebird-transfer.json")

        await self._ready(bot)
        await self._ready(bot)

        mock_container.restart_service.recover.assert_awaited_once_with(
            Path("/tmp/lyrebird-transfer.json")
        )
