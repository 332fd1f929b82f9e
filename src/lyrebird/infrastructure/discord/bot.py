"""Main Discord bot class integrating the DI container, cog lifecycle, and restart recovery."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from lyrebird.domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

COGS = (
    "lyrebird.infrastructure.discord.cogs.voice_cog",
    "lyrebird.infrastructure.discord.cogs.playback_cog",
    "lyrebird.infrastructure.discord.cogs.queue_cog",
    "lyrebird.infrastructure.discord.cogs.admin_cog",
)


class LyrebirdBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs,
    ) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=settings.command_prefix,
            intents=intents,
            help_command=None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        self._recovered = False
        container.set_bot(self)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)

        self.container.wire()
        await self._load_cogs()
        self.tree.on_error = self._on_app_command_error

        for guild_id in self.settings.sync_guild_ids:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            try:
                synced = await self.tree.sync(guild=guild)
                logger.info(LogTemplates.BOT_SYNCED_GUILD, len(synced), guild_id)
            except discord.HTTPException as e:
                logger.warning(LogTemplates.BOT_SYNC_GUILD_FAILED, guild_id, e)

        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def _load_cogs(self) -> None:
        loaded = 0
        failed = 0

        for cog in COGS:
            try:
                await self.load_extension(cog)
                logger.info(LogTemplates.BOT_COG_LOADED, cog)
                loaded += 1
            except commands.ExtensionError as e:
                logger.exception(LogTemplates.BOT_COG_LOAD_FAILED, cog, e)
                failed += 1

        logger.info(LogTemplates.BOT_COGS_LOADED_SUMMARY, loaded, failed)

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: Exception
    ) -> None:
        """Global slash-command error handler; sends ephemeral messages to avoid channel spam."""
        original = getattr(error, "original", error)

        logger.error(
            LogTemplates.BOT_SLASH_COMMAND_ERROR,
            getattr(interaction.command, "name", "<unknown>"),
            original,
            exc_info=original,
        )

        error_msg = DiscordUIMessages.ERROR_OCCURRED.format(error=original)

        try:
            if interaction.response.is_done():
                await interaction.followup.send(error_msg, ephemeral=True)
            else:
                await interaction.response.send_message(error_msg, ephemeral=True)
        except discord.HTTPException:
            logger.warning(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)

    async def on_ready(self) -> None:
        logger.info(
            LogTemplates.BOT_READY,
            self.user,  # type: ignore
            self.user.id,  # type: ignore
        )
        logger.info(LogTemplates.BOT_CONNECTED_GUILDS, len(self.guilds))

        # on_ready fires again after every gateway reconnect.
        if self._recovered:
            return
        self._recovered = True
        await self.recover_sessions()

    async def recover_sessions(self) -> None:
        """Replay the transfer file the supervisor handed over, if any."""
        path = self.settings.restart_recover_path
        if path is None:
            return

        logger.info(LogTemplates.RECOVERY_STARTED, path)
        await self.container.restart_service.recover(path)

    async def close(self) -> None:
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)
        await super().close()
        logger.info(LogTemplates.BOT_SHUTDOWN_COMPLETE)


def create_bot(container: Container, settings: Settings) -> LyrebirdBot:
    return LyrebirdBot(container=container, settings=settings)
