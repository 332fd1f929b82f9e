"""Prefix-only owner commands: restart under the supervisor, slash-command sync."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord.ext import commands

from lyrebird.domain.shared.exceptions import DomainError
from lyrebird.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


def application_owner_id(bot: commands.Bot) -> int | None:
    app_info = bot.application
    if app_info and app_info.owner:
        return app_info.owner.id
    return None


def _is_bot_owner(ctx: commands.Context) -> bool:
    """Check if the user is the configured bot owner, or the application owner when none is set."""
    container = getattr(ctx.bot, "container", None)
    if container is None:
        return False
    return container.restart_service.is_owner(ctx.author.id, application_owner_id(ctx.bot))


def require_owner():
    """Restrict to the bot owner."""

    async def predicate(ctx: commands.Context) -> bool:
        return _is_bot_owner(ctx)

    return commands.check(predicate)


class AdminCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def _reply(self, ctx: commands.Context, content: str | None = None) -> None:
        await ctx.send(content or DiscordUIMessages.SUCCESS_GENERIC)

    async def cog_command_error(self, ctx: commands.Context, error: Exception) -> None:
        if isinstance(error, commands.CheckFailure):
            await self._reply(ctx, DiscordUIMessages.ERROR_REQUIRES_OWNER)
            return

        original = getattr(error, "original", error)
        if isinstance(original, DomainError):
            await self._reply(ctx, original.message)
            return

        logger.exception(LogTemplates.ADMIN_COMMAND_FAILED, exc_info=original)
        await self._reply(ctx, DiscordUIMessages.ERROR_COMMAND_FAILED_SEE_LOGS)

    @commands.command(name="restart", description="Restart the bot, carrying every queue over.")
    async def restart(self, ctx: commands.Context) -> None:
        restart_service = self.container.restart_service
        owner_id = application_owner_id(self.bot)

        # A refusal must leave every session untouched.
        restart_service.ensure_can_restart(ctx.author.id, owner_id)

        await self._reply(ctx, DiscordUIMessages.ACTION_RESTARTING)
        await restart_service.request_restart(ctx.author.id, owner_id)
        await self.bot.close()

    @commands.command(name="sync", description="Sync slash commands.")
    @require_owner()
    async def sync(self, ctx: commands.Context, scope: str = "guild") -> None:
        if scope.strip().lower() == "global" or not ctx.guild:
            synced = await self.bot.tree.sync()
            await self._reply(ctx, DiscordUIMessages.SUCCESS_SYNCED_GLOBAL.format(count=len(synced)))
            return

        self.bot.tree.copy_global_to(guild=ctx.guild)
        synced = await self.bot.tree.sync(guild=ctx.guild)
        await self._reply(ctx, DiscordUIMessages.SUCCESS_SYNCED_GUILD.format(count=len(synced)))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(AdminCog(bot, container))
