"""Voice channel guard functions for Discord cogs."""

from lyrebird.infrastructure.discord.guards.voice_guards import (
    autojoin_session,
    get_member,
    member_channel_id,
    require_session,
    send_ephemeral,
    send_reply,
)

__all__ = [
    "autojoin_session",
    "get_member",
    "member_channel_id",
    "require_session",
    "send_ephemeral",
    "send_reply",
]
