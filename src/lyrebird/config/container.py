"""Dependency Injection Container

Builds the worker's object graph lazily. Components are created on first
access and cached, and the container itself is attached to the bot so cogs
can receive it explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import AudioResolver
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.playback_service import PlaybackService
    from ..application.services.restart_service import RestartService
    from ..application.services.session_registry import SessionRegistry
    from ..infrastructure.persistence.snapshot_codec import SnapshotCodec
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Anything may be pre-seeded (tests hand in fakes for the voice adapter
    and resolver); whatever is left unset is built on first access.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _voice_adapter: VoiceAdapter | None = None
    _audio_resolver: AudioResolver | None = None
    _snapshot_codec: SnapshotCodec | None = None

    # Application services
    _session_registry: SessionRegistry | None = None
    _playback_service: PlaybackService | None = None
    _restart_service: RestartService | None = None

    def set_bot(self, bot: Bot) -> None:
        self._bot = bot

    @property
    def bot(self) -> Bot:
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure ===

    @property
    def voice_adapter(self) -> VoiceAdapter:
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(self.bot, self.settings.audio)
        return self._voice_adapter

    @property
    def audio_resolver(self) -> AudioResolver:
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio)
        return self._audio_resolver

    @property
    def snapshot_codec(self) -> SnapshotCodec:
        if self._snapshot_codec is None:
            from ..infrastructure.persistence.snapshot_codec import SnapshotCodec

            self._snapshot_codec = SnapshotCodec()
        return self._snapshot_codec

    # === Application services ===

    @property
    def session_registry(self) -> SessionRegistry:
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            self._session_registry = SessionRegistry(self.voice_adapter)
        return self._session_registry

    @property
    def playback_service(self) -> PlaybackService:
        """The playback service registers itself as the voice adapter's track-end callback."""
        if self._playback_service is None:
            from ..application.services.playback_service import PlaybackService

            self._playback_service = PlaybackService(
                registry=self.session_registry,
                voice_adapter=self.voice_adapter,
                audio_resolver=self.audio_resolver,
            )
        return self._playback_service

    @property
    def restart_service(self) -> RestartService:
        if self._restart_service is None:
            from ..application.services.restart_service import RestartService

            self._restart_service = RestartService(
                registry=self.session_registry,
                playback=self.playback_service,
                codec=self.snapshot_codec,
                is_run_by_runner=self.settings.is_supervised,
                bot_owner_id=self.settings.bot_owner_id,
                replay_item_timeout=self.settings.restart.replay_item_timeout_seconds,
                transfer_directory=self.settings.restart.transfer_directory,
            )
        return self._restart_service

    def wire(self) -> None:
        """Build the playback service eagerly so track-end callbacks are routed from the start."""
        _ = self.playback_service
        logger.debug(LogTemplates.BOT_CONTAINER_INITIALIZED)
