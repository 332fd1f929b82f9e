"""Restart Application Service - hands live sessions over to the next worker process.

A restart is only possible under the supervisor (``lyrebird-runner``): the
worker drains every session into a transfer file, prints the signal line on
stdout and exits. The supervisor relaunches it with ``RESTART_RECOVER_PATH``
pointing at the file, and :meth:`RestartService.recover` replays it.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from lyrebird.domain.shared.exceptions import (
    DomainError,
    JoinError,
    RestartFailedError,
    RestartNotAllowedError,
    SnapshotFormatError,
)
from lyrebird.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from lyrebird.domain.music.entities import SessionRecord

    from ...infrastructure.persistence.snapshot_codec import SnapshotCodec
    from .playback_service import PlaybackService
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)

RESTART_SIGNAL_PREFIX = "!restart,path="


@dataclass
class ReplayReport:
    rooms_joined: int = 0
    rooms_failed: int = 0
    items_enqueued: int = 0
    items_failed: int = 0


class RestartService:
    def __init__(
        self,
        *,
        registry: SessionRegistry,
        playback: PlaybackService,
        codec: SnapshotCodec,
        is_run_by_runner: bool,
        bot_owner_id: int | None = None,
        replay_item_timeout: float = 30.0,
        transfer_directory: Path | None = None,
        output: TextIO | None = None,
    ) -> None:
        self._registry = registry
        self._playback = playback
        self._codec = codec
        self._is_run_by_runner = is_run_by_runner
        self._bot_owner_id = bot_owner_id
        self._replay_item_timeout = replay_item_timeout
        self._transfer_directory = transfer_directory
        self._output = output

    def is_owner(self, user_id: int, application_owner_id: int | None = None) -> bool:
        """The configured owner wins; the application owner is the fallback."""
        if self._bot_owner_id is not None:
            return user_id == self._bot_owner_id
        return application_owner_id is not None and user_id == application_owner_id

    def ensure_can_restart(self, user_id: int, application_owner_id: int | None = None) -> None:
        if not self.is_owner(user_id, application_owner_id):
            raise RestartNotAllowedError(ErrorMessages.RESTART_NOT_OWNER)
        if not self._is_run_by_runner:
            raise RestartNotAllowedError(ErrorMessages.RESTART_NOT_SUPERVISED)

    async def request_restart(
        self, user_id: int, application_owner_id: int | None = None
    ) -> Path:
        """Drain every session, write the transfer file and print the signal line.

        The caller is expected to close the bot afterwards; the supervisor kills
        the process as soon as it reads the line anyway.
        """
        self.ensure_can_restart(user_id, application_owner_id)
        logger.info(LogTemplates.RESTART_REQUESTED, user_id)

        records = await self._registry.drain_all()
        try:
            path = self._codec.write_transfer_file(records, self._transfer_directory)
        except OSError as e:
            logger.error(LogTemplates.RESTART_WRITE_FAILED, len(records), e)
            await self._registry.reopen()
            await self.replay(records)
            raise RestartFailedError(ErrorMessages.RESTART_WRITE_FAILED.format(error=e)) from e

        out = self._output or sys.stdout
        print(f"{RESTART_SIGNAL_PREFIX}{path}", file=out, flush=True)
        logger.info(LogTemplates.RESTART_SIGNALLED, path)
        return path

    async def recover(self, path: Path) -> ReplayReport:
        """Consume the transfer file at *path* and replay it. Corruption starts cold."""
        try:
            records = self._codec.consume_transfer_file(path)
        except SnapshotFormatError as e:
            logger.error(LogTemplates.RECOVERY_FILE_INVALID, path, e.message)
            return ReplayReport()
        return await self.replay(records)

    async def replay(self, records: list[SessionRecord]) -> ReplayReport:
        """Rejoin each room and re-enqueue its sources in their original order."""
        report = ReplayReport()
        for record in records:
            try:
                await self._registry.autojoin(record.room, record.channel)
            except JoinError as e:
                report.rooms_failed += 1
                logger.warning(LogTemplates.REPLAY_JOIN_FAILED, record.room, record.channel, e.message)
                continue
            report.rooms_joined += 1

            for source in record.queue:
                try:
                    async with asyncio.timeout(self._replay_item_timeout):
                        await self._playback.enqueue(record.room, source)
                except DomainError as e:
                    report.items_failed += 1
                    logger.warning(LogTemplates.REPLAY_ITEM_FAILED, source.arg, record.room, e.message)
                except TimeoutError:
                    report.items_failed += 1
                    logger.warning(
                        LogTemplates.REPLAY_ITEM_TIMEOUT, source.arg, record.room, self._replay_item_timeout
                    )
                else:
                    report.items_enqueued += 1

        logger.info(
            LogTemplates.REPLAY_FINISHED,
            report.rooms_joined,
            report.items_enqueued,
            report.rooms_failed,
            report.items_failed,
        )
        return report
