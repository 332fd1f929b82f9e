"""
Unit Tests for RestartService

Tests for:
- Owner and supervisor checks
- request_restart draining sessions and printing the signal line
- recover / replay rebuilding sessions in order, tolerating per-item failures
"""

from __future__ import annotations

import asyncio
import io
from pathlib import Path

import pytest
from conftest import FakeResolver, FakeVoiceAdapter

from lyrebird.application.services.playback_service import PlaybackService
from lyrebird.application.services.restart_service import (
    RESTART_SIGNAL_PREFIX,
    RestartService,
)
from lyrebird.application.services.session_registry import SessionRegistry
from lyrebird.domain.music.entities import ResolveSource, SessionRecord
from lyrebird.domain.shared.exceptions import RestartFailedError, RestartNotAllowedError
from lyrebird.domain.shared.messages import ErrorMessages
from lyrebird.infrastructure.persistence.snapshot_codec import SnapshotCodec

OWNER = 42


def _src(name: str) -> ResolveSource:
    return ResolveSource.url(f"https://example.com/{name}")


def _service(registry, playback, **kwargs) -> RestartService:
    kwargs.setdefault("is_run_by_runner", True)
    kwargs.setdefault("bot_owner_id", OWNER)
    return RestartService(registry=registry, playback=playback, codec=SnapshotCodec(), **kwargs)


def _worker() -> tuple[SessionRegistry, PlaybackService, FakeVoiceAdapter, FakeResolver]:
    voice = FakeVoiceAdapter()
    resolver = FakeResolver()
    registry = SessionRegistry(voice)
    playback = PlaybackService(registry=registry, voice_adapter=voice, audio_resolver=resolver)
    return registry, playback, voice, resolver


# =============================================================================
# Authorization
# =============================================================================


class TestAuthorization:
    def test_configured_owner_wins(self, registry, playback):
        service = _service(registry, playback)

        assert service.is_owner(OWNER, application_owner_id=7)
        assert not service.is_owner(7, application_owner_id=7)

    def test_application_owner_fallback(self, registry, playback):
        service = _service(registry, playback, bot_owner_id=None)

        assert service.is_owner(7, application_owner_id=7)
        assert not service.is_owner(8, application_owner_id=7)
        assert not service.is_owner(7)

    def test_non_owner_refused(self, registry, playback):
        service = _service(registry, playback)

        with pytest.raises(RestartNotAllowedError) as exc_info:
            service.ensure_can_restart(7)

        assert exc_info.value.message == ErrorMessages.RESTART_NOT_OWNER

    def test_unsupervised_refused(self, registry, playback):
        service = _service(registry, playback, is_run_by_runner=False)

        with pytest.raises(RestartNotAllowedError) as exc_info:
            service.ensure_can_restart(OWNER)

        assert exc_info.value.message == ErrorMessages.RESTART_NOT_SUPERVISED

    @pytest.mark.asyncio
    async def test_refusal_leaves_sessions_untouched(self, registry, playback):
        await registry.join(111, 333)
        await playback.enqueue(111, _src("A"))
        output = io.StringIO()
        service = _service(registry, playback, is_run_by_runner=False, output=output)

        with pytest.raises(RestartNotAllowedError):
            await service.request_restart(OWNER)

        assert 111 in registry
        assert await registry.require(111).queue.length() == 1
        assert output.getvalue() == ""


# =============================================================================
# Hand-over
# =============================================================================


class TestHandOver:
    @pytest.mark.asyncio
    async def test_request_restart_prints_signal_line(self, registry, playback, tmp_path):
        await registry.join(111, 333)
        await playback.enqueue(111, _src("A"))
        output = io.StringIO()
        service = _service(registry, playback, output=output, transfer_directory=tmp_path)

        path = await service.request_restart(OWNER)

        assert output.getvalue() == f"{RESTART_SIGNAL_PREFIX}{path}\n"
        assert path.exists()
        assert len(registry) == 0
        assert registry.is_draining

    @pytest.mark.asyncio
    async def test_drain_and_replay_across_workers(self, tmp_path):
        old_registry, old_playback, _, _ = _worker()
        await old_registry.join(111, 333)
        await old_registry.join(222, 444)
        for name in ("A", "B", "C"):
            await old_playback.enqueue(111, _src(name))
        await old_playback.enqueue(222, _src("D"))

        old_service = _service(
            old_registry, old_playback, output=io.StringIO(), transfer_directory=tmp_path
        )
        path = await old_service.request_restart(OWNER)

        registry, playback, voice, resolver = _worker()
        resolver.failing.add("https://example.com/B")
        service = _service(registry, playback)

        report = await service.recover(path)

        assert (report.rooms_joined, report.items_enqueued) == (2, 3)
        assert (report.rooms_failed, report.items_failed) == (0, 1)
        assert not path.exists()

        first = await registry.require(111).queue.snapshot()
        second = await registry.require(222).queue.snapshot()
        assert [item.source.arg for item in first] == [
            "https://example.com/A",
            "https://example.com/C",
        ]
        assert [item.source.arg for item in second] == ["https://example.com/D"]
        assert voice.channels == {111: 333, 222: 444}
        assert voice.current[111] is first[0]

    @pytest.mark.asyncio
    async def test_recover_corrupt_file_starts_cold(self, registry, playback, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("garbage")
        service = _service(registry, playback)

        report = await service.recover(path)

        assert report.rooms_joined == 0
        assert len(registry) == 0
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_recover_missing_file(self, registry, playback, tmp_path):
        service = _service(registry, playback)

        report = await service.recover(Path(tmp_path / "missing.json"))

        assert report.rooms_joined == 0

    @pytest.mark.asyncio
    async def test_unwritable_transfer_file_puts_sessions_back(self, registry, playback, voice, tmp_path):
        await registry.join(111, 333)
        for name in ("A", "B"):
            await playback.enqueue(111, _src(name))
        output = io.StringIO()
        service = _service(
            registry, playback, output=output, transfer_directory=tmp_path / "missing-dir"
        )

        with pytest.raises(RestartFailedError):
            await service.request_restart(OWNER)

        assert output.getvalue() == ""
        assert not registry.is_draining
        queue = await registry.require(111).queue.snapshot()
        assert [item.source.arg for item in queue] == [
            "https://example.com/A",
            "https://example.com/B",
        ]
        assert voice.channels == {111: 333}

        await registry.join(222, 444)
        assert 222 in registry


# =============================================================================
# Replay failures
# =============================================================================


class TestReplay:
    @pytest.mark.asyncio
    async def test_failed_join_skips_room(self, registry, playback, voice):
        voice.refuse_connect.add(444)
        service = _service(registry, playback)

        report = await service.replay(
            [
                SessionRecord(room=111, channel=333, queue=[_src("A")]),
                SessionRecord(room=222, channel=444, queue=[_src("B")]),
            ]
        )

        assert report.rooms_joined == 1
        assert report.rooms_failed == 1
        assert report.items_enqueued == 1
        assert 222 not in registry

    @pytest.mark.asyncio
    async def test_hanging_resolution_times_out(self, registry, playback, resolver):
        resolver.hanging.add("https://example.com/slow")
        service = _service(registry, playback, replay_item_timeout=0.05)

        report = await asyncio.wait_for(
            service.replay(
                [SessionRecord(room=111, channel=333, queue=[_src("slow"), _src("fast")])]
            ),
            timeout=5,
        )

        assert report.items_failed == 1
        assert report.items_enqueued == 1
        queue = await registry.require(111).queue.snapshot()
        assert [item.source.arg for item in queue] == ["https://example.com/fast"]

    @pytest.mark.asyncio
    async def test_empty_queue_record_still_rejoins(self, registry, playback):
        service = _service(registry, playback)

        report = await service.replay([SessionRecord(room=111, channel=333)])

        assert report.rooms_joined == 1
        assert 111 in registry
