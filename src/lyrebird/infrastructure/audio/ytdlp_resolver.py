"""AudioResolver implementation using yt-dlp for URL and search resolution."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from yt_dlp import YoutubeDL
from yt_dlp.utils import YoutubeDLError

from lyrebird.application.interfaces.audio_resolver import (
    SEARCH_RESULT_LIMIT,
    AudioResolver,
    ResolvedAudio,
    SearchResult,
)
from lyrebird.config.settings import AudioSettings
from lyrebird.domain.music.entities import SourceDescriptor, TrackMetadata
from lyrebird.domain.shared.exceptions import ResolutionError
from lyrebird.domain.shared.messages import ErrorMessages, LogTemplates
from lyrebird.domain.shared.types import HttpUrlStr, NonEmptyStr, PositiveInt

logger = logging.getLogger(__name__)

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
MAX_DURATION_SECONDS: Final[int] = 86_400
LOG_ARG_TRUNCATE: Final[int] = 60
SEARCH_SCHEME: Final[str] = "ytsearch"


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class AudioFormatInfo(BaseModel):
    """A single audio format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp extraction result.

    Extra fields from yt-dlp are ignored and garbage values are coerced to
    None by the before-validators.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr | None = None
    duration: int | None = None
    artist: NonEmptyStr | None = None
    creator: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator(
        "webpage_url", "url", "title",
        "artist", "creator", "uploader", "channel",
        mode="before",
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        """Coerce to an int within a day; None for garbage values."""
        if v is None:
            return None
        try:
            val = int(v)
        except (TypeError, ValueError):
            return None
        return val if 0 <= val <= MAX_DURATION_SECONDS else None

    @property
    def stream_url(self) -> str | None:
        if self.url:
            return self.url
        audio_formats = [f for f in self.formats if f.acodec != "none" and f.url]
        return audio_formats[-1].url if audio_formats else None

    @property
    def credited_artist(self) -> str | None:
        return self.artist or self.creator or self.uploader or self.channel

    def to_metadata(self) -> TrackMetadata:
        return TrackMetadata(
            title=self.title[:500] if self.title else None,
            artist=self.credited_artist,
            duration_seconds=self.duration,
            webpage_url=self.webpage_url,
        )


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: bool = False


class YtDlpResolver(AudioResolver):
    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _extract_info_sync(self, arg: str) -> YtDlpTrackInfo | None:
        """Blocking extraction; search arguments yield the first entry."""
        with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
            data = ydl.extract_info(arg, download=False)

        if not isinstance(data, dict):
            return None

        entries = data.get("entries")
        if entries is not None:
            first = next((e for e in entries if isinstance(e, dict)), None)
            return YtDlpTrackInfo.model_validate(first) if first else None

        return YtDlpTrackInfo.model_validate(data)

    async def resolve(self, source: SourceDescriptor) -> ResolvedAudio:
        arg = source.arg
        try:
            info = await asyncio.to_thread(self._extract_info_sync, arg)
        except (YoutubeDLError, ValidationError) as e:
            logger.warning(LogTemplates.YTDLP_FAILED_RESOLVE, arg[:LOG_ARG_TRUNCATE], e)
            raise ResolutionError(arg) from e

        if info is None:
            raise ResolutionError(arg, ErrorMessages.NO_RESULTS.format(arg=arg))

        stream_url = info.stream_url
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, arg[:LOG_ARG_TRUNCATE])
            raise ResolutionError(arg, ErrorMessages.NO_STREAM_URL.format(arg=arg))

        return ResolvedAudio(metadata=info.to_metadata(), stream_url=stream_url)

    def _search_sync(self, terms: str, limit: int) -> list[SearchResult]:
        """Blocking flat search; entries carry page URLs, not streams."""
        opts = self._opts.model_copy(update={"extract_flat": True})
        with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
            data = ydl.extract_info(f"{SEARCH_SCHEME}{limit}:{terms}", download=False)

        if not isinstance(data, dict):
            return []

        results: list[SearchResult] = []
        for entry in data.get("entries") or []:
            if not isinstance(entry, dict):
                continue
            info = YtDlpTrackInfo.model_validate(entry)
            url = info.webpage_url or info.url
            if not url or not url.startswith("http"):
                continue
            results.append(SearchResult(url=url, title=info.title, artist=info.credited_artist))
        return results

    async def search(self, terms: str, limit: int = SEARCH_RESULT_LIMIT) -> list[SearchResult]:
        try:
            results = await asyncio.to_thread(self._search_sync, terms, limit)
        except (YoutubeDLError, ValidationError) as e:
            logger.warning(LogTemplates.YTDLP_FAILED_SEARCH, terms[:LOG_ARG_TRUNCATE], e)
            raise ResolutionError(terms) from e

        logger.debug(LogTemplates.YTDLP_SEARCH_FINISHED, terms[:LOG_ARG_TRUNCATE], len(results))
        return results
