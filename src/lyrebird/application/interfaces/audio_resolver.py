"""Port interface for resolving source descriptors to playable audio."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from lyrebird.domain.music.entities import SourceDescriptor, TrackMetadata
from lyrebird.domain.shared.types import NonEmptyStr

SEARCH_RESULT_LIMIT = 10


class ResolvedAudio(BaseModel):
    """Result of resolving one source descriptor."""

    model_config = ConfigDict(frozen=True)

    metadata: TrackMetadata
    stream_url: NonEmptyStr


class SearchResult(BaseModel):
    """One keyword search hit. Only ``url`` is queued; the rest is for display."""

    model_config = ConfigDict(frozen=True)

    url: NonEmptyStr
    title: NonEmptyStr | None = None
    artist: NonEmptyStr | None = None

    @property
    def title_or_url(self) -> str:
        return self.title or self.url


class AudioResolver(ABC):
    """Interface for resolving URLs and search queries to playable audio."""

    @abstractmethod
    async def resolve(self, source: SourceDescriptor) -> ResolvedAudio:
        """Resolve a source descriptor. Raises ResolutionError on failure."""
        ...

    @abstractmethod
    async def search(self, terms: str, limit: int = SEARCH_RESULT_LIMIT) -> list[SearchResult]:
        """List up to *limit* hits for *terms*, best first. Raises ResolutionError on failure."""
        ...
