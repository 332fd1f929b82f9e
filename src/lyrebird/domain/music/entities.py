"""Core domain entities for the music bounded context."""

from __future__ import annotations

from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from lyrebird.domain.music.value_objects import ItemState
from lyrebird.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    TrackTitleStr,
)

SEARCH_PREFIX = "ytsearch1:"


class ResolveSource(BaseModel):
    """Re-playable source: a URL or search query handed to the resolver."""

    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["resolve"] = "resolve"
    arg: NonEmptyStr

    @classmethod
    def url(cls, url: str) -> ResolveSource:
        return cls(arg=url)

    @classmethod
    def search(cls, terms: str) -> ResolveSource:
        """Search descriptor resolving to the first hit for *terms*."""
        return cls(arg=f"{SEARCH_PREFIX}{terms}")


# Widen to an Annotated discriminated union on ``kind`` when a second resolver
# kind is added; the transfer file already carries the tag.
SourceDescriptor = ResolveSource


class TrackMetadata(BaseModel):
    """Immutable metadata captured once a source resolves."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr | None = None
    artist: NonEmptyStr | None = None
    duration_seconds: DurationSeconds | None = None
    webpage_url: HttpUrlStr | None = None

    @property
    def display(self) -> str:
        """Format as ``artist - title`` with placeholders for missing parts."""
        artist = self.artist or "unknown artist"
        title = self.title or "unknown title"
        return f"{artist} - {title}"


class QueueItem(BaseModel):
    """One playable unit in a session queue.

    The source is fixed at creation. Metadata and the stream URL are attached
    once, after resolution succeeds.
    """

    source: SourceDescriptor
    item_id: str = Field(default_factory=lambda: uuid4().hex[:8])
    metadata: TrackMetadata | None = None
    stream_url: NonEmptyStr | None = None
    state: ItemState = ItemState.PENDING
    looping: bool = False

    @property
    def is_replayable(self) -> bool:
        """True if the item's source is worth carrying across a restart."""
        return self.state.is_live

    @property
    def display(self) -> str:
        if self.metadata is None:
            return self.source.arg
        return self.metadata.display

    def attach_resolution(self, metadata: TrackMetadata, stream_url: str) -> None:
        """Attach the resolver's result. Allowed exactly once."""
        if self.metadata is not None:
            raise ValueError(f"Queue item {self.item_id} is already resolved")
        self.metadata = metadata
        self.stream_url = stream_url
        if self.state == ItemState.PENDING:
            self.state = ItemState.READY

    def mark_playing(self) -> None:
        self.state = ItemState.PLAYING

    def mark_errored(self) -> None:
        self.state = ItemState.ERRORED

    def stop(self) -> None:
        """Mark the item stopped so a resolution in flight never starts it."""
        if self.state != ItemState.ERRORED:
            self.state = ItemState.STOPPED


class SessionRecord(BaseModel):
    """Replay state for one session: where it was and what it was going to play."""

    model_config = ConfigDict(frozen=True, strict=True)

    room: DiscordSnowflake
    channel: DiscordSnowflake
    queue: list[SourceDescriptor] = Field(default_factory=list)
