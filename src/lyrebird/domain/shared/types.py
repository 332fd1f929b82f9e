"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type is defined here once, so models can simply annotate
their fields::

    from lyrebird.domain.shared.types import DiscordSnowflake, NonEmptyStr

    class MyModel(BaseModel):
        room: DiscordSnowflake
        arg: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

PositiveFloat = Annotated[float, Field(gt=0.0)]
"""Float > 0.0."""

VolumeFloat = Annotated[float, Field(ge=0.0, le=2.0)]
"""Audio volume multiplier in [0.0, 2.0]."""

DurationSeconds = Annotated[int, Field(ge=0, le=86_400)]
"""Track duration in seconds: 0 … 86 400 (24 hours)."""

PageSize = Annotated[int, Field(ge=1, le=25)]
"""Entries per rendered queue page: 1 … 25."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""

CommandPrefixStr = Annotated[str, Field(min_length=1, max_length=5)]
"""Bot command prefix: 1-5 characters."""
