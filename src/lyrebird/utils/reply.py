"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING

from lyrebird.domain.music.value_objects import PageStatus
from lyrebird.domain.shared.messages import DiscordUIMessages

if TYPE_CHECKING:
    from lyrebird.application.interfaces.audio_resolver import SearchResult
    from lyrebird.application.services.pagination import QueueEntry, QueuePage


@cache
def format_duration(seconds: int | float | None) -> str:
    if seconds is None:
        return "unknown"

    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    if minutes > 0:
        return f"{minutes}:{secs:02d}"
    return f"{secs}s"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def format_queue_entry(entry: QueueEntry) -> str:
    """One line of the queue listing.

    The now-playing line carries ``elapsed / total``; the rest carry their
    position.
    """
    item = entry.item
    label = truncate(item.display)
    if not entry.is_now_playing:
        return f"{entry.position}: {label}"

    total = format_duration(item.metadata.duration_seconds if item.metadata else None)
    if entry.elapsed_seconds is None:
        return f"{DiscordUIMessages.QUEUE_NOW_PLAYING}: {label} - {DiscordUIMessages.QUEUE_TIME_UNAVAILABLE}"
    return f"{DiscordUIMessages.QUEUE_NOW_PLAYING}: {label} - {format_duration(entry.elapsed_seconds)} / {total}"


def format_queue_page(page: QueuePage) -> str:
    match page.status:
        case PageStatus.EMPTY:
            return DiscordUIMessages.QUEUE_EMPTY
        case PageStatus.OUT_OF_RANGE:
            return f"{DiscordUIMessages.QUEUE_OUT_OF_RANGE}\n{page.footer}"
        case _:
            lines = [format_queue_entry(entry) for entry in page.entries]
            lines.append(page.footer)
            return "\n".join(lines)


def format_search_results(query: str, results: list[SearchResult]) -> str:
    lines = [DiscordUIMessages.SEARCH_HEADER.format(query=truncate(query))]
    for i, result in enumerate(results, start=1):
        line = f"{i}: {truncate(result.title_or_url)}"
        if result.artist:
            line += f" - {result.artist}"
        lines.append(line)
    return "\n".join(lines)
