"""Paginated read-only view over a session queue with an inactivity lease.

The controller is a small state machine::

    ACTIVE --(no event before deadline)--> EXPIRED
    ACTIVE --(close / surface torn down)--> CLOSED

Navigation events are handled only while ACTIVE and each one renews the
lease. Rendering always works on a single snapshot of the queue taken under
the queue lock, so a page never shows a half-applied mutation.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from lyrebird.domain.music.entities import QueueItem
from lyrebird.domain.music.queue_store import QueueStore
from lyrebird.domain.music.value_objects import (
    NavigationAction,
    NavigationEvent,
    PageStatus,
    PaginationState,
)
from lyrebird.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
PAGINATION_TIMEOUT_SECONDS = 120.0


def last_page_index(length: int, page_size: int) -> int:
    return max(math.ceil(length / page_size) - 1, 0)


@dataclass(frozen=True)
class QueueEntry:
    position: int
    item: QueueItem
    elapsed_seconds: float | None = None

    @property
    def is_now_playing(self) -> bool:
        return self.position == 0


@dataclass(frozen=True)
class QueuePage:
    status: PageStatus
    page: int
    total_pages: int
    entries: tuple[QueueEntry, ...] = ()

    @property
    def footer(self) -> str:
        return f"page {self.page + 1} of {self.total_pages}"


@dataclass
class PaginationCursor:
    page: int
    deadline: float
    message_id: int | None = None


def build_page(
    items: Sequence[QueueItem],
    page: int,
    page_size: int,
    elapsed_seconds: float | None = None,
) -> QueuePage:
    """Render *page* of an already-captured queue snapshot."""
    total_pages = last_page_index(len(items), page_size) + 1
    if not items:
        return QueuePage(PageStatus.EMPTY, page, total_pages)

    start = page * page_size
    if start >= len(items):
        return QueuePage(PageStatus.OUT_OF_RANGE, page, total_pages)

    stop = min(start + page_size, len(items))
    entries = tuple(
        QueueEntry(
            position=position,
            item=items[position],
            elapsed_seconds=elapsed_seconds if position == 0 else None,
        )
        for position in range(start, stop)
    )
    return QueuePage(PageStatus.OK, page, total_pages, entries)


@dataclass
class PaginationController:
    """Interactive cursor over one queue, bound to one rendered message."""

    store: QueueStore
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = PAGINATION_TIMEOUT_SECONDS
    elapsed: Callable[[], float | None] | None = None
    clock: Callable[[], float] = time.monotonic
    initial_page: int = 0
    state: PaginationState = field(default=PaginationState.ACTIVE, init=False)
    cursor: PaginationCursor = field(init=False)

    def __post_init__(self) -> None:
        self.cursor = PaginationCursor(
            page=max(self.initial_page, 0), deadline=self.clock() + self.timeout
        )

    @property
    def page(self) -> int:
        return self.cursor.page

    def bind_message(self, message_id: int) -> None:
        self.cursor.message_id = message_id

    def remaining(self) -> float:
        return max(self.cursor.deadline - self.clock(), 0.0)

    def _renew(self) -> None:
        self.cursor.deadline = self.clock() + self.timeout

    async def _render(self, *, clamp: bool) -> QueuePage:
        items = await self.store.snapshot()
        if clamp:
            self.cursor.page = min(self.cursor.page, last_page_index(len(items), self.page_size))
        elapsed = self.elapsed() if self.elapsed is not None and items else None
        return build_page(items, self.cursor.page, self.page_size, elapsed)

    async def open(self) -> QueuePage:
        """First render; the starting page is clamped to the current queue."""
        return await self._render(clamp=True)

    async def handle(self, event: NavigationEvent) -> QueuePage | None:
        """Apply one navigation event. Returns the new page, or None if ignored."""
        if self.state.is_terminal:
            logger.debug(LogTemplates.PAGINATION_EVENT_AFTER_END, event.raw, self.state.value)
            return None
        if event.is_unknown:
            logger.warning(LogTemplates.PAGINATION_UNKNOWN_EVENT, event.raw)
            return None
        if self.remaining() <= 0:
            self.expire()
            return None

        if event.action is NavigationAction.REFRESH:
            self._renew()
            return await self._render(clamp=False)

        items = await self.store.snapshot()
        last_page = last_page_index(len(items), self.page_size)
        if event.action is NavigationAction.PREVIOUS:
            self.cursor.page = max(min(self.cursor.page, last_page) - 1, 0)
        else:
            self.cursor.page = min(self.cursor.page + 1, last_page)
        self._renew()

        elapsed = self.elapsed() if self.elapsed is not None and items else None
        return build_page(items, self.cursor.page, self.page_size, elapsed)

    def expire(self) -> None:
        if self.state is PaginationState.ACTIVE:
            self.state = PaginationState.EXPIRED
            logger.debug(LogTemplates.PAGINATION_EXPIRED, self.cursor.message_id)

    def close(self) -> None:
        if self.state is PaginationState.ACTIVE:
            self.state = PaginationState.CLOSED
            logger.debug(LogTemplates.PAGINATION_CLOSED, self.cursor.message_id)

    async def run(
        self,
        next_event: Callable[[], Awaitable[NavigationEvent]],
        on_render: Callable[[QueuePage], Awaitable[None]],
        on_detach: Callable[[PaginationState], None],
    ) -> PaginationState:
        """Consume navigation events until the lease runs out or the view closes.

        Each wait is bounded by the remaining lease, so the deadline is enforced
        by the wait itself and no separate timer exists. *on_detach* runs
        synchronously on every exit path, cancellation included.
        """
        try:
            while not self.state.is_terminal:
                try:
                    event = await asyncio.wait_for(next_event(), timeout=self.remaining())
                except TimeoutError:
                    self.expire()
                    break
                page = await self.handle(event)
                if page is not None:
                    await on_render(page)
        except asyncio.CancelledError:
            self.close()
            raise
        finally:
            on_detach(self.state)
        return self.state
