"""Discord UI views and components."""

from __future__ import annotations

from lyrebird.infrastructure.discord.views.base_view import BaseInteractiveView
from lyrebird.infrastructure.discord.views.queue_view import QueuePaginationView
from lyrebird.infrastructure.discord.views.search_view import SearchSelectView

__all__ = [
    "BaseInteractiveView",
    "QueuePaginationView",
    "SearchSelectView",
]
