# ruff: noqa: N999
"""
Domain Layer

Contains pure queue logic organized by bounded contexts:
- shared/: Cross-cutting types, messages, and exceptions
- music/: Queue items, queue store, and pagination value objects
"""

from lyrebird.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
