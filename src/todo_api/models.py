from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item as returned by the
    repositories.

    Fields:
    - id: Unique positive integer identifier assigned by storage
    - title: Short title (1..120 chars, trimmed)
    - completed: Boolean completion flag
    - created_at: Creation timestamp as an ISO-8601 string in UTC
    """

    id: int
    title: str
    completed: bool
    created_at: str


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TodoChanges:
    """
    Partial update request for a Todo item.

    A field left as None is not touched by the update.
    """

    title: Optional[str] = None
    completed: Optional[bool] = None

    def is_empty(self) -> bool:
        return self.title is None and self.completed is None
