"""
In-memory storage for code tickets.
"""

from typing import Dict, List, Optional, Protocol

from .models.ticket import Ticket


class TicketRepository(Protocol):
    """Ordered key-value map of ticket id -> ticket."""

    def get(self, key: str) -> Optional[Ticket]: ...

    def insert(self, key: str, value: Ticket) -> None: ...

    def remove(self, key: str) -> Optional[Ticket]: ...

    def values(self) -> List[Ticket]: ...

    def __len__(self) -> int: ...


class InMemoryTicketRepository:
    """
    Dict-backed repository.

    Iteration follows insertion order. Re-inserting an existing key
    keeps its original position.
    """

    def __init__(self):
        self._tickets: Dict[str, Ticket] = {}

    def get(self, key: str) -> Optional[Ticket]:
        return self._tickets.get(key)

    def insert(self, key: str, value: Ticket) -> None:
        self._tickets[key] = value

    def remove(self, key: str) -> Optional[Ticket]:
        return self._tickets.pop(key, None)

    def values(self) -> List[Ticket]:
        return list(self._tickets.values())

    def __len__(self) -> int:
        return len(self._tickets)
