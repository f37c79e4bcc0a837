"""
Code Tickets Services

Core business logic for ticket management.
"""

from .errors import TicketError, ValidationError, NotFoundError, AuthorizationError
from .ownership import TicketGuard
from .tickets import TicketService, merge_update, is_valid_due_date

__all__ = [
    # Errors
    "TicketError", "ValidationError", "NotFoundError", "AuthorizationError",

    # Ownership (author / assignee rules)
    "TicketGuard",

    # Ticket store
    "TicketService", "merge_update", "is_valid_due_date",
]
