"""
Code Tickets Ownership Rules

Author is set once on create and never changes.
Author OWNS the ticket: full edits and delete.
Assignee EXECUTES it: status and comments only.
"""

import logging

from ..models.ticket import Ticket
from .errors import AuthorizationError

logger = logging.getLogger(__name__)


class TicketGuard:
    """
    Role checks for ticket operations.

    Rules:
    1. author may edit every mutable field and delete
    2. assigned_to may change status and comments
    3. author or assigned_to may view a single ticket
    """

    def is_author(self, ticket: Ticket, caller: str) -> bool:
        return ticket.author == caller

    def is_assignee(self, ticket: Ticket, caller: str) -> bool:
        return ticket.assigned_to == caller

    def require_author(self, ticket: Ticket, caller: str, action: str) -> None:
        """
        Raise if caller is not the author.

        Use before:
        - Author updates
        - Deleting
        """
        if not self.is_author(ticket, caller):
            logger.warning(
                "Denied %s on ticket %s: %s is not the author", action, ticket.id, caller
            )
            raise AuthorizationError(
                f"Unauthorized: only the ticket author can {action}."
            )

    def require_assignee(self, ticket: Ticket, caller: str, action: str) -> None:
        """Raise if caller is not the assignee."""
        if not self.is_assignee(ticket, caller):
            logger.warning(
                "Denied %s on ticket %s: %s is not the assignee", action, ticket.id, caller
            )
            raise AuthorizationError(
                f"Unauthorized: only the ticket assignee can {action}."
            )

    def require_viewer(self, ticket: Ticket, caller: str) -> None:
        """Allow author OR assignee."""
        if self.is_author(ticket, caller) or self.is_assignee(ticket, caller):
            return

        logger.warning("Denied view of ticket %s to %s", ticket.id, caller)
        raise AuthorizationError(
            "Unauthorized: only the ticket author or assignee can view it."
        )
