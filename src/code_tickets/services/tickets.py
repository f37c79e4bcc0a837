"""
Code Tickets Service

Full lifecycle of code tickets over an injected repository.

Every identity-aware operation takes a CallContext (caller + now),
so the service holds no ambient state besides the repository.

Lifecycle:
    create_ticket (author = caller)
        -> update_as_author / update_as_assignee (updated_at = now)
        -> delete_ticket (author only)
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

from ..models.ticket import (
    Ticket,
    TicketStatus,
    Priority,
    CreateTicketPayload,
    AuthorUpdate,
    AssigneeUpdate,
    CallContext,
)
from ..repository import TicketRepository
from .errors import ValidationError, NotFoundError
from .ownership import TicketGuard

logger = logging.getLogger(__name__)


# Fields that may never be blank once a ticket exists
REQUIRED_FIELDS = ("title", "description", "priority", "assigned_to", "due_date")


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def is_valid_due_date(value: str) -> bool:
    """True if value parses as an ISO calendar date or datetime."""
    try:
        datetime.fromisoformat(value.strip())
    except (TypeError, ValueError):
        return False
    return True


def merge_update(ticket: Ticket, update: BaseModel, now: datetime) -> Ticket:
    """
    Apply the fields the caller actually sent over an existing ticket.

    Omitted fields keep their stored value. A field sent as null clears it,
    which is only allowed for the optional ones (status, comments).
    """
    changes = {}
    for field in update.model_fields_set:
        value = getattr(update, field)
        if field in REQUIRED_FIELDS and _is_blank(value):
            raise ValidationError(f"Can not update code ticket with empty {field}")
        changes[field] = value

    if "due_date" in changes and not is_valid_due_date(changes["due_date"]):
        raise ValidationError("Can not update code ticket with invalid due date")

    changes["updated_at"] = now
    return ticket.model_copy(update=changes)


class TicketService:
    """
    Ticket store operations.

    Reads are side-effect free and return copies.
    Mutations either fully apply or leave the store untouched.
    """

    # Number of tickets returned by get_first_tickets
    INITIAL_LOAD_SIZE = 5

    def __init__(
        self,
        ticket_repo: TicketRepository,
        id_factory: Optional[Callable[[], str]] = None,
        guard: Optional[TicketGuard] = None
    ):
        self.ticket_repo = ticket_repo
        self.id_factory = id_factory or (lambda: str(uuid4()))
        self.guard = guard or TicketGuard()

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_ticket(self, payload: CreateTicketPayload, ctx: CallContext) -> Ticket:
        """
        Create a new ticket authored by the caller.

        title, description, priority, assigned_to and due_date are
        required and non-empty; due_date must parse as a date.
        """
        missing = [f for f in REQUIRED_FIELDS if _is_blank(getattr(payload, f))]
        if missing:
            logger.warning("Rejected create by %s: missing %s", ctx.caller, ", ".join(missing))
            raise ValidationError(
                f"Can not create code ticket with invalid payload: missing {', '.join(missing)}"
            )

        if not is_valid_due_date(payload.due_date):
            logger.warning("Rejected create by %s: bad due date %r", ctx.caller, payload.due_date)
            raise ValidationError("Can not create code ticket with invalid due date")

        ticket = Ticket(
            id=self.id_factory(),
            title=payload.title,
            description=payload.description,
            status=payload.status,
            priority=payload.priority,
            assigned_to=payload.assigned_to,
            author=ctx.caller,
            created_at=ctx.now,
            updated_at=None,
            comments=payload.comments,
            due_date=payload.due_date,
        )

        if self.ticket_repo.get(ticket.id) is not None:
            raise ValidationError(f"Code ticket with id = {ticket.id} already exists.")

        self.ticket_repo.insert(ticket.id, ticket)
        logger.info("Ticket %s created by %s", ticket.id, ctx.caller)

        return ticket.model_copy()

    # =========================================================================
    # READ
    # =========================================================================

    def get_first_tickets(self) -> List[Ticket]:
        """First INITIAL_LOAD_SIZE tickets in store order."""
        return self._copies(self.ticket_repo.values()[:self.INITIAL_LOAD_SIZE])

    def get_all_tickets(self) -> List[Ticket]:
        return self._copies(self.ticket_repo.values())

    def get_paginated_tickets(self, offset: int, limit: int) -> List[Ticket]:
        """
        Slice [offset, offset + limit) of the full listing.

        Offsets past the end give an empty list. Negative values are invalid.
        """
        if offset < 0 or limit < 0:
            raise ValidationError("Can not paginate with a negative offset or limit")

        return self._copies(self.ticket_repo.values()[offset:offset + limit])

    def get_ticket(self, ticket_id: str, ctx: CallContext) -> Ticket:
        """Get a ticket visible to its author or assignee."""
        ticket = self._get_or_raise(ticket_id)
        self.guard.require_viewer(ticket, ctx.caller)
        return ticket.model_copy()

    def search_tickets(self, keywords: str) -> List[Ticket]:
        """
        Case-insensitive substring search over title and description.

        Returns every match in store order.
        """
        return self._copies(self._matching(keywords))

    def find_first_ticket(self, keywords: str) -> Optional[Ticket]:
        """First search match, or None when nothing matches."""
        matches = self._matching(keywords)
        if not matches:
            return None
        return matches[0].model_copy()

    def find_tickets_by_status(
        self,
        status: Optional[Union[TicketStatus, str]]
    ) -> List[Ticket]:
        if _is_blank(status):
            raise ValidationError("Can not query using invalid code ticket status")
        try:
            wanted = TicketStatus(status)
        except ValueError:
            raise ValidationError(f"Can not query using invalid code ticket status: {status}")

        return self._copies(
            t for t in self.ticket_repo.values() if t.status == wanted
        )

    def find_tickets_by_priority(
        self,
        priority: Optional[Union[Priority, str]]
    ) -> List[Ticket]:
        if _is_blank(priority):
            raise ValidationError("Can not query using invalid code ticket priority")
        try:
            wanted = Priority(priority)
        except ValueError:
            raise ValidationError(f"Can not query using invalid code ticket priority: {priority}")

        return self._copies(
            t for t in self.ticket_repo.values() if t.priority == wanted
        )

    # =========================================================================
    # UPDATE
    # =========================================================================

    def update_as_author(
        self,
        ticket_id: str,
        update: AuthorUpdate,
        ctx: CallContext
    ) -> Ticket:
        """
        Author edit: title, description, status, priority, comments, due_date.
        """
        ticket = self._get_or_raise(ticket_id)
        self.guard.require_author(ticket, ctx.caller, "update this ticket")
        return self._save_update(ticket, update, ctx)

    def update_as_assignee(
        self,
        ticket_id: str,
        update: AssigneeUpdate,
        ctx: CallContext
    ) -> Ticket:
        """
        Assignee edit: status and comments only.
        """
        ticket = self._get_or_raise(ticket_id)
        self.guard.require_assignee(ticket, ctx.caller, "update this ticket")
        return self._save_update(ticket, update, ctx)

    # =========================================================================
    # DELETE
    # =========================================================================

    def delete_ticket(self, ticket_id: str, ctx: CallContext) -> Ticket:
        """Remove a ticket. Author only. Returns the removed record."""
        ticket = self._get_or_raise(ticket_id)
        self.guard.require_author(ticket, ctx.caller, "delete this ticket")

        self.ticket_repo.remove(ticket_id)
        logger.info("Ticket %s deleted by %s", ticket_id, ctx.caller)

        return ticket.model_copy()

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _get_or_raise(self, ticket_id: str) -> Ticket:
        ticket = self.ticket_repo.get(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Code ticket with id = {ticket_id} not found.")
        return ticket

    def _save_update(self, ticket: Ticket, update: BaseModel, ctx: CallContext) -> Ticket:
        updated = merge_update(ticket, update, ctx.now)
        self.ticket_repo.insert(ticket.id, updated)
        logger.info(
            "Ticket %s updated by %s (%s)",
            ticket.id, ctx.caller, ", ".join(sorted(update.model_fields_set)) or "no fields"
        )
        return updated.model_copy()

    def _matching(self, keywords: str) -> List[Ticket]:
        needle = (keywords or "").lower()
        return [
            t for t in self.ticket_repo.values()
            if needle in t.title.lower() or needle in t.description.lower()
        ]

    @staticmethod
    def _copies(tickets) -> List[Ticket]:
        return [t.model_copy() for t in tickets]
