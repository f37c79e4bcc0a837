"""
Code Tickets Models
"""

from .ticket import (
    # Enums
    TicketStatus,
    Priority,

    # Core model
    Ticket,

    # Payloads
    CreateTicketPayload,
    AuthorUpdate,
    AssigneeUpdate,

    # Context
    CallContext,
)

__all__ = [
    "TicketStatus", "Priority",
    "Ticket",
    "CreateTicketPayload", "AuthorUpdate", "AssigneeUpdate",
    "CallContext",
]
