"""
Code Tickets Model

Core principles:
1. Ticket = unit of code work (bug, feature, review)
2. Author is IMMUTABLE after create
3. Assignee drives execution (status + comments)
4. Store owns the record, callers get copies
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


# =============================================================================
# ENUMS
# =============================================================================

class TicketStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    IN_REVIEW = "in_review"
    ASSIGNED = "assigned"
    DEFERRED = "deferred"
    REJECTED = "rejected"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# =============================================================================
# CORE MODELS
# =============================================================================

class Ticket(BaseModel):
    """
    The core ticket entity.

    author and created_at are stamped once by the service.
    updated_at stays None until the first successful mutation.
    """
    id: str
    title: str
    description: str
    status: Optional[TicketStatus] = None
    priority: Priority
    assigned_to: str

    # Ownership (set on create, then IMMUTABLE)
    author: str

    # Timestamps
    created_at: datetime
    updated_at: Optional[datetime] = None

    comments: Optional[str] = None
    due_date: str


# =============================================================================
# PAYLOADS
# =============================================================================

class CreateTicketPayload(BaseModel):
    """
    Input for create.

    Required fields are declared optional so a missing value reaches
    the service and is reported as a ValidationError there.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = None
    due_date: Optional[str] = None

    status: Optional[TicketStatus] = None
    comments: Optional[str] = None


class AuthorUpdate(BaseModel):
    """
    Partial update allowed to the author.

    Only fields in model_fields_set are applied. Sending status or
    comments as null clears them; omitting them leaves them alone.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[Priority] = None
    comments: Optional[str] = None
    due_date: Optional[str] = None


class AssigneeUpdate(BaseModel):
    """Partial update allowed to the assignee: status and comments only."""
    model_config = ConfigDict(extra="forbid")

    status: Optional[TicketStatus] = None
    comments: Optional[str] = None


# =============================================================================
# CALL CONTEXT
# =============================================================================

class CallContext(BaseModel):
    """Who is calling and when. Passed into every identity-aware operation."""
    caller: str
    now: datetime
