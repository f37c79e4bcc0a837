"""
Code Tickets API

FastAPI application with:
- Ticket CRUD with author protection
- Assignee status/comment updates
- Listing, pagination and search

Caller identity comes from the X-Caller-Id header.
Reads are GET; mutations are POST / PATCH / DELETE.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends, Header, Query, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import settings
from ..models import (
    Ticket,
    CreateTicketPayload,
    AuthorUpdate,
    AssigneeUpdate,
    CallContext,
)
from ..repository import InMemoryTicketRepository
from ..services import (
    TicketService,
    TicketError,
    ValidationError,
    NotFoundError,
    AuthorizationError,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# =============================================================================
# APP SETUP
# =============================================================================

app = FastAPI(
    title="Code Tickets",
    description="Code ticket records with author and assignee permissions",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# DEPENDENCIES
# =============================================================================

_ticket_service = TicketService(InMemoryTicketRepository())


def get_ticket_service() -> TicketService:
    return _ticket_service


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_caller(x_caller_id: Optional[str] = Header(default=None)) -> str:
    if not x_caller_id or not x_caller_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Caller-Id header"
        )
    return x_caller_id.strip()


def get_context(
    caller: str = Depends(get_caller),
    now: datetime = Depends(get_now)
) -> CallContext:
    return CallContext(caller=caller, now=now)


# =============================================================================
# ERROR MAPPING
# =============================================================================

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
}


@app.exception_handler(TicketError)
async def ticket_error_handler(request: Request, exc: TicketError):
    code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info("%s %s -> %s: %s", request.method, request.url.path, code, exc.message)
    return JSONResponse(status_code=code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_error_handler(request: Request, exc: RequestValidationError):
    """
    Bad values (empty or unknown priority/status, wrong types) are a 400
    with a message, like any other ValidationError.

    Fields outside a role's payload keep FastAPI's 422.
    """
    errors = exc.errors()
    if any(e.get("type") == "extra_forbidden" for e in errors):
        return await request_validation_exception_handler(request, exc)

    problems = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ())[1:]) or 'request'}: {e.get('msg')}"
        for e in errors
    )
    message = f"Invalid request: {problems}"
    logger.info("%s %s -> 400: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


# =============================================================================
# HEALTH CHECK
# =============================================================================

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "code-tickets",
        "version": __version__
    }


# =============================================================================
# TICKET ENDPOINTS (mutating)
# =============================================================================

@app.post("/tickets", status_code=status.HTTP_201_CREATED, response_model=Ticket)
async def create_ticket(
    request: CreateTicketPayload,
    ctx: CallContext = Depends(get_context),
    service: TicketService = Depends(get_ticket_service)
):
    """
    Create a new ticket.

    The caller becomes the author, permanently.
    """
    return service.create_ticket(request, ctx)


@app.patch("/tickets/{ticket_id}", response_model=Ticket)
async def update_ticket_as_author(
    ticket_id: str,
    request: AuthorUpdate,
    ctx: CallContext = Depends(get_context),
    service: TicketService = Depends(get_ticket_service)
):
    """
    Author update. Only fields present in the body are changed.
    """
    return service.update_as_author(ticket_id, request, ctx)


@app.patch("/tickets/{ticket_id}/assignee", response_model=Ticket)
async def update_ticket_as_assignee(
    ticket_id: str,
    request: AssigneeUpdate,
    ctx: CallContext = Depends(get_context),
    service: TicketService = Depends(get_ticket_service)
):
    """
    Assignee update: status and comments.
    """
    return service.update_as_assignee(ticket_id, request, ctx)


@app.delete("/tickets/{ticket_id}", response_model=Ticket)
async def delete_ticket(
    ticket_id: str,
    ctx: CallContext = Depends(get_context),
    service: TicketService = Depends(get_ticket_service)
):
    return service.delete_ticket(ticket_id, ctx)


# =============================================================================
# TICKET ENDPOINTS (read-only)
# =============================================================================

@app.get("/tickets", response_model=List[Ticket])
async def list_tickets(service: TicketService = Depends(get_ticket_service)):
    return service.get_all_tickets()


@app.get("/tickets/first", response_model=List[Ticket])
async def list_first_tickets(service: TicketService = Depends(get_ticket_service)):
    """Initial load for list views."""
    return service.get_first_tickets()


@app.get("/tickets/page", response_model=List[Ticket])
async def list_ticket_page(
    offset: int = 0,
    limit: int = 10,
    service: TicketService = Depends(get_ticket_service)
):
    return service.get_paginated_tickets(offset, limit)


@app.get("/tickets/search", response_model=List[Ticket])
async def search_tickets(
    keywords: str = "",
    service: TicketService = Depends(get_ticket_service)
):
    """
    Case-insensitive search over title and description.
    """
    return service.search_tickets(keywords)


@app.get("/tickets/search/first", response_model=Ticket)
async def search_first_ticket(
    keywords: str = "",
    service: TicketService = Depends(get_ticket_service)
):
    ticket = service.find_first_ticket(keywords)
    if ticket is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No code ticket matches '{keywords}'"
        )
    return ticket


@app.get("/tickets/by-status", response_model=List[Ticket])
async def list_tickets_by_status(
    ticket_status: Optional[str] = Query(default=None, alias="status"),
    service: TicketService = Depends(get_ticket_service)
):
    return service.find_tickets_by_status(ticket_status)


@app.get("/tickets/by-priority", response_model=List[Ticket])
async def list_tickets_by_priority(
    priority: Optional[str] = None,
    service: TicketService = Depends(get_ticket_service)
):
    return service.find_tickets_by_priority(priority)


@app.get("/tickets/{ticket_id}", response_model=Ticket)
async def get_ticket(
    ticket_id: str,
    ctx: CallContext = Depends(get_context),
    service: TicketService = Depends(get_ticket_service)
):
    """
    Get ticket details.

    Visible to the author and the assignee only.
    """
    return service.get_ticket(ticket_id, ctx)


# =============================================================================
# RUN
# =============================================================================

def main():
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
