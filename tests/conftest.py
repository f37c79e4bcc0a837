from datetime import datetime, timedelta, timezone

import pytest

from code_tickets.models import CallContext, CreateTicketPayload
from code_tickets.repository import InMemoryTicketRepository
from code_tickets.services import TicketService

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo():
    return InMemoryTicketRepository()


@pytest.fixture
def service(repo):
    return TicketService(repo)


@pytest.fixture
def make_ctx():
    def _make(caller: str, minutes: int = 0) -> CallContext:
        return CallContext(caller=caller, now=T0 + timedelta(minutes=minutes))
    return _make


@pytest.fixture
def make_payload():
    def _make(**overrides) -> CreateTicketPayload:
        fields = {
            "title": "Fix crash",
            "description": "NPE on login",
            "priority": "high",
            "assigned_to": "bob",
            "due_date": "2025-01-01",
        }
        fields.update(overrides)
        return CreateTicketPayload(**fields)
    return _make


@pytest.fixture
def ticket(service, make_ctx, make_payload):
    """A ticket authored by alice and assigned to bob."""
    return service.create_ticket(make_payload(), make_ctx("alice"))
