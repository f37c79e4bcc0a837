import pytest

from code_tickets.models import Priority, TicketStatus
from code_tickets.services import (
    TicketService,
    ValidationError,
    NotFoundError,
    AuthorizationError,
)


# -----------------------------------------------------------------------------
# create
# -----------------------------------------------------------------------------

def test_create_ticket_stamps_author_and_leaves_optionals_empty(service, make_ctx, make_payload):
    ticket = service.create_ticket(make_payload(), make_ctx("alice"))

    assert ticket.author == "alice"
    assert ticket.created_at == make_ctx("alice").now
    assert ticket.updated_at is None
    assert ticket.status is None
    assert ticket.comments is None
    assert ticket.priority == Priority.HIGH
    assert ticket.assigned_to == "bob"
    assert ticket.due_date == "2025-01-01"


def test_create_ticket_persists_record(service, repo, make_ctx, make_payload):
    ticket = service.create_ticket(make_payload(), make_ctx("alice"))

    assert len(repo) == 1
    assert repo.get(ticket.id) == ticket


@pytest.mark.parametrize("field", ["title", "description", "assigned_to", "due_date"])
def test_create_ticket_rejects_empty_required_field(service, repo, make_ctx, make_payload, field):
    with pytest.raises(ValidationError):
        service.create_ticket(make_payload(**{field: ""}), make_ctx("alice"))
    assert len(repo) == 0


def test_create_ticket_rejects_missing_priority(service, repo, make_ctx, make_payload):
    with pytest.raises(ValidationError) as exc:
        service.create_ticket(make_payload(priority=None), make_ctx("alice"))
    assert "priority" in exc.value.message
    assert len(repo) == 0


def test_create_ticket_rejects_blank_title(service, make_ctx, make_payload):
    with pytest.raises(ValidationError):
        service.create_ticket(make_payload(title="   "), make_ctx("alice"))


@pytest.mark.parametrize("due_date", ["not a date", "2025-13-01", "2025-02-30"])
def test_create_ticket_rejects_unparseable_due_date(service, repo, make_ctx, make_payload, due_date):
    with pytest.raises(ValidationError) as exc:
        service.create_ticket(make_payload(due_date=due_date), make_ctx("alice"))
    assert "due date" in exc.value.message
    assert len(repo) == 0


def test_create_ticket_accepts_datetime_due_date(service, make_ctx, make_payload):
    ticket = service.create_ticket(make_payload(due_date="2025-01-01T17:00:00"), make_ctx("alice"))
    assert ticket.due_date == "2025-01-01T17:00:00"


def test_create_ticket_keeps_supplied_status_and_comments(service, make_ctx, make_payload):
    ticket = service.create_ticket(
        make_payload(status="assigned", comments="repro attached"),
        make_ctx("alice")
    )
    assert ticket.status == TicketStatus.ASSIGNED
    assert ticket.comments == "repro attached"


def test_created_ids_are_distinct(service, make_ctx, make_payload):
    ids = {
        service.create_ticket(make_payload(title=f"T{i}"), make_ctx("alice")).id
        for i in range(50)
    }
    assert len(ids) == 50


def test_create_ticket_uses_id_factory(repo, make_ctx, make_payload):
    service = TicketService(repo, id_factory=lambda: "CT-1")
    assert service.create_ticket(make_payload(), make_ctx("alice")).id == "CT-1"


def test_create_ticket_refuses_colliding_id(repo, make_ctx, make_payload):
    service = TicketService(repo, id_factory=lambda: "CT-1")
    service.create_ticket(make_payload(), make_ctx("alice"))

    with pytest.raises(ValidationError):
        service.create_ticket(make_payload(title="Other"), make_ctx("carol"))
    assert repo.get("CT-1").author == "alice"


def test_returned_ticket_is_a_copy(service, repo, ticket):
    ticket.title = "changed by caller"
    assert repo.get(ticket.id).title == "Fix crash"


# -----------------------------------------------------------------------------
# listing
# -----------------------------------------------------------------------------

@pytest.fixture
def five_tickets(service, make_ctx, make_payload):
    return [
        service.create_ticket(make_payload(title=f"T{i}"), make_ctx("alice", minutes=i))
        for i in range(1, 6)
    ]


def test_get_all_tickets_in_insertion_order(service, five_tickets):
    assert [t.title for t in service.get_all_tickets()] == ["T1", "T2", "T3", "T4", "T5"]


def test_get_first_tickets_caps_at_initial_load_size(service, five_tickets, make_ctx, make_payload):
    service.create_ticket(make_payload(title="T6"), make_ctx("alice"))

    first = service.get_first_tickets()
    assert len(first) == TicketService.INITIAL_LOAD_SIZE == 5
    assert [t.title for t in first] == ["T1", "T2", "T3", "T4", "T5"]


def test_get_first_tickets_with_fewer_stored(service, ticket):
    assert [t.id for t in service.get_first_tickets()] == [ticket.id]


def test_paginated_slice(service, five_tickets):
    page = service.get_paginated_tickets(offset=2, limit=2)
    assert [t.title for t in page] == ["T3", "T4"]


def test_paginated_past_end_is_empty(service, five_tickets):
    assert service.get_paginated_tickets(offset=10, limit=5) == []


def test_paginated_partial_last_page(service, five_tickets):
    assert [t.title for t in service.get_paginated_tickets(offset=4, limit=5)] == ["T5"]


def test_paginated_rejects_negative_arguments(service, five_tickets):
    with pytest.raises(ValidationError):
        service.get_paginated_tickets(offset=-1, limit=2)
    with pytest.raises(ValidationError):
        service.get_paginated_tickets(offset=0, limit=-2)


def test_empty_store_lists_nothing(service):
    assert service.get_all_tickets() == []
    assert service.get_first_tickets() == []


# -----------------------------------------------------------------------------
# get by id
# -----------------------------------------------------------------------------

def test_author_can_view_ticket(service, ticket, make_ctx):
    assert service.get_ticket(ticket.id, make_ctx("alice")) == ticket


def test_assignee_can_view_ticket(service, ticket, make_ctx):
    assert service.get_ticket(ticket.id, make_ctx("bob")).id == ticket.id


def test_stranger_cannot_view_ticket(service, ticket, make_ctx):
    with pytest.raises(AuthorizationError):
        service.get_ticket(ticket.id, make_ctx("mallory"))


def test_get_unknown_ticket(service, make_ctx):
    with pytest.raises(NotFoundError) as exc:
        service.get_ticket("nope", make_ctx("alice"))
    assert "nope" in exc.value.message


# -----------------------------------------------------------------------------
# search
# -----------------------------------------------------------------------------

@pytest.fixture
def searchable(service, make_ctx, make_payload):
    ctx = make_ctx("alice")
    return [
        service.create_ticket(make_payload(title="fix bug in parser", description="tokens"), ctx),
        service.create_ticket(make_payload(title="Add feature", description="Nothing to see"), ctx),
        service.create_ticket(make_payload(title="Refactor", description="Known BUG in lexer"), ctx),
    ]


def test_search_is_case_insensitive(service, searchable):
    titles = [t.title for t in service.search_tickets("Bug")]
    assert titles == ["fix bug in parser", "Refactor"]


def test_search_matches_description(service, searchable):
    assert [t.title for t in service.search_tickets("NOTHING")] == ["Add feature"]


def test_search_without_match_is_empty(service, searchable):
    assert service.search_tickets("segfault") == []


def test_find_first_ticket_returns_first_match(service, searchable):
    assert service.find_first_ticket("bug").title == "fix bug in parser"


def test_find_first_ticket_without_match_is_none(service, searchable):
    assert service.find_first_ticket("segfault") is None


# -----------------------------------------------------------------------------
# filters
# -----------------------------------------------------------------------------

def test_find_by_status(service, make_ctx, make_payload):
    ctx = make_ctx("alice")
    service.create_ticket(make_payload(title="a", status="in_review"), ctx)
    service.create_ticket(make_payload(title="b"), ctx)
    service.create_ticket(make_payload(title="c", status="completed"), ctx)

    assert [t.title for t in service.find_tickets_by_status("in_review")] == ["a"]
    assert [t.title for t in service.find_tickets_by_status(TicketStatus.COMPLETED)] == ["c"]
    assert service.find_tickets_by_status("deferred") == []


@pytest.mark.parametrize("value", [None, "", "   ", "bogus"])
def test_find_by_status_rejects_invalid(service, value):
    with pytest.raises(ValidationError):
        service.find_tickets_by_status(value)


def test_find_by_priority(service, make_ctx, make_payload):
    ctx = make_ctx("alice")
    service.create_ticket(make_payload(title="a", priority="low"), ctx)
    service.create_ticket(make_payload(title="b", priority="high"), ctx)
    service.create_ticket(make_payload(title="c", priority="low"), ctx)

    assert [t.title for t in service.find_tickets_by_priority("low")] == ["a", "c"]
    assert [t.title for t in service.find_tickets_by_priority(Priority.HIGH)] == ["b"]
    assert service.find_tickets_by_priority("medium") == []


@pytest.mark.parametrize("value", [None, "", "urgent"])
def test_find_by_priority_rejects_invalid(service, value):
    with pytest.raises(ValidationError):
        service.find_tickets_by_priority(value)
