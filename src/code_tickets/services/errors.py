"""Errors raised by the ticket services."""


class TicketError(Exception):
    """Base for every rejected ticket operation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TicketError):
    """Missing or malformed input."""
    pass


class NotFoundError(TicketError):
    """Ticket id is not in the store."""
    pass


class AuthorizationError(TicketError):
    """Caller does not hold the role the operation requires."""
    pass
