class MoneywiseError(Exception):
    """Base class for errors surfaced to the caller."""


class ValidationError(MoneywiseError, ValueError):
    """User input violates a precondition; nothing was written."""


class PersistenceError(MoneywiseError):
    """The record store could not complete a read or write."""


class InvalidGoalError(MoneywiseError, ValueError):
    """A savings goal has a non-positive target amount."""
