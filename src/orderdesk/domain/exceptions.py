"""Domain-level exceptions.

Every failure the core can surface is a subclass of DomainException so the
CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed input, detected before anything is mutated."""


class NotFoundError(DomainException):
    """A referenced order, product or association does not exist."""


class ConflictError(DomainException):
    """The operation would violate an invariant (stock, duplicate link)."""


class InternalError(DomainException):
    """The entity store failed for reasons unrelated to business rules."""
