class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class PolicyViolation(DomainError):
    """Raised when the current system rules forbid an operation."""


class InvalidTransition(DomainError):
    """Raised when a state transition is not allowed from the current state."""


class Expired(DomainError):
    """Raised when a pre-approval is redeemed after it expired."""


class NotFound(DomainError):
    """Raised when a visitor, check-in, pre-approval or host id is unknown."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""
