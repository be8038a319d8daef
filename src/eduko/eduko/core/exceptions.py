class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ImportFormatError(ValidationError):
    """Raised when an uploaded CSV cannot be processed at all (bad header, empty file)."""


class AuthenticationError(DomainError):
    """Raised when login credentials or the bearer token are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when no row matches the (school, id) pair."""


class ConflictError(DomainError):
    """Raised when the request collides with the current state of a row."""


class DuplicateUsernameError(ConflictError):
    """Raised when a username is already taken within the school."""

    def __init__(self, username: str):
        super().__init__(f"user '{username}' already exists")
        self.username = username


class InvalidTransitionError(ConflictError):
    """Raised when an excuse is no longer pending."""
