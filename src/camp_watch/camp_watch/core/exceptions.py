class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateMembershipError(DomainError):
    """Raised when a person is already a member of the group."""


class NotFoundError(DomainError):
    """Raised when a referenced person or group does not exist."""


class StoreError(DomainError):
    """Raised when the persistent store cannot be read or written.

    The driver exception is chained as ``__cause__``.
    """
