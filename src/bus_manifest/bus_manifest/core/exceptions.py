class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateManifestError(ValidationError):
    """Raised when a student already has a scan of the same kind today."""


class DuplicateCheckInError(DuplicateManifestError):
    def __init__(self, message: str = "student already checked in today"):
        super().__init__(message)


class DuplicateCheckOutError(DuplicateManifestError):
    def __init__(self, message: str = "student already checked out today"):
        super().__init__(message)


class AuthenticationError(DomainError):
    """Raised when login credentials or a bearer token are invalid."""
