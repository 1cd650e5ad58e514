class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class BusinessRuleError(DomainError):
    """Raised when a well-formed request is not allowed right now (e.g. outside the window)."""


class AuthenticationError(DomainError):
    """Raised when no caller identity is available."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action or a target."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist or is inactive."""


class StoreError(DomainError):
    """Raised when the underlying persistence fails. The message is safe to show."""
