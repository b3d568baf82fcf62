"""
Domain exceptions - Semantic error types for the account lifecycle.

Every error carries a stable machine-readable ``kind`` so that the HTTP
boundary can map it to a response without inspecting messages.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    kind = "account_error"


class ValidationError(AccountError):
    """Malformed or missing input."""

    kind = "validation"


class InvalidInput(ValidationError):
    """Value rejected by a credential primitive (empty or non-text password)."""

    pass


class ConflictError(AccountError):
    """An account with the same email already exists."""

    kind = "conflict"


class NotFoundError(AccountError):
    """Unknown account id or email."""

    kind = "not_found"


class AuthError(AccountError):
    """Password or verification code mismatch."""

    kind = "auth"


class ExpiredError(AccountError):
    """Verification window elapsed."""

    kind = "expired"


class ForbiddenError(AccountError):
    """Admin-protected or unauthorized destructive action."""

    kind = "forbidden"


class DeliveryError(AccountError):
    """The email channel failed to accept a message."""

    kind = "delivery"
