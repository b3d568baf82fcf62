"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account identity and credential lifecycle:
hashing, verification codes, admin designation and the lifecycle manager.
It defines its own port interfaces for infrastructure abstraction.
"""

from .accounts import AccountLifecycleManager
from .admin import AdminPolicy
from .credentials import CredentialHasher
from .exceptions import (
    AccountError,
    AuthError,
    ConflictError,
    DeliveryError,
    ExpiredError,
    ForbiddenError,
    InvalidInput,
    NotFoundError,
    ValidationError,
)
from .models import (
    Account,
    AccountRecord,
    PendingVerification,
    StatEntry,
    UpcomingItem,
    Unverified,
    Verified,
)
from .ports import AccountRepository, EmailSender
from .verification import IssuedCode, VerificationCodeIssuer

__all__ = [
    "Account",
    "AccountError",
    "AccountLifecycleManager",
    "AccountRecord",
    "AccountRepository",
    "AdminPolicy",
    "AuthError",
    "ConflictError",
    "CredentialHasher",
    "DeliveryError",
    "EmailSender",
    "ExpiredError",
    "ForbiddenError",
    "InvalidInput",
    "IssuedCode",
    "NotFoundError",
    "PendingVerification",
    "StatEntry",
    "UpcomingItem",
    "Unverified",
    "ValidationError",
    "VerificationCodeIssuer",
    "Verified",
]
