"""
Account data model.

``AccountRecord`` is what the repository stores, secrets included.
``Account`` is the sanitized view handed to callers: it never carries the
credential hash or the pending verification code hash.

Verification status is a tagged variant rather than a set of nullable
columns, so a verified account holding a pending code cannot be built.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class Verified:
    """Email ownership proven."""


@dataclass(frozen=True)
class PendingVerification:
    """A verification code is outstanding; only its hash is kept."""

    code_hash: str
    expires_at: datetime


@dataclass(frozen=True)
class Unverified:
    """Not verified and no outstanding code."""


VerificationStatus = Union[Verified, PendingVerification, Unverified]


@dataclass(frozen=True)
class StatEntry:
    label: str
    value: str | int


@dataclass(frozen=True)
class UpcomingItem:
    title: str
    detail: str


@dataclass(frozen=True)
class Account:
    """Sanitized account view."""

    id: str
    email: str
    email_verified: bool
    name: str
    role: str
    location: str
    bio: str
    stats: tuple[StatEntry, ...]
    focus_areas: tuple[str, ...]
    upcoming: tuple[UpcomingItem, ...]
    created_at: datetime


@dataclass(frozen=True)
class AccountRecord:
    """Stored account, including credential material."""

    id: str
    email: str
    credential_hash: str
    verification: VerificationStatus
    name: str
    created_at: datetime
    role: str = ""
    location: str = ""
    bio: str = ""
    stats: tuple[StatEntry, ...] = field(default_factory=tuple)
    focus_areas: tuple[str, ...] = field(default_factory=tuple)
    upcoming: tuple[UpcomingItem, ...] = field(default_factory=tuple)

    @property
    def email_verified(self) -> bool:
        return isinstance(self.verification, Verified)

    @property
    def pending_verification(self) -> PendingVerification | None:
        if isinstance(self.verification, PendingVerification):
            return self.verification
        return None

    def to_account(self) -> Account:
        return Account(
            id=self.id,
            email=self.email,
            email_verified=self.email_verified,
            name=self.name,
            role=self.role,
            location=self.location,
            bio=self.bio,
            stats=self.stats,
            focus_areas=self.focus_areas,
            upcoming=self.upcoming,
            created_at=self.created_at,
        )


# Fields that may be changed through a profile update.
PROFILE_FIELDS = frozenset(
    {"email", "name", "role", "location", "bio", "stats", "focus_areas", "upcoming"}
)

# Fields that carry credentials and have their own operation.
CREDENTIAL_FIELDS = frozenset({"password", "credential_hash"})


def coerce_stats(value) -> tuple[StatEntry, ...]:
    """Build stat entries from ``StatEntry`` objects or ``{label, value}`` mappings."""
    entries = []
    for item in value or ():
        if isinstance(item, StatEntry):
            entries.append(item)
        else:
            entries.append(StatEntry(label=str(item["label"]), value=item["value"]))
    return tuple(entries)


def coerce_upcoming(value) -> tuple[UpcomingItem, ...]:
    """Build upcoming items from ``UpcomingItem`` objects or ``{title, detail}`` mappings."""
    items = []
    for item in value or ():
        if isinstance(item, UpcomingItem):
            items.append(item)
        else:
            items.append(UpcomingItem(title=str(item["title"]), detail=str(item["detail"])))
    return tuple(items)
