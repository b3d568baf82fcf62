"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock
- An in-memory AccountRepository double with case-insensitive uniqueness
- A recording email sender that can be told to fail
- A wired AccountLifecycleManager
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from src.domain.accounts import AccountLifecycleManager
from src.domain.admin import AdminPolicy
from src.domain.credentials import CredentialHasher
from src.domain.exceptions import ConflictError, DeliveryError
from src.domain.models import AccountRecord
from src.domain.verification import VerificationCodeIssuer

ADMIN_EMAIL = "admin@sportconnectx.local"
T0 = datetime(2024, 1, 12, 8, 32, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class InMemoryAccountRepository:
    """
    AccountRepository double.

    Enforces case-insensitive email uniqueness on insert and update, like the
    PostgreSQL unique index, and tracks authored content rows so cascading
    deletes can be checked.
    """

    def __init__(self) -> None:
        self.records: dict[str, AccountRecord] = {}
        self.content: list[dict[str, str]] = []
        self.deleted_ids: list[str] = []

    def get_by_email(self, email: str) -> AccountRecord | None:
        for record in self.records.values():
            if record.email.lower() == email.lower():
                return record
        return None

    def get_by_id(self, account_id: str) -> AccountRecord | None:
        return self.records.get(account_id)

    def list_all(self) -> list[AccountRecord]:
        return sorted(self.records.values(), key=lambda r: (r.created_at, r.id))

    def insert(self, record: AccountRecord) -> None:
        if self._email_taken(record.email, exclude_id=None):
            raise ConflictError("An account with this email already exists.")
        self.records[record.id] = record

    def update(self, account_id: str, fields: Mapping[str, Any]) -> AccountRecord | None:
        record = self.records.get(account_id)
        if record is None:
            return None
        if "email" in fields and self._email_taken(fields["email"], exclude_id=account_id):
            raise ConflictError("An account with this email already exists.")
        updated = replace(record, **fields)
        self.records[account_id] = updated
        return updated

    def delete(self, account_id: str) -> bool:
        self.deleted_ids.append(account_id)
        return self.records.pop(account_id, None) is not None

    def delete_with_content(self, account_id: str) -> bool:
        self.content = [row for row in self.content if account_id not in row.values()]
        return self.delete(account_id)

    def add_content(self, table: str, **columns: str) -> None:
        self.content.append({"table": table, **columns})

    def content_referencing(self, account_id: str) -> list[dict[str, str]]:
        return [row for row in self.content if account_id in row.values()]

    def _email_taken(self, email: str, exclude_id: str | None) -> bool:
        return any(
            r.email.lower() == email.lower() and r.id != exclude_id for r in self.records.values()
        )


class RecordingEmailSender:
    """EmailSender double that records messages and can simulate outages."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.error: Exception | None = None

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((email, name, code))

    @property
    def last_code(self) -> str:
        return self.sent[-1][2]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def failing_email_sender() -> RecordingEmailSender:
    sender = RecordingEmailSender()
    sender.error = DeliveryError("SMTP relay unavailable")
    return sender


@pytest.fixture(scope="session")
def fast_hasher() -> CredentialHasher:
    """Low-cost bcrypt hasher so service tests stay quick."""
    return CredentialHasher(algorithm="bcrypt", bcrypt_rounds=4)


@pytest.fixture
def admin_policy() -> AdminPolicy:
    return AdminPolicy(admin_email=ADMIN_EMAIL)


@pytest.fixture
def service(
    repository: InMemoryAccountRepository,
    email_sender: RecordingEmailSender,
    admin_policy: AdminPolicy,
    fast_hasher: CredentialHasher,
    clock: FakeClock,
) -> AccountLifecycleManager:
    return AccountLifecycleManager(
        repository=repository,
        email_sender=email_sender,
        admin_policy=admin_policy,
        hasher=fast_hasher,
        code_issuer=VerificationCodeIssuer(clock=clock),
        clock=clock,
    )
