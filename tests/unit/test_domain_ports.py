"""
Unit tests for domain ports, models and exceptions.

Tests verify:
- Port interfaces are properly defined
- Verification status variants make invalid states unrepresentable
- Exceptions carry stable kinds
- Domain purity (zero framework imports)
"""

import subprocess
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from src.domain.exceptions import (
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
from src.domain.models import (
    AccountRecord,
    PendingVerification,
    StatEntry,
    Unverified,
    Verified,
    coerce_stats,
)
from src.domain.ports import AccountRepository, EmailSender

NOW = datetime(2024, 1, 12, 8, 32, tzinfo=timezone.utc)


def make_record(verification) -> AccountRecord:
    return AccountRecord(
        id="acct-1",
        email="bob@x.com",
        credential_hash="scrypt:00:00",
        verification=verification,
        name="Bob",
        created_at=NOW,
    )


class TestAccountRepositoryProtocol:
    """Tests for AccountRepository protocol."""

    @pytest.mark.parametrize(
        "method",
        ["get_by_email", "get_by_id", "list_all", "insert", "update", "delete", "delete_with_content"],
    )
    def test_defines_method(self, method: str) -> None:
        assert hasattr(AccountRepository, method)

    def test_in_memory_double_satisfies_protocol(self, repository) -> None:
        def accepts_repository(r: AccountRepository) -> None:
            pass

        accepts_repository(repository)


class TestEmailSenderProtocol:
    """Tests for EmailSender protocol."""

    def test_defines_send_verification_code(self) -> None:
        assert hasattr(EmailSender, "send_verification_code")


class TestVerificationStatus:
    """Tests for the tagged verification variant."""

    def test_verified_record(self) -> None:
        record = make_record(Verified())
        assert record.email_verified is True
        assert record.pending_verification is None

    def test_pending_record(self) -> None:
        pending = PendingVerification(code_hash="scrypt:aa:bb", expires_at=NOW)
        record = make_record(pending)
        assert record.email_verified is False
        assert record.pending_verification == pending

    def test_unverified_record(self) -> None:
        record = make_record(Unverified())
        assert record.email_verified is False
        assert record.pending_verification is None

    def test_records_are_immutable(self) -> None:
        record = make_record(Verified())
        with pytest.raises(FrozenInstanceError):
            record.email = "other@x.com"  # type: ignore[misc]

    def test_sanitized_view_has_no_secrets(self) -> None:
        account = make_record(PendingVerification(code_hash="scrypt:aa:bb", expires_at=NOW)).to_account()
        assert "scrypt" not in repr(account)
        assert account.email_verified is False


class TestCoercion:
    def test_coerce_stats_accepts_entries_and_mappings(self) -> None:
        stats = coerce_stats([StatEntry("Invites sent", 34), {"label": "Streak", "value": "8 weeks"}])
        assert stats == (StatEntry("Invites sent", 34), StatEntry("Streak", "8 weeks"))

    def test_coerce_stats_none(self) -> None:
        assert coerce_stats(None) == ()


class TestDomainExceptions:
    """Tests for domain exceptions."""

    @pytest.mark.parametrize(
        "error_type,kind",
        [
            (ValidationError, "validation"),
            (InvalidInput, "validation"),
            (ConflictError, "conflict"),
            (NotFoundError, "not_found"),
            (AuthError, "auth"),
            (ExpiredError, "expired"),
            (ForbiddenError, "forbidden"),
            (DeliveryError, "delivery"),
        ],
    )
    def test_kind(self, error_type: type[AccountError], kind: str) -> None:
        assert issubclass(error_type, AccountError)
        assert error_type("message").kind == kind

    def test_account_error_is_exception(self) -> None:
        assert issubclass(AccountError, Exception)

    def test_message_preserved(self) -> None:
        assert str(ConflictError("An account with this email already exists.")).startswith("An account")


class TestDomainPurity:
    """Tests for domain purity - zero framework imports."""

    @pytest.mark.parametrize(
        "pattern",
        ["from fastapi", "import fastapi", "from pydantic", "import pydantic", "from psycopg", "import psycopg"],
    )
    def test_no_framework_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, "src/domain/"],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"Framework import found: {result.stdout}"
