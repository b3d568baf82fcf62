"""
Account lifecycle domain service.

This module contains the core business logic for account identity and
credentials: signup, login checks, password change, profile update,
email verification, admin forced verification and deletion.

Verification State Machine
==========================

States (see models.VerificationStatus):
- Unverified:           no pending code, not verified
- PendingVerification:  code hash and expiry stored, not verified (signup)
- Verified:             terminal, idempotent

Transitions:
    PendingVerification -> Verified   (correct code before expiry)
    any                 -> Verified   (admin forced verification, admin seed)
    Verified            -> Verified   (verify_email again is a no-op)

A verification is always written as one ``verification`` field update, so the
pending code is cleared in the same write that marks the account verified.

The manager returns only sanitized ``Account`` views; credential hashes and
pending code hashes never leave this module.
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .admin import AdminPolicy
from .credentials import CredentialHasher
from .exceptions import (
    AuthError,
    ConflictError,
    DeliveryError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from .models import (
    CREDENTIAL_FIELDS,
    PROFILE_FIELDS,
    Account,
    AccountRecord,
    PendingVerification,
    StatEntry,
    UpcomingItem,
    Verified,
    coerce_stats,
    coerce_upcoming,
)
from .ports import AccountRepository, EmailSender
from .verification import Clock, VerificationCodeIssuer, utc_now

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass
class AccountLifecycleManager:
    """
    Domain service for account identity and credentials.

    Orchestrates the hasher, code issuer, admin policy, repository and
    email sender. It is the only entry point to account state.
    """

    repository: AccountRepository
    email_sender: EmailSender
    admin_policy: AdminPolicy
    hasher: CredentialHasher = field(default_factory=CredentialHasher)
    code_issuer: VerificationCodeIssuer = field(default_factory=VerificationCodeIssuer)
    clock: Clock = field(default=utc_now)

    def create_account(
        self,
        email: str,
        password: str,
        name: str,
        role: str = "",
        location: str = "",
        bio: str = "",
    ) -> Account:
        """
        Create an unverified account and email it a verification code.

        Args:
            email: Account email (uniqueness is case-insensitive)
            password: Plaintext password (will be hashed)
            name: Display name
            role, location, bio: Optional profile fields

        Returns:
            The new account, unverified

        Raises:
            ValidationError: If email, password or name is missing
            ConflictError: If the email is already taken
            ForbiddenError: If the email is the reserved admin address
            DeliveryError: If the verification email could not be sent;
                the account is removed again before raising
        """
        email = self._normalize_email(email)
        if not email or not password or not self._present(name):
            raise ValidationError("Missing required account fields.")
        if self.admin_policy.is_admin_email(email):
            raise ForbiddenError("This email address is reserved.")

        # Advisory only: the store's unique index is the authoritative check.
        if self.repository.get_by_email(email) is not None:
            raise ConflictError("An account with this email already exists.")

        issued = self.code_issuer.issue()
        record = AccountRecord(
            id=str(uuid.uuid4()),
            email=email,
            credential_hash=self.hasher.hash(password),
            verification=PendingVerification(
                code_hash=self.hasher.hash(issued.code),
                expires_at=issued.expires_at,
            ),
            name=name.strip(),
            role=role or "",
            location=location or "",
            bio=bio or "",
            created_at=self.clock(),
        )
        self.repository.insert(record)

        try:
            self.email_sender.send_verification_code(record.email, record.name, issued.code)
        except Exception as e:
            try:
                self.repository.delete(record.id)
            except Exception:
                logger.exception(
                    "Verification email failed for account %s and rollback failed; row left behind",
                    record.id,
                )
            else:
                logger.error("Verification email failed for account %s, creation rolled back", record.id)
            if isinstance(e, DeliveryError):
                raise
            raise DeliveryError(
                "We could not send your verification email. Please try again."
            ) from e

        logger.info("Account created: %s", record.id)
        return record.to_account()

    def verify_credentials(self, email: str, password: str) -> Account | None:
        """
        Check an email/password pair.

        Returns the account on success and None on any failure. Whether the
        account's email is verified is left for the caller to enforce.
        An unknown email still costs one hash verification so that response
        time does not reveal which emails are registered.
        """
        record = self.repository.get_by_email(self._normalize_email(email or ""))
        if record is None:
            self.hasher.verify(password or "", self.hasher.dummy_hash)
            return None
        if not self.hasher.verify(password, record.credential_hash):
            return None
        return record.to_account()

    def change_password(self, account_id: str, current_password: str, new_password: str) -> Account:
        """
        Replace the account's password.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If current password is empty, the new password is
                shorter than 8 characters, or both are equal
            AuthError: If the current password is wrong
        """
        record = self._require_by_id(account_id)

        if not isinstance(current_password, str) or not current_password:
            raise ValidationError("Please provide your current password.")
        if not self.hasher.verify(current_password, record.credential_hash):
            raise AuthError("Current password is incorrect.")
        if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        if new_password == current_password:
            raise ValidationError("New password must be different from the current password.")

        updated = self._update(record.id, {"credential_hash": self.hasher.hash(new_password)})
        logger.info("Password changed for account %s", record.id)
        return updated.to_account()

    def update_profile(self, account_id: str, fields: Mapping[str, Any]) -> Account:
        """
        Merge profile fields over the stored account.

        Fields that are absent or None keep their current value.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If a credential or non-profile field is given,
                or a value is malformed
            ConflictError: If the new email belongs to another account
            ForbiddenError: If the new email is the reserved admin address
        """
        record = self._require_by_id(account_id)

        if fields.keys() & CREDENTIAL_FIELDS:
            raise ValidationError("Use the password endpoint to update credentials.")
        unknown = sorted(set(fields) - PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(unknown)}")

        changes = {key: value for key, value in fields.items() if value is not None}
        if not changes:
            return record.to_account()

        try:
            changes = self._clean_profile(changes)
        except (KeyError, TypeError, AttributeError) as e:
            raise ValidationError("Malformed profile fields.") from e

        if "email" in changes and self.admin_policy.is_admin_email(changes["email"]):
            if not self.admin_policy.is_admin(record):
                raise ForbiddenError("This email address is reserved.")

        updated = self._update(record.id, changes)
        return updated.to_account()

    def verify_email(self, email: str, code: str) -> Account:
        """
        Prove ownership of an email with the code sent at signup.

        Already-verified accounts are returned unchanged without checking
        the code.

        Raises:
            ValidationError: If email or code is missing, or no code is pending
            NotFoundError: If no account carries the email
            ExpiredError: If the code's window has elapsed
            AuthError: If the code is wrong
        """
        if not email or not code:
            raise ValidationError("Specify email and verification code.")

        record = self.repository.get_by_email(self._normalize_email(email))
        if record is None:
            raise NotFoundError("Account not found.")

        if record.email_verified:
            return record.to_account()

        pending = record.pending_verification
        if pending is None:
            raise ValidationError("No verification request found for this account.")

        if self.clock() >= pending.expires_at:
            raise ExpiredError("Verification code has expired.")

        if not self.hasher.verify(code, pending.code_hash):
            raise AuthError("Verification code is incorrect.")

        updated = self._update(record.id, {"verification": Verified()})
        logger.info("Email verified for account %s", record.id)
        return updated.to_account()

    def force_verify(self, account_id: str) -> Account:
        """
        Mark an account verified without a code.

        Authorization (admin only) is the caller's responsibility.

        Raises:
            NotFoundError: If the account does not exist
        """
        record = self._require_by_id(account_id)
        if record.email_verified:
            return record.to_account()

        updated = self._update(record.id, {"verification": Verified()})
        logger.info("Account %s verified by admin", record.id)
        return updated.to_account()

    def delete_account(self, account_id: str) -> None:
        """
        Delete an account and every piece of content it authored.

        Raises:
            NotFoundError: If the account does not exist
            ForbiddenError: If the account is the admin account
        """
        record = self._require_by_id(account_id)

        if self.admin_policy.is_admin(record):
            logger.warning("Refused to delete admin account %s", record.id)
            raise ForbiddenError("Admin account cannot be deleted.")

        if not self.repository.delete_with_content(record.id):
            raise NotFoundError("Account not found.")
        logger.info("Account deleted: %s", record.id)

    def get_account(self, account_id: str) -> Account:
        """Return one account, raising NotFoundError if unknown."""
        return self._require_by_id(account_id).to_account()

    def list_accounts(self) -> list[Account]:
        return [record.to_account() for record in self.repository.list_all()]

    def is_admin(self, account: Account | None) -> bool:
        return self.admin_policy.is_admin(account)

    def seed_admin_account(
        self,
        password: str,
        name: str,
        role: str = "",
        location: str = "",
        bio: str = "",
        stats: tuple[StatEntry, ...] = (),
        focus_areas: tuple[str, ...] = (),
        upcoming: tuple[UpcomingItem, ...] = (),
    ) -> Account:
        """
        Ensure the admin account exists and is verified.

        Creates a pre-verified account for the configured admin email if none
        exists. An existing unverified row gets the seed password and is
        marked verified; a verified admin keeps its password.
        Safe to call on every startup.
        """
        admin_email = self._normalize_email(self.admin_policy.admin_email)
        if not admin_email:
            raise ValidationError("Admin email is not configured.")

        existing = self.repository.get_by_email(admin_email)
        if existing is not None:
            return self._adopt_admin_row(existing, password)

        record = AccountRecord(
            id=str(uuid.uuid4()),
            email=admin_email,
            credential_hash=self.hasher.hash(password),
            verification=Verified(),
            name=name,
            role=role,
            location=location,
            bio=bio,
            stats=coerce_stats(stats),
            focus_areas=tuple(focus_areas),
            upcoming=coerce_upcoming(upcoming),
            created_at=self.clock(),
        )
        try:
            self.repository.insert(record)
        except ConflictError:
            # Another process seeded first
            existing = self.repository.get_by_email(admin_email)
            if existing is None:
                raise
            return self._adopt_admin_row(existing, password)

        logger.info("Admin account seeded: %s", record.id)
        return record.to_account()

    def _adopt_admin_row(self, record: AccountRecord, password: str) -> Account:
        if record.email_verified:
            return record.to_account()
        updated = self._update(
            record.id,
            {"credential_hash": self.hasher.hash(password), "verification": Verified()},
        )
        logger.warning("Unverified admin account %s reset by seed", record.id)
        return updated.to_account()

    def _require_by_id(self, account_id: str) -> AccountRecord:
        if not account_id:
            raise ValidationError("Missing account id.")
        record = self.repository.get_by_id(account_id)
        if record is None:
            raise NotFoundError("Account not found.")
        return record

    def _update(self, account_id: str, fields: Mapping[str, Any]) -> AccountRecord:
        updated = self.repository.update(account_id, fields)
        if updated is None:
            # Removed between lookup and write
            raise NotFoundError("Account not found.")
        return updated

    def _clean_profile(self, changes: dict[str, Any]) -> dict[str, Any]:
        cleaned = dict(changes)
        if "email" in cleaned:
            cleaned["email"] = self._normalize_email(cleaned["email"])
            if not cleaned["email"]:
                raise ValidationError("Email cannot be empty.")
        if "name" in cleaned:
            cleaned["name"] = cleaned["name"].strip()
            if not cleaned["name"]:
                raise ValidationError("Name cannot be empty.")
        for key in ("role", "location", "bio"):
            if key in cleaned:
                cleaned[key] = str(cleaned[key])
        if "stats" in cleaned:
            cleaned["stats"] = coerce_stats(cleaned["stats"])
        if "focus_areas" in cleaned:
            if isinstance(cleaned["focus_areas"], str):
                raise ValidationError("Focus areas must be a list.")
            cleaned["focus_areas"] = tuple(str(area) for area in cleaned["focus_areas"])
        if "upcoming" in cleaned:
            cleaned["upcoming"] = coerce_upcoming(cleaned["upcoming"])
        return cleaned

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email for storage and lookup.

        Only surrounding whitespace is removed; case is preserved for
        display and ignored by lookups and the uniqueness constraint.
        """
        return email.strip() if isinstance(email, str) else ""

    def _present(self, value: str) -> bool:
        return isinstance(value, str) and bool(value.strip())
