"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from .models import AccountRecord


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def get_by_email(self, email: str) -> AccountRecord | None:
        """
        Look up an account by email, ignoring case.

        Args:
            email: Email address as entered (surrounding whitespace stripped)

        Returns:
            The stored record, or None if no account carries that email
        """
        ...

    def get_by_id(self, account_id: str) -> AccountRecord | None:
        """Look up an account by id."""
        ...

    def list_all(self) -> list[AccountRecord]:
        """Return every account, oldest first."""
        ...

    def insert(self, record: AccountRecord) -> None:
        """
        Persist a new account.

        Email uniqueness (case-insensitive) is enforced by the store itself,
        so a duplicate is rejected even if a caller's pre-check raced.

        Raises:
            ConflictError: If an account with the same email exists
        """
        ...

    def update(self, account_id: str, fields: Mapping[str, Any]) -> AccountRecord | None:
        """
        Overwrite the given fields of an account.

        Args:
            account_id: Target account id
            fields: AccountRecord attribute names mapped to new values.
                ``verification`` is written as a single unit.

        Returns:
            The updated record, or None if the account does not exist

        Raises:
            ConflictError: If an email change collides with another account
        """
        ...

    def delete(self, account_id: str) -> bool:
        """
        Remove the account row only.

        Returns:
            True if a row was removed
        """
        ...

    def delete_with_content(self, account_id: str) -> bool:
        """
        Remove all content authored by the account, then the account.

        Events, blog posts, blog comments and messages referencing the
        account are removed before the account row, in one atomic unit
        where the store supports it.

        Returns:
            True if the account row was removed
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        """
        Send verification code to email address.

        Args:
            email: Recipient email address
            name: Recipient display name
            code: 6-digit verification code

        Raises:
            DeliveryError: If the message could not be handed to the channel
        """
        ...
