"""Admin designation - the single administrator is identified by email."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AdminPolicy:
    """
    Decides whether an account is the platform administrator.

    Identity is derived from the email on every call, never cached. The
    configured address is reserved: only the seeded admin account may carry it.
    """

    admin_email: str

    def is_admin(self, account) -> bool:
        if account is None:
            return False
        return self.is_admin_email(getattr(account, "email", None))

    def is_admin_email(self, email) -> bool:
        """True if email is the configured admin address (case-insensitive)."""
        if not isinstance(email, str) or not email.strip() or not self.admin_email:
            return False
        return email.strip().lower() == self.admin_email.strip().lower()
