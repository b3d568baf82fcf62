"""
Verification code issuance.

Codes are 6-digit numeric strings drawn uniformly from 100000-999999 with
the secrets module, so they never start with a zero. Only the code's hash
is ever persisted; the plaintext goes to the email channel and nowhere else.
"""

import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

CODE_MIN = 100_000
CODE_MAX = 999_999
DEFAULT_TTL = timedelta(minutes=10)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IssuedCode:
    code: str
    expires_at: datetime


@dataclass
class VerificationCodeIssuer:
    """Issues verification codes valid for a fixed window."""

    ttl: timedelta = DEFAULT_TTL
    clock: Clock = field(default=utc_now)

    def issue(self) -> IssuedCode:
        code = str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))
        return IssuedCode(code=code, expires_at=self.clock() + self.ttl)
