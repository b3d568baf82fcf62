"""
Unit tests for VerificationCodeIssuer.

Tests verify code format, randomness and the expiry window.
"""

import re
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from src.domain.verification import VerificationCodeIssuer, utc_now


class TestCodeFormat:
    """Tests for the 6-digit code."""

    def test_code_is_six_digits(self) -> None:
        issued = VerificationCodeIssuer().issue()
        assert re.match(r"^\d{6}$", issued.code)

    def test_code_is_string(self) -> None:
        assert isinstance(VerificationCodeIssuer().issue().code, str)

    def test_code_never_starts_with_zero(self) -> None:
        issuer = VerificationCodeIssuer()
        for _ in range(200):
            assert issuer.issue().code[0] != "0"

    def test_code_range_lower_bound(self) -> None:
        """Smallest draw maps to 100000."""
        with patch("src.domain.verification.secrets.randbelow", return_value=0):
            assert VerificationCodeIssuer().issue().code == "100000"

    def test_code_range_upper_bound(self) -> None:
        """Largest draw maps to 999999."""
        with patch("src.domain.verification.secrets.randbelow", return_value=899_999):
            assert VerificationCodeIssuer().issue().code == "999999"

    def test_draws_from_900000_values(self) -> None:
        """Uniform draw over the full 100000-999999 range."""
        with patch("src.domain.verification.secrets.randbelow", return_value=5) as randbelow:
            VerificationCodeIssuer().issue()
        randbelow.assert_called_once_with(900_000)

    def test_codes_vary(self) -> None:
        issuer = VerificationCodeIssuer()
        codes = {issuer.issue().code for _ in range(10)}
        assert len(codes) >= 2


class TestExpiry:
    """Tests for the verification window."""

    def test_default_window_is_ten_minutes(self) -> None:
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        issued = VerificationCodeIssuer(clock=lambda: now).issue()
        assert issued.expires_at == now + timedelta(minutes=10)

    def test_custom_window(self) -> None:
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        issued = VerificationCodeIssuer(ttl=timedelta(seconds=30), clock=lambda: now).issue()
        assert issued.expires_at == now + timedelta(seconds=30)

    def test_default_clock_is_timezone_aware_utc(self) -> None:
        issued = VerificationCodeIssuer().issue()
        assert issued.expires_at.tzinfo is not None
        assert issued.expires_at - utc_now() <= timedelta(minutes=10)
