"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging verification codes for local development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Never fails, so account creation always succeeds with this backend.
    """

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        """
        Log verification code (simulates email delivery).

        Args:
            email: Recipient email address
            name: Recipient display name
            code: 6-digit verification code
        """
        logger.info("[VERIFICATION] Email: %s Name: %s Code: %s", email, name, code)
