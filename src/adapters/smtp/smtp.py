"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers verification codes through an SMTP relay. Any transport failure
is reported as the domain's DeliveryError so the account service can roll
back the signup that triggered it.
"""

import logging
import smtplib
from email.message import EmailMessage
from html import escape

from src.domain.exceptions import DeliveryError

logger = logging.getLogger(__name__)

SUBJECT = "Your SportConnect X verification code"

_TEXT_TEMPLATE = """Hi {name},

Your SportConnect X verification code is: {code}

This code expires in 10 minutes. If you didn't request it, you can safely ignore this email.
"""

_HTML_TEMPLATE = """\
<html>
  <body style="font-family:Helvetica,Arial,sans-serif;background:#04111f;color:#e7f2ff;padding:32px;">
    <h1 style="font-size:24px;">Confirm your email, {name}</h1>
    <p>Enter this code to unlock the SportConnect X community:</p>
    <p style="font-size:28px;font-weight:700;letter-spacing:0.4em;">{spaced_code}</p>
    <p style="font-size:14px;">This code expires in 10 minutes.
       If you didn't request it, you can safely ignore this email.</p>
  </body>
</html>
"""


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    A new connection is opened per message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_ssl: bool = False,
        starttls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_ssl = use_ssl
        self._starttls = starttls
        self._timeout = timeout

    def build_message(self, email: str, name: str, code: str) -> EmailMessage:
        """Compose the verification message with text and HTML parts."""
        display_name = name or "SportConnect X member"
        message = EmailMessage()
        message["Subject"] = SUBJECT
        message["From"] = self._sender
        message["To"] = email
        message.set_content(_TEXT_TEMPLATE.format(name=display_name, code=code))
        message.add_alternative(
            _HTML_TEMPLATE.format(name=escape(display_name), spaced_code=" ".join(code)),
            subtype="html",
        )
        return message

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        """
        Send the verification code.

        Raises:
            DeliveryError: If the relay cannot be reached or rejects the message
        """
        message = self.build_message(email, name, code)
        try:
            with self._connect() as smtp:
                if self._starttls and not self._use_ssl:
                    smtp.starttls()
                if self._username and self._password:
                    smtp.login(self._username, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP delivery to %s failed: %s", email, e)
            raise DeliveryError("Failed to deliver verification email.") from e

        logger.info("Verification email sent to %s", email)

    def _connect(self) -> smtplib.SMTP:
        if self._use_ssl:
            return smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        return smtplib.SMTP(self._host, self._port, timeout=self._timeout)
