"""Email service — delivers OTP codes via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from ride_gateway.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional emails using the configured SMTP server.

    Implements the OTP ``Notifier`` interface through :meth:`send_otp`.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    def build_otp_message(self, to_email: str, code: str) -> EmailMessage:
        """Compose the plain-text + HTML passcode email."""
        minutes = self._config.otp_ttl_seconds // 60

        msg = EmailMessage()
        msg["Subject"] = "Your OTP Code"
        msg["From"] = self._config.email_from
        msg["To"] = to_email
        msg.set_content(f"Your OTP code is {code}. It is valid for {minutes} minutes.")
        msg.add_alternative(
            f"""\
<div style="font-family: Arial, sans-serif; padding: 10px;">
  <h2>Your OTP Code</h2>
  <p><strong>{code}</strong> is your one-time password.</p>
  <p>This code will expire in <strong>{minutes} minutes</strong>.</p>
</div>
""",
            subtype="html",
        )
        return msg

    async def send_otp(self, identity: str, code: str) -> None:
        """Email *code* to *identity*.

        Raises ``aiosmtplib.SMTPException`` (or an ``OSError``) when the
        server cannot be reached or rejects the message.
        """
        msg = self.build_otp_message(identity, code)

        logger.info("Sending OTP email to %s", identity)

        await aiosmtplib.send(
            msg,
            hostname=self._config.smtp_host,
            port=self._config.smtp_port,
            username=self._config.smtp_username or None,
            password=self._config.smtp_password or None,
            start_tls=True,
        )

        logger.info("OTP email sent to %s", identity)
