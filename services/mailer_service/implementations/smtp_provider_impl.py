"""SMTP email provider.

Sends multipart (plain text + HTML) messages through aiosmtplib. Credentials
are read from mounted secret files at send time so rotated secrets are
picked up without a restart.
"""

from __future__ import annotations

from email.message import EmailMessage
from pathlib import Path

import aiosmtplib
from library_service_libs.logging_utils import create_service_logger

from services.mailer_service.config import Settings
from services.mailer_service.implementations.template_renderer_impl import html_to_text
from services.mailer_service.protocols import EmailProvider, EmailSendResult

logger = create_service_logger("mailer_service.smtp_provider")


def read_secret(path: str) -> str:
    """Read a secret file, stripping the trailing newline editors add."""
    return Path(path).read_text(encoding="utf-8").strip()


class SMTPEmailProvider(EmailProvider):
    def __init__(self, settings: Settings):
        self.settings = settings

    def _credentials(self) -> tuple[str, str]:
        username = read_secret(self.settings.SMTP_USERNAME_FILE)
        password = read_secret(self.settings.SMTP_PASSWORD_FILE)
        if not username or not password:
            raise ValueError("SMTP username and password secrets must not be empty")
        return username, password

    async def send_email(
        self,
        to: str,
        subject: str,
        html_content: str,
        text_content: str | None = None,
    ) -> EmailSendResult:
        try:
            username, password = self._credentials()
        except (OSError, ValueError) as e:
            error_msg = f"SMTP credentials unavailable: {e}"
            logger.error(error_msg)
            return EmailSendResult(success=False, error_message=error_msg)

        msg = EmailMessage()
        msg["From"] = f"{self.settings.DEFAULT_FROM_NAME} <{username}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text_content or html_to_text(html_content), charset="utf-8")
        msg.add_alternative(html_content, subtype="html", charset="utf-8")

        try:
            async with aiosmtplib.SMTP(
                hostname=self.settings.SMTP_HOST,
                port=self.settings.SMTP_PORT,
                start_tls=self.settings.SMTP_USE_TLS,
                timeout=self.settings.SMTP_TIMEOUT,
            ) as smtp:
                await smtp.login(username, password)
                refused, response = await smtp.send_message(msg)
        except aiosmtplib.SMTPAuthenticationError as e:
            error_msg = f"SMTP authentication failed: {e}"
            logger.error(error_msg, exc_info=True)
            return EmailSendResult(success=False, error_message=error_msg)
        except aiosmtplib.SMTPConnectError as e:
            error_msg = f"SMTP connection failed: {e}"
            logger.error(error_msg, exc_info=True)
            return EmailSendResult(success=False, error_message=error_msg)
        except aiosmtplib.SMTPException as e:
            error_msg = f"SMTP error: {e}"
            logger.error(f"SMTP send failed to {to}: {error_msg}", exc_info=True)
            return EmailSendResult(success=False, error_message=error_msg)

        if refused:
            details = "; ".join(f"{addr}: {error}" for addr, error in refused.items())
            logger.error(f"SMTP recipient refused: {details}")
            return EmailSendResult(success=False, error_message=f"Recipient refused: {details}")

        logger.info(
            "Email sent via SMTP",
            to=to,
            subject=subject,
            smtp_host=self.settings.SMTP_HOST,
            response=response,
        )
        return EmailSendResult(success=True)
