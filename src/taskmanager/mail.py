"""Outgoing mail for the password recovery flow.

Learn: Mailer wraps aiosmtplib so sending never blocks the event loop.
Routes get it through the get_mailer dependency, which tests override
with a recording fake. Any SMTP failure surfaces as MailDeliveryError.
"""

from email.message import EmailMessage

import aiosmtplib
import structlog

from taskmanager.config import settings
from taskmanager.errors import MailDeliveryError

logger = structlog.get_logger()


TEMP_PASSWORD_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; background-color: #f4f4f9;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px; background: #ffffff; text-align: center;">
    <p>Your temporary password is: <strong>{password}</strong></p>
    <p>Access this link to change it: <a href="{url}">{url}</a></p>
  </div>
</body>
</html>
"""


def render_temporary_password(password: str, change_url: str | None = None) -> str:
    url = change_url or settings.password_change_url
    return TEMP_PASSWORD_TEMPLATE.format(password=password, url=url)


class Mailer:
    """SMTP sender configured from TASKMANAGER_SMTP_* settings."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        start_tls: bool | None = None,
        sender: str | None = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.start_tls = settings.smtp_start_tls if start_tls is None else start_tls
        self.sender = sender or settings.mail_from

    async def send(self, to: str, subject: str, html: str) -> None:
        """Send one HTML message. Raises MailDeliveryError on any SMTP error."""
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("mail.send_failed", to=to, error=str(e))
            raise MailDeliveryError() from e

        logger.info("mail.sent", to=to, subject=subject)


def get_mailer() -> Mailer:
    """FastAPI dependency — a Mailer built from settings."""
    return Mailer()
