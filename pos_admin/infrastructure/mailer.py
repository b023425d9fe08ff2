"""
Outgoing e-mail for the password reset flow.
"""

import smtplib
from email.message import EmailMessage

from pos_admin.core.config import Settings, get_settings
from pos_admin.core.logging_config import get_logger

logger = get_logger("mailer")


class Mailer:
    """Logs messages instead of sending them; used when no SMTP host is set."""

    def __init__(self):
        self.outbox: list[EmailMessage] = []

    def send(self, to: str, subject: str, body: str) -> None:
        message = self._build(to, subject, body, get_settings().mail_from)
        self.outbox.append(message)
        logger.info("email_queued", extra={"to": to, "subject": subject})

    @staticmethod
    def _build(to: str, subject: str, body: str, sender: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message


class SmtpMailer(Mailer):
    def __init__(self, settings: Settings):
        super().__init__()
        self.settings = settings

    def send(self, to: str, subject: str, body: str) -> None:
        message = self._build(to, subject, body, self.settings.mail_from)
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port) as smtp:
            smtp.starttls()
            if self.settings.smtp_user:
                smtp.login(self.settings.smtp_user, self.settings.smtp_password or "")
            smtp.send_message(message)
        logger.info("email_sent", extra={"to": to, "subject": subject})


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """Dependency - process-wide mailer."""
    global _mailer
    if _mailer is None:
        settings = get_settings()
        _mailer = SmtpMailer(settings) if settings.smtp_host else Mailer()
    return _mailer
