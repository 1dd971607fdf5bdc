# foodshare/services/mailer.py
import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage

from starlette.concurrency import run_in_threadpool

from foodshare.core.config import Settings
from foodshare.core.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class Mailer(ABC):
    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one HTML message. Raises EmailDeliveryError when it cannot."""


class LogMailer(Mailer):
    """Development fallback: writes the message to the log instead of sending it."""

    def __init__(self, sender: str):
        self.sender = sender

    async def send(self, to: str, subject: str, html: str) -> None:
        logger.info(
            "----------- EMAIL -----------\nFrom: %s\nTo: %s\nSubject: %s\n%s\n-----------------------------",
            self.sender, to, subject, html,
        )


class SmtpMailer(Mailer):
    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.starttls = settings.smtp_starttls
        self.sender = settings.email_from

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)

    async def send(self, to: str, subject: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html, subtype="html")
        try:
            await run_in_threadpool(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Email to %s failed: %s", to, exc)
            raise EmailDeliveryError() from exc
        logger.info("Email %r sent to %s", subject, to)


def build_mailer(settings: Settings) -> Mailer:
    if settings.smtp_host:
        return SmtpMailer(settings)
    logger.info("SMTP_HOST not set, emails will be written to the log")
    return LogMailer(settings.email_from)
