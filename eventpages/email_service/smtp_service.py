import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from eventpages.email_service.base import EmailServiceBase
from eventpages.email_service.templates import EmailTemplates

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10


class SMTPEmailConfig(Protocol):
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    emails_from: str


class SMTPEmailService(EmailServiceBase):
    """Sends through a plain SMTP relay; STARTTLS and login only when credentials are set."""

    def __init__(
        self,
        config: SMTPEmailConfig,
        smtp_class: type[smtplib.SMTP] = smtplib.SMTP,
    ):
        self._config = config
        self._smtp_class = smtp_class

    def _create_message(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.emails_from
        msg["To"] = to_address
        msg.set_content(text_body)
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _send(self, msg: EmailMessage) -> None:
        config = self._config
        with self._smtp_class(config.smtp_host, config.smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as server:
            if config.smtp_user and config.smtp_password:
                server.starttls()
                server.login(config.smtp_user, config.smtp_password)
            server.send_message(msg)
        logger.info(f"Sent '{msg['Subject']}' to {msg['To']} via {config.smtp_host}")

    async def send_signup_confirmation(
        self,
        to_address: str,
        recipient_name: str,
        confirm_url: str,
    ) -> None:
        subject, html_body, text_body = EmailTemplates.render_signup_confirmation(
            recipient_name=recipient_name,
            confirm_url=confirm_url,
        )
        msg = self._create_message(to_address, subject, html_body, text_body)
        # smtplib blocks
        await asyncio.to_thread(self._send, msg)
