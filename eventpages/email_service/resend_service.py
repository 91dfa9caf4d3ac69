import logging
from typing import Protocol

import httpx

from eventpages.email_service.base import EmailServiceBase
from eventpages.email_service.templates import EmailTemplates

logger = logging.getLogger(__name__)

RESEND_EMAILS_URL = "https://api.resend.com/emails"


class ResendEmailConfig(Protocol):
    resend_api_key: str
    emails_from: str


class ResendEmailService(EmailServiceBase):
    def __init__(
        self,
        config: ResendEmailConfig,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._config = config
        self._http_client_class = http_client_class

    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> str:
        """Send email via Resend and return the Resend email id."""
        async with self._http_client_class() as client:
            response = await client.post(
                RESEND_EMAILS_URL,
                headers={
                    "Authorization": f"Bearer {self._config.resend_api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self._config.emails_from,
                    "to": [to_address],
                    "subject": subject,
                    "html": html_body,
                    "text": text_body,
                },
            )
            response.raise_for_status()

        resend_email_id = response.json().get("id")
        logger.info(f"Sent '{subject}' to {to_address} (resend id {resend_email_id})")
        return resend_email_id

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

        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
        )
