import json
from functools import partial

import httpx
import pytest

from eventpages.email_service.resend_service import RESEND_EMAILS_URL, ResendEmailService
from eventpages.email_service.smtp_service import SMTPEmailService
from eventpages.email_service.templates import EmailTemplates


class ResendConfig:
    resend_api_key = "re_test_key"
    emails_from = "Event Pages <no-reply@example.com>"


class SMTPConfig:
    smtp_host = "smtp.example.com"
    smtp_port = 587
    smtp_user = ""
    smtp_password = ""
    emails_from = "no-reply@example.com"


CONFIRM_URL = "http://localhost:5173/confirm-email?token=abc&type=signup"


def test_confirmation_template_contains_link_and_name():
    subject, html_body, text_body = EmailTemplates.render_signup_confirmation("Ana", CONFIRM_URL)

    assert subject == EmailTemplates.SIGNUP_CONFIRMATION_SUBJECT
    assert "Hi Ana" in html_body
    assert f'href="{CONFIRM_URL}"' in html_body
    assert CONFIRM_URL in text_body


@pytest.mark.asyncio
async def test_resend_posts_confirmation_email():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "email_123"})

    client_class = partial(httpx.AsyncClient, transport=httpx.MockTransport(handler))
    service = ResendEmailService(config=ResendConfig(), http_client_class=client_class)

    await service.send_signup_confirmation("ana@example.com", "Ana", CONFIRM_URL)

    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == RESEND_EMAILS_URL
    assert request.headers["Authorization"] == "Bearer re_test_key"
    payload = json.loads(request.content)
    assert payload["to"] == ["ana@example.com"]
    assert payload["from"] == ResendConfig.emails_from
    assert CONFIRM_URL in payload["text"]


@pytest.mark.asyncio
async def test_resend_error_status_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "invalid from address"})

    client_class = partial(httpx.AsyncClient, transport=httpx.MockTransport(handler))
    service = ResendEmailService(config=ResendConfig(), http_client_class=client_class)

    with pytest.raises(httpx.HTTPStatusError):
        await service.send_signup_confirmation("ana@example.com", "Ana", CONFIRM_URL)


def test_smtp_message_has_text_and_html_parts():
    service = SMTPEmailService(config=SMTPConfig())
    subject, html_body, text_body = EmailTemplates.render_signup_confirmation("Ana", CONFIRM_URL)

    msg = service._create_message("ana@example.com", subject, html_body, text_body)

    assert msg["To"] == "ana@example.com"
    assert msg["Subject"] == subject
    assert [part.get_content_type() for part in msg.get_payload()] == ["text/plain", "text/html"]


class RecordingSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))

    def send_message(self, msg):
        self.calls.append(("send", msg["To"]))


@pytest.mark.asyncio
async def test_smtp_send_without_credentials_skips_login():
    RecordingSMTP.instances = []
    service = SMTPEmailService(config=SMTPConfig(), smtp_class=RecordingSMTP)

    await service.send_signup_confirmation("ana@example.com", "Ana", CONFIRM_URL)

    [server] = RecordingSMTP.instances
    assert (server.host, server.port) == ("smtp.example.com", 587)
    assert server.calls == [("send", "ana@example.com")]


@pytest.mark.asyncio
async def test_smtp_send_with_credentials_uses_starttls():
    RecordingSMTP.instances = []
    config = SMTPConfig()
    config.smtp_user = "mailer"
    config.smtp_password = "secret"
    service = SMTPEmailService(config=config, smtp_class=RecordingSMTP)

    await service.send_signup_confirmation("ana@example.com", "Ana", CONFIRM_URL)

    assert RecordingSMTP.instances[0].calls == ["starttls", ("login", "mailer"), ("send", "ana@example.com")]
