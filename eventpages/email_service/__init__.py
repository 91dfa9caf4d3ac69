from eventpages.config.settings import settings
from eventpages.email_service.base import EmailServiceBase
from eventpages.email_service.resend_service import ResendEmailService
from eventpages.email_service.smtp_service import SMTPEmailService
from eventpages.email_service.templates import EmailTemplates


def get_email_service() -> EmailServiceBase:
    if settings.resend_api_key:
        return ResendEmailService(config=settings)
    return SMTPEmailService(config=settings)


__all__ = [
    "EmailServiceBase",
    "EmailTemplates",
    "get_email_service",
]
