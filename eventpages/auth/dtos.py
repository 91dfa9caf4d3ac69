from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class AuthErrorCode(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    RATE_LIMITED = "over_email_send_rate_limit"
    WEAK_PASSWORD = "weak_password"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    SIGNUP_DISABLED = "signup_disabled"
    CONFIRMATION_INVALID = "otp_expired"


AUTH_ERROR_MESSAGES = {
    AuthErrorCode.RATE_LIMITED: (
        "Too many email attempts. Wait a few minutes before trying again."
    ),
    AuthErrorCode.EMAIL_NOT_CONFIRMED: "Email not confirmed. Check your inbox and spam folder.",
    AuthErrorCode.INVALID_CREDENTIALS: "Incorrect email or password.",
    AuthErrorCode.WEAK_PASSWORD: "The password must be at least {min_length} characters long.",
    AuthErrorCode.EMAIL_ALREADY_EXISTS: "This email is already registered. Try signing in.",
    AuthErrorCode.SIGNUP_DISABLED: "Sign up is temporarily disabled. Try again later.",
    AuthErrorCode.CONFIRMATION_INVALID: "The confirmation link is invalid or has expired.",
}

GENERIC_AUTH_MESSAGE = "Unknown error. Please try again."


class AuthError(Exception):
    """Authentication failure carrying a machine-readable code."""

    def __init__(self, code: AuthErrorCode | str | None, message: str = "", **context) -> None:
        self.code = code.value if isinstance(code, AuthErrorCode) else code
        self.message = message
        self.context = context
        super().__init__(message or str(self.code))

    @property
    def user_message(self) -> str:
        """Message for the person at the keyboard; unknown codes fall back to the raw text."""
        try:
            template = AUTH_ERROR_MESSAGES[AuthErrorCode(self.code)]
        except ValueError:
            return self.message or GENERIC_AUTH_MESSAGE
        if self.code == AuthErrorCode.WEAK_PASSWORD.value:
            return template.format(min_length=self.context.get("min_length", 6))
        return template


class NotAuthenticatedError(Exception):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self) -> None:
        super().__init__("Not authenticated")


@dataclass(frozen=True)
class Identity:
    id: UUID
    email: str


@dataclass(frozen=True)
class AuthSession:
    identity: Identity
    access_token: str
    expires_at: datetime


@dataclass(frozen=True)
class SignUpResult:
    user_id: UUID
    email: str
    confirmation_required: bool


@dataclass(frozen=True)
class TokenClaims:
    """What a valid access token says about itself."""

    identity: Identity
    expires_at: datetime
    token_id: str
