"""In-memory auth backend for testing - no database or email required."""

from datetime import timedelta
from uuid import uuid4

from eventpages.auth.backend import SIGNUP_CONFIRMATION_TYPE, AuthBackend, utc_now
from eventpages.auth.dtos import AuthError, AuthErrorCode, AuthSession, Identity, SignUpResult


class InMemoryAuthBackend(AuthBackend):
    def __init__(self, clock=None, token_lifetime=timedelta(hours=1), require_confirmation=True):
        self.clock = clock or utc_now
        self.token_lifetime = token_lifetime
        self.require_confirmation = require_confirmation
        self.users: dict[str, dict] = {}
        self.sessions: dict[str, AuthSession] = {}
        self.confirmation_tokens: dict[str, str] = {}

    def add_user(self, email: str, password: str, confirmed: bool = True) -> Identity:
        identity = Identity(id=uuid4(), email=email)
        self.users[email] = {"identity": identity, "password": password, "confirmed": confirmed}
        return identity

    def issue(self, identity: Identity) -> AuthSession:
        session = AuthSession(
            identity=identity,
            access_token=f"token-{uuid4()}",
            expires_at=self.clock() + self.token_lifetime,
        )
        self.sessions[session.access_token] = session
        return session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        user = self.users.get(email)
        if user is None or user["password"] != password:
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS, "Invalid login credentials")
        if not user["confirmed"]:
            raise AuthError(AuthErrorCode.EMAIL_NOT_CONFIRMED, "Email not confirmed")
        return self.issue(user["identity"])

    async def sign_up(self, email: str, password: str, full_name: str | None = None) -> SignUpResult:
        if email in self.users:
            raise AuthError(AuthErrorCode.EMAIL_ALREADY_EXISTS, "User already registered")
        if len(password) < 6:
            raise AuthError(AuthErrorCode.WEAK_PASSWORD, "Password too short", min_length=6)
        identity = self.add_user(email, password, confirmed=not self.require_confirmation)
        if self.require_confirmation:
            self.confirmation_tokens[f"confirm-{identity.id}"] = email
        return SignUpResult(
            user_id=identity.id, email=email, confirmation_required=self.require_confirmation
        )

    async def resolve(self, access_token: str) -> AuthSession | None:
        session = self.sessions.get(access_token)
        if session is None or session.expires_at <= self.clock():
            return None
        return session

    async def revoke(self, access_token: str) -> None:
        self.sessions.pop(access_token, None)

    async def confirm_email(self, token: str, type_: str = SIGNUP_CONFIRMATION_TYPE) -> Identity:
        email = self.confirmation_tokens.pop(token, None)
        if type_ != SIGNUP_CONFIRMATION_TYPE or email is None:
            raise AuthError(AuthErrorCode.CONFIRMATION_INVALID, "Token has expired or is invalid")
        self.users[email]["confirmed"] = True
        return self.users[email]["identity"]
