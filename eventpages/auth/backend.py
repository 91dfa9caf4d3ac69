"""Authentication against the users table.

Sign-in hands back a signed access token; the token itself is the session.
Resolving it only checks that sign-out did not revoke it.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from functools import partial
from urllib.parse import urlencode

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventpages.auth.dtos import (
    AuthError,
    AuthErrorCode,
    AuthSession,
    Identity,
    SignUpResult,
)
from eventpages.auth.security import (
    create_access_token,
    decode_access_token,
    generate_confirmation_token,
    hash_password,
    verify_password,
)
from eventpages.config.database import async_session_manager
from eventpages.config.settings import Settings, settings
from eventpages.email_service.base import EmailServiceBase
from eventpages.models.revoked_token import RevokedToken
from eventpages.models.user import User

logger = logging.getLogger(__name__)

SIGNUP_CONFIRMATION_TYPE = "signup"


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands timestamps back without tzinfo; they were written as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class AuthBackend(ABC):
    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Check the credentials and issue an access token.

        Raises AuthError with INVALID_CREDENTIALS or EMAIL_NOT_CONFIRMED.
        """
        raise NotImplementedError

    @abstractmethod
    async def sign_up(self, email: str, password: str, full_name: str | None = None) -> SignUpResult:
        """Register a user. Never signs the user in."""
        raise NotImplementedError

    @abstractmethod
    async def resolve(self, access_token: str) -> AuthSession | None:
        """Return the session a token stands for, None when it is invalid."""
        raise NotImplementedError

    @abstractmethod
    async def revoke(self, access_token: str) -> None:
        """End the session behind a token so later resolves reject it."""
        raise NotImplementedError

    @abstractmethod
    async def confirm_email(self, token: str, type_: str = SIGNUP_CONFIRMATION_TYPE) -> Identity:
        """Mark the address behind a confirmation token as confirmed."""
        raise NotImplementedError


class SqlAuthBackend(AuthBackend):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        email_service: EmailServiceBase | None = None,
        config: Settings = settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.email_service = email_service
        self.config = config
        self.clock = clock

    def _issue(self, user: User) -> AuthSession:
        identity = Identity(id=user.id, email=user.email)
        expires_at = self.clock() + timedelta(minutes=self.config.access_token_expire_minutes)
        return AuthSession(
            identity=identity,
            access_token=create_access_token(identity, expires_at),
            expires_at=expires_at,
        )

    async def _get_user_by_email(self, session, email: str) -> User | None:
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def sign_in(self, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            user = await self._get_user_by_email(session, email)

        if user is None or not user.is_active or not verify_password(password, user.hashed_password):
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS, "Invalid login credentials")
        if self.config.require_email_confirmation and user.email_confirmed_at is None:
            raise AuthError(AuthErrorCode.EMAIL_NOT_CONFIRMED, "Email not confirmed")

        logger.info(f"User {user.id} signed in")
        return self._issue(user)

    async def sign_up(self, email: str, password: str, full_name: str | None = None) -> SignUpResult:
        if not self.config.signup_enabled:
            raise AuthError(AuthErrorCode.SIGNUP_DISABLED, "Signups not allowed")
        min_length = self.config.min_password_length
        if len(password) < min_length:
            raise AuthError(
                AuthErrorCode.WEAK_PASSWORD,
                f"Password should be at least {min_length} characters",
                min_length=min_length,
            )

        email = email.strip().lower()
        confirmation_required = self.config.require_email_confirmation
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            user = await self._get_user_by_email(session, email)
            if user is not None:
                if user.email_confirmed_at is not None or not confirmation_required:
                    raise AuthError(AuthErrorCode.EMAIL_ALREADY_EXISTS, "User already registered")
                self._check_resend_cooldown(user)
                user.hashed_password = hash_password(password)
                if full_name:
                    user.full_name = full_name
            else:
                user = User(
                    email=email,
                    full_name=full_name,
                    hashed_password=hash_password(password),
                    is_active=True,
                    email_confirmed_at=None if confirmation_required else self.clock(),
                )
                session.add(user)

            if confirmation_required:
                user.confirmation_token = generate_confirmation_token()
                user.confirmation_sent_at = await self._send_confirmation(user)
            await session.flush()

        logger.info(f"Signed up {email} (confirmation required: {confirmation_required})")
        return SignUpResult(user_id=user.id, email=email, confirmation_required=confirmation_required)

    def _check_resend_cooldown(self, user: User) -> None:
        sent_at = as_utc(user.confirmation_sent_at)
        if sent_at is None:
            return
        cooldown = timedelta(seconds=self.config.confirmation_resend_cooldown_seconds)
        if self.clock() - sent_at < cooldown:
            raise AuthError(
                AuthErrorCode.RATE_LIMITED,
                "For security purposes, you can only request this after a short wait",
            )

    def confirmation_url(self, token: str) -> str:
        query = urlencode({"token": token, "type": SIGNUP_CONFIRMATION_TYPE})
        return f"{self.config.base_url}/confirm-email?{query}"

    async def _send_confirmation(self, user: User) -> datetime | None:
        """Send the confirmation link; returns when it went out, None if it did not."""
        if self.email_service is None:
            logger.warning(f"No email service configured, confirmation for {user.email} not sent")
            return None
        try:
            await self.email_service.send_signup_confirmation(
                to_address=user.email,
                recipient_name=user.full_name or user.email,
                confirm_url=self.confirmation_url(user.confirmation_token),
            )
        except (OSError, httpx.HTTPError) as e:
            # the account still exists; the user can ask for another link
            logger.error(f"Sending confirmation to {user.email} failed: {e}")
            return None
        return self.clock()

    async def resolve(self, access_token: str) -> AuthSession | None:
        claims = decode_access_token(access_token)
        if claims is None or claims.expires_at <= self.clock():
            return None
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            revoked = await session.scalar(
                select(RevokedToken.id).where(RevokedToken.jti == claims.token_id)
            )
        if revoked is not None:
            logger.debug(f"Rejected revoked token of user {claims.identity.id}")
            return None
        return AuthSession(identity=claims.identity, access_token=access_token, expires_at=claims.expires_at)

    async def revoke(self, access_token: str) -> None:
        claims = decode_access_token(access_token)
        if claims is None or claims.expires_at <= self.clock():
            return
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            already = await session.scalar(
                select(RevokedToken.id).where(RevokedToken.jti == claims.token_id)
            )
            if already is None:
                session.add(
                    RevokedToken(
                        jti=claims.token_id,
                        user_id=claims.identity.id,
                        expires_at=claims.expires_at,
                    )
                )
                await session.flush()
        logger.info(f"Revoked access token of user {claims.identity.id}")

    async def confirm_email(self, token: str, type_: str = SIGNUP_CONFIRMATION_TYPE) -> Identity:
        if type_ != SIGNUP_CONFIRMATION_TYPE or not token:
            raise AuthError(AuthErrorCode.CONFIRMATION_INVALID, "Invalid confirmation link")

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(select(User).where(User.confirmation_token == token))
            user = result.scalar_one_or_none()
            if user is None:
                raise AuthError(AuthErrorCode.CONFIRMATION_INVALID, "Token has expired or is invalid")

            user.email_confirmed_at = self.clock()
            user.confirmation_token = None
            await session.flush()
            identity = Identity(id=user.id, email=user.email)

        logger.info(f"Confirmed email for user {identity.id}")
        return identity
