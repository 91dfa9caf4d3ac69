"""The authenticated session as seen by one client.

A store starts out unresolved and settles to authenticated or anonymous once
``restore`` or ``sign_in`` finishes. Gates must not redirect before that.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from eventpages.auth.backend import AuthBackend, utc_now
from eventpages.auth.dtos import AuthError, AuthSession, Identity, NotAuthenticatedError, SignUpResult

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    UNRESOLVED = "unresolved"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class SessionStore:
    def __init__(self, backend: AuthBackend, clock: Callable[[], datetime] | None = None) -> None:
        self.backend = backend
        self.clock = clock or utc_now
        self._session: AuthSession | None = None
        self._resolved = False

    def _current(self) -> AuthSession | None:
        if self._session is not None and self._session.expires_at <= self.clock():
            logger.info(f"Access token of user {self._session.identity.id} expired")
            self._session = None
        return self._session

    @property
    def status(self) -> SessionStatus:
        if not self._resolved:
            return SessionStatus.UNRESOLVED
        if self._current() is None:
            return SessionStatus.ANONYMOUS
        return SessionStatus.AUTHENTICATED

    @property
    def loading(self) -> bool:
        return not self._resolved

    @property
    def identity(self) -> Identity | None:
        session = self._current()
        return session.identity if session else None

    @property
    def access_token(self) -> str | None:
        session = self._current()
        return session.access_token if session else None

    async def restore(self, access_token: str | None) -> Identity | None:
        """Resolve a previously issued token. Anything unusable leaves the store anonymous."""
        self._session = await self.backend.resolve(access_token) if access_token else None
        self._resolved = True
        return self.identity

    async def sign_in(self, email: str, password: str) -> Identity:
        try:
            self._session = await self.backend.sign_in(email, password)
        except AuthError:
            self._session = None
            raise
        finally:
            self._resolved = True
        return self._session.identity

    async def sign_up(self, email: str, password: str, full_name: str | None = None) -> SignUpResult:
        return await self.backend.sign_up(email, password, full_name)

    async def sign_out(self) -> None:
        """Forget the session, then revoke its token at the backend.

        Local state is cleared before the first await, so a gate checking
        while the revocation is in flight already sees an anonymous store.
        """
        session, self._session = self._session, None
        self._resolved = True
        if session is None:
            return
        logger.info(f"User {session.identity.id} signed out")
        await self.backend.revoke(session.access_token)

    def require_identity(self) -> Identity:
        identity = self.identity
        if identity is None:
            raise NotAuthenticatedError()
        return identity
