from fastapi import Depends, Header, HTTPException, Request, status

from eventpages.auth.backend import AuthBackend, SqlAuthBackend
from eventpages.auth.gate import AccessGate, GateAction
from eventpages.auth.session import SessionStore
from eventpages.config.settings import settings
from eventpages.email_service import get_email_service


def get_auth_backend() -> AuthBackend:
    """Dependency to get the auth backend instance."""
    return SqlAuthBackend(email_service=get_email_service())


def read_access_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str | None:
    """The access token from the session cookie, or from a bearer header."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token
    return request.cookies.get(settings.session_cookie_name)


async def get_session_store(
    access_token: str | None = Depends(read_access_token),
    backend: AuthBackend = Depends(get_auth_backend),
) -> SessionStore:
    session = SessionStore(backend)
    await session.restore(access_token)
    return session


def require_access(protected: bool):
    """Dependency factory running the access gate for a route."""

    async def check_access(session: SessionStore = Depends(get_session_store)) -> SessionStore:
        decision = AccessGate(session).check(protected)
        if decision.action is GateAction.LOADING:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Session is still being resolved",
                headers={"Retry-After": "1"},
            )
        if decision.action is GateAction.REDIRECT:
            raise HTTPException(
                status_code=status.HTTP_303_SEE_OTHER,
                detail=f"Redirecting to {decision.location}",
                headers={"Location": decision.location},
            )
        return session

    return check_access


protected_session = require_access(protected=True)
anonymous_only_session = require_access(protected=False)
