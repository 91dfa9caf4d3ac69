import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from eventpages.auth.backend import SIGNUP_CONFIRMATION_TYPE, AuthBackend
from eventpages.auth.dependencies import anonymous_only_session, get_auth_backend, get_session_store
from eventpages.auth.dtos import AuthError, AuthErrorCode
from eventpages.auth.session import SessionStore
from eventpages.config.settings import settings
from eventpages.events.notifications import CollectingNotificationSink, NotificationEvent
from eventpages.events.schemas import envelope
from eventpages.urls import CONFIRM_EMAIL_URL, LOGIN_URL, LOGOUT_URL, SIGNUP_URL

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_BY_AUTH_ERROR = {
    AuthErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.EMAIL_NOT_CONFIRMED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    AuthErrorCode.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.EMAIL_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    AuthErrorCode.SIGNUP_DISABLED: status.HTTP_403_FORBIDDEN,
    AuthErrorCode.CONFIRMATION_INVALID: status.HTTP_400_BAD_REQUEST,
}


class LoginSubmit(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignUpSubmit(BaseModel):
    email: EmailStr
    password: str
    full_name: str | None = Field(default=None, max_length=255)


def _auth_error_response(title: str, error: AuthError) -> JSONResponse:
    sink = CollectingNotificationSink()
    sink(NotificationEvent.error(title, error.user_message))
    try:
        status_code = STATUS_BY_AUTH_ERROR[AuthErrorCode(error.code)]
    except ValueError:
        status_code = status.HTTP_400_BAD_REQUEST
    return envelope({"code": error.code}, sink, status_code)


@router.get(LOGIN_URL)
async def login_page(
    confirmed: bool = Query(default=False),
    session: SessionStore = Depends(anonymous_only_session),
):
    """
    Entry point for anonymous users. Signed-in users are sent to the dashboard.
    """
    sink = CollectingNotificationSink()
    if confirmed:
        sink(NotificationEvent.success("Email confirmed", "You can now sign in with your account."))
    return envelope(None, sink)


@router.post(LOGIN_URL)
async def login(
    credentials: LoginSubmit,
    session: SessionStore = Depends(anonymous_only_session),
):
    try:
        identity = await session.sign_in(credentials.email, credentials.password)
    except AuthError as e:
        logger.info(f"Sign in for {credentials.email} refused: {e.code}")
        return _auth_error_response("Could not sign in", e)

    response = envelope(
        {
            "user_id": identity.id,
            "email": identity.email,
            "access_token": session.access_token,
            "token_type": "bearer",
        },
        status_code=status.HTTP_303_SEE_OTHER,
        location=settings.default_route,
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=not settings.debug,
    )
    return response


@router.post(SIGNUP_URL)
async def signup(
    signup_data: SignUpSubmit,
    session: SessionStore = Depends(anonymous_only_session),
):
    """
    Register a new account. The user still has to sign in afterwards, and
    usually has to confirm the email address first.
    """
    try:
        result = await session.sign_up(signup_data.email, signup_data.password, signup_data.full_name)
    except AuthError as e:
        logger.info(f"Sign up for {signup_data.email} refused: {e.code}")
        return _auth_error_response("Could not sign up", e)

    sink = CollectingNotificationSink()
    if result.confirmation_required:
        sink(NotificationEvent.success("Sign up successful", "Check your email to confirm the account before signing in."))
    else:
        sink(NotificationEvent.success("Sign up successful", "You can now sign in with your account."))
    return envelope(
        {
            "user_id": result.user_id,
            "email": result.email,
            "confirmation_required": result.confirmation_required,
        },
        sink,
        status.HTTP_201_CREATED,
    )


@router.post(LOGOUT_URL)
async def logout(session: SessionStore = Depends(get_session_store)):
    await session.sign_out()
    sink = CollectingNotificationSink()
    sink(NotificationEvent.info("Signed out"))
    response = envelope(None, sink, status.HTTP_303_SEE_OTHER, location=settings.login_route)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get(CONFIRM_EMAIL_URL)
async def confirm_email(
    token: str = Query(default=""),
    type: str = Query(default=""),
    backend: AuthBackend = Depends(get_auth_backend),
):
    """
    Target of the link in the sign-up email.
    """
    if type != SIGNUP_CONFIRMATION_TYPE:
        error = AuthError(AuthErrorCode.CONFIRMATION_INVALID, "Invalid confirmation parameters")
        return _auth_error_response("Could not confirm email", error)
    try:
        await backend.confirm_email(token, type)
    except AuthError as e:
        return _auth_error_response("Could not confirm email", e)
    return envelope(None, status_code=status.HTTP_303_SEE_OTHER, location=f"{settings.login_route}?confirmed=true")
