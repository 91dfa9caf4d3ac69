"""Password hashing (bcrypt) and access tokens (JWT)."""

import logging
import secrets
from datetime import UTC, datetime
from uuid import UUID

import bcrypt
import jwt

from eventpages.auth.dtos import Identity, TokenClaims
from eventpages.config.settings import settings

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Password verification failed: {e}")
        return False


def create_access_token(identity: Identity, expires_at: datetime) -> str:
    claims = {
        "sub": str(identity.id),
        "email": identity.email,
        "iat": int(datetime.now(UTC).timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenClaims | None:
    """Return the claims of a valid token, None for anything else."""
    try:
        claims = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": ["sub", "exp", "jti"]},
        )
        identity = Identity(id=UUID(claims["sub"]), email=claims["email"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.debug(f"Rejected access token: {e}")
        return None
    return TokenClaims(
        identity=identity,
        expires_at=datetime.fromtimestamp(claims["exp"], tz=UTC),
        token_id=claims["jti"],
    )


def generate_confirmation_token() -> str:
    return secrets.token_urlsafe(32)
