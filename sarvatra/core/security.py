"""Password hashing and session token creation/verification."""

import logging
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt
from pydantic import ValidationError

from sarvatra.core.config import Settings, get_settings
from sarvatra.schemas.account import AccountRecord
from sarvatra.schemas.token import TokenPayload

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; longer passwords are rejected, never truncated.
BCRYPT_MAX_PASSWORD_BYTES = 72

# Claims every session token must carry.
REQUIRED_CLAIMS = ["sub", "exp", "iat", "iss", "aud"]


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(
            f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes."
        )
    cost = rounds if rounds is not None else get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=cost)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Never raises; bad input is a mismatch."""
    try:
        pw_bytes = plain_password.encode("utf-8")
        if len(pw_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


@lru_cache
def _dummy_hash(rounds: int) -> str:
    return hash_password("dummy-password-for-timing", rounds=rounds)


def burn_password_check(plain_password: str, rounds: int | None = None) -> None:
    """Spend a full bcrypt check so unknown usernames take as long as wrong passwords."""
    cost = rounds if rounds is not None else get_settings().BCRYPT_ROUNDS
    verify_password(plain_password, _dummy_hash(cost))


def create_access_token(
    account: AccountRecord,
    settings: Settings | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed session token for an account.

    Issuance is not gated on approval status; the authorization gate rejects
    tokens whose embedded status is not 'approved'.
    """
    settings = settings or get_settings()
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload: dict[str, Any] = {
        "sub": account.id,
        "id": account.id,
        "username": account.username,
        "role": account.role,
        "status": account.status,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_access_token(
    token: str, settings: Settings | None = None
) -> TokenPayload | None:
    """
    Verify signature, algorithm, issuer, audience and expiry; return the payload.
    Returns None (never raises) when any check fails.
    """
    settings = settings or get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.PyJWTError as e:
        logger.info("Session token rejected: %s", e)
        return None
    try:
        payload = TokenPayload.model_validate(claims)
    except ValidationError as e:
        logger.info("Session token has an invalid payload: %s", e.error_count())
        return None
    if claims.get("sub") != payload.id:
        logger.info("Session token subject does not match embedded id")
        return None
    return payload


def token_lifetime_seconds(settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    return settings.JWT_EXPIRE_MINUTES * 60
