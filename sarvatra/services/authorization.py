"""
Authorization gate policies, independent of the HTTP framework.

authenticate_token admits only verifiable tokens whose embedded status is
'approved'; require_admin_or_self then admits admins or the resource owner.
Both are read-only checks on the verified token payload.
"""

import logging
from dataclasses import dataclass

from sarvatra.core.config import Settings
from sarvatra.core.errors import (
    AccountNotApprovedError,
    AuthenticationFailedError,
    AuthorizationDeniedError,
)
from sarvatra.core.security import verify_access_token
from sarvatra.schemas.token import TokenPayload

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class AuthorizationDecision:
    """Per-request decision derived from the token and route parameters."""

    authenticated: bool
    role: str
    is_self: bool

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def authenticate_token(token: str | None, settings: Settings | None = None) -> TokenPayload:
    """
    Verify a bearer token and require status 'approved'.

    Raises AuthenticationFailedError (reason 'no_token' or 'invalid_token') or
    AccountNotApprovedError carrying the embedded status.
    """
    if not token:
        raise AuthenticationFailedError("no_token", "Access denied. No token provided.")
    payload = verify_access_token(token, settings)
    if payload is None:
        raise AuthenticationFailedError("invalid_token", "Access denied. Invalid token.")
    if payload.status != "approved":
        logger.info(
            "Token for unapproved account rejected",
            extra={"account_id": payload.id, "account_status": payload.status},
        )
        raise AccountNotApprovedError(payload.status)
    return payload


def evaluate_access(payload: TokenPayload, owner_id: str | None = None) -> AuthorizationDecision:
    return AuthorizationDecision(
        authenticated=True,
        role=payload.role,
        is_self=owner_id is not None and payload.id == owner_id,
    )


def require_admin_or_self(
    payload: TokenPayload, owner_id: str | None = None
) -> AuthorizationDecision:
    """Admit admins, or the owner of the resource when owner_id is given."""
    decision = evaluate_access(payload, owner_id)
    if decision.is_admin or decision.is_self:
        return decision
    logger.info(
        "Authorization denied",
        extra={"account_id": payload.id, "role": payload.role, "owner_id": owner_id},
    )
    if owner_id is None:
        raise AuthorizationDeniedError(
            payload.role, "Access denied. Admin privileges required."
        )
    raise AuthorizationDeniedError(payload.role)


def require_admin(payload: TokenPayload) -> AuthorizationDecision:
    return require_admin_or_self(payload, owner_id=None)
