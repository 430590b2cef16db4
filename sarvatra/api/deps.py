"""FastAPI dependencies: injected store/cipher/settings and the authorization gate."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sarvatra.core.config import Settings
from sarvatra.core.crypto import CredentialCipher
from sarvatra.core.errors import (
    AccountNotApprovedError,
    AuthenticationFailedError,
    AuthorizationDeniedError,
)
from sarvatra.schemas.token import TokenPayload
from sarvatra.services import authorization
from sarvatra.stores.base import Store

security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_cipher(request: Request) -> CredentialCipher:
    return request.app.state.cipher


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


StoreDep = Annotated[Store, Depends(get_store)]
CipherDep = Annotated[CredentialCipher, Depends(get_cipher)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: SettingsDep,
) -> TokenPayload:
    """
    Dependency: require a valid Bearer token for an approved account.
    401 if missing or invalid/expired, 403 with the account status if not approved.
    """
    token = credentials.credentials if credentials is not None else None
    try:
        return authorization.authenticate_token(token, settings)
    except AuthenticationFailedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except AccountNotApprovedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Access denied. Account is not approved.", "status": e.status},
        ) from e


CurrentUser = Annotated[TokenPayload, Depends(get_current_user)]


def _denied(e: AuthorizationDeniedError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"error": e.message, "user_role": e.role},
    )


def require_admin(current_user: CurrentUser) -> TokenPayload:
    """Dependency: require role 'admin'. 403 echoes the caller's role."""
    try:
        authorization.require_admin(current_user)
    except AuthorizationDeniedError as e:
        raise _denied(e) from e
    return current_user


def require_admin_or_self(param: str = "user_id") -> Callable[..., TokenPayload]:
    """Dependency factory: admit admins or the account named by path parameter `param`."""

    def dependency(request: Request, current_user: CurrentUser) -> TokenPayload:
        try:
            authorization.require_admin_or_self(current_user, request.path_params.get(param))
        except AuthorizationDeniedError as e:
            raise _denied(e) from e
        return current_user

    return dependency


AdminUser = Annotated[TokenPayload, Depends(require_admin)]
