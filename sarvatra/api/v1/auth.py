"""Login, self-registration and current-account endpoints."""

import logging

from fastapi import APIRouter, status

from sarvatra.api.deps import CurrentUser, SettingsDep, StoreDep
from sarvatra.api.errors import to_http_exception
from sarvatra.core.errors import SarvatraError
from sarvatra.core.security import create_access_token, token_lifetime_seconds
from sarvatra.schemas.account import UserResponse
from sarvatra.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from sarvatra.services import accounts

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, store: StoreDep, settings: SettingsDep) -> LoginResponse:
    """
    Authenticate with username and password; returns the account and a session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        account = accounts.authenticate_credentials(
            store, body.username, body.password, settings
        )
    except SarvatraError as e:
        raise to_http_exception(e) from e
    token = create_access_token(account, settings)
    logger.info("Login succeeded", extra={"account_id": account.id})
    return LoginResponse(
        user=accounts.sanitize_account(account),
        token=token,
        expires_in=token_lifetime_seconds(settings),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, store: StoreDep, settings: SettingsDep) -> RegisterResponse:
    """Create a pending 'user' account. An admin must approve it before login succeeds."""
    try:
        account = accounts.register_account(store, body, settings)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return RegisterResponse(user=accounts.sanitize_account(account))


@router.get("/me", response_model=UserResponse)
def me(current_user: CurrentUser, store: StoreDep) -> UserResponse:
    try:
        account = accounts.get_account(store, current_user.id)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return UserResponse(user=accounts.sanitize_account(account))
