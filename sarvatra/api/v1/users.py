"""Per-account endpoints: settings, stored API key, and command preferences."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from sarvatra.api.deps import (
    CipherDep,
    CurrentUser,
    SettingsDep,
    StoreDep,
    require_admin_or_self,
)
from sarvatra.api.errors import provider_http_exception, to_http_exception
from sarvatra.core.config import Settings
from sarvatra.core.crypto import CredentialCipher
from sarvatra.core.errors import SarvatraError
from sarvatra.schemas.account import (
    CredentialStatusResponse,
    UserResponse,
    UserSettingsResponse,
)
from sarvatra.schemas.auth import ApiKeyUpdateRequest
from sarvatra.schemas.command import (
    CommandsWithPreferencesResponse,
    PreferenceResponse,
    PreferencesListResponse,
    PreferenceUpdateRequest,
)
from sarvatra.schemas.token import TokenPayload
from sarvatra.services import accounts, commands
from sarvatra.services.provider import ProviderError, check_api_key
from sarvatra.stores.base import Store

router = APIRouter()

AdminOrSelf = Annotated[TokenPayload, Depends(require_admin_or_self("user_id"))]


async def _save_api_key(
    store: Store,
    cipher: CredentialCipher,
    settings: Settings,
    account_id: str,
    api_key: str,
) -> CredentialStatusResponse:
    try:
        await run_in_threadpool(accounts.get_account, store, account_id)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    if settings.VERIFY_API_KEY_ON_SAVE:
        try:
            valid = await check_api_key(api_key, settings)
        except ProviderError as e:
            raise provider_http_exception(e) from e
        if not valid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid API key. Please check your key and try again.",
            )
    try:
        account = await run_in_threadpool(
            accounts.store_credential, store, cipher, account_id, api_key
        )
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return CredentialStatusResponse(has_api_key=bool(account.credential_blob))


def _remove_api_key(store: Store, account_id: str) -> CredentialStatusResponse:
    try:
        account = accounts.clear_credential(store, account_id)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return CredentialStatusResponse(has_api_key=bool(account.credential_blob))


@router.get("/user/settings", response_model=UserSettingsResponse)
def get_user_settings(current_user: CurrentUser, store: StoreDep) -> UserSettingsResponse:
    try:
        account = accounts.get_account(store, current_user.id)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return UserSettingsResponse(
        username=account.username, has_api_key=bool(account.credential_blob)
    )


@router.put("/user/credential", response_model=CredentialStatusResponse)
async def put_own_credential(
    body: ApiKeyUpdateRequest,
    current_user: CurrentUser,
    store: StoreDep,
    cipher: CipherDep,
    settings: SettingsDep,
) -> CredentialStatusResponse:
    """Encrypt and store the caller's API key. The plaintext is never returned."""
    return await _save_api_key(store, cipher, settings, current_user.id, body.api_key)


@router.delete("/user/credential", response_model=CredentialStatusResponse)
def delete_own_credential(current_user: CurrentUser, store: StoreDep) -> CredentialStatusResponse:
    return _remove_api_key(store, current_user.id)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: str, _caller: AdminOrSelf, store: StoreDep) -> UserResponse:
    """Admins may read any account; users only their own."""
    try:
        account = accounts.get_account(store, user_id)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return UserResponse(user=accounts.sanitize_account(account))


@router.put("/users/{user_id}/credential", response_model=CredentialStatusResponse)
async def put_user_credential(
    user_id: str,
    body: ApiKeyUpdateRequest,
    _caller: AdminOrSelf,
    store: StoreDep,
    cipher: CipherDep,
    settings: SettingsDep,
) -> CredentialStatusResponse:
    return await _save_api_key(store, cipher, settings, user_id, body.api_key)


@router.delete("/users/{user_id}/credential", response_model=CredentialStatusResponse)
def delete_user_credential(
    user_id: str, _caller: AdminOrSelf, store: StoreDep
) -> CredentialStatusResponse:
    return _remove_api_key(store, user_id)


@router.get("/user/command-preferences", response_model=PreferencesListResponse)
def get_command_preferences(current_user: CurrentUser, store: StoreDep) -> PreferencesListResponse:
    return PreferencesListResponse(
        preferences=commands.list_preferences(store, current_user.id)
    )


@router.put("/user/command-preferences", response_model=PreferenceResponse)
def put_command_preference(
    body: PreferenceUpdateRequest, current_user: CurrentUser, store: StoreDep
) -> PreferenceResponse:
    """Show or hide a published command for the caller, or mark its 'new' badge as seen."""
    try:
        preference = commands.set_preference(store, current_user.id, body)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return PreferenceResponse(preference=preference)


@router.get("/user/commands-with-preferences", response_model=CommandsWithPreferencesResponse)
def get_commands_with_preferences(
    current_user: CurrentUser, store: StoreDep
) -> CommandsWithPreferencesResponse:
    return CommandsWithPreferencesResponse(
        commands=commands.commands_with_preferences(store, current_user.id)
    )
