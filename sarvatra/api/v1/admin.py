"""Admin-only account approval/provisioning and command catalogue management."""

from fastapi import APIRouter, status

from sarvatra.api.deps import AdminUser, SettingsDep, StoreDep
from sarvatra.api.errors import to_http_exception
from sarvatra.core.errors import SarvatraError
from sarvatra.schemas.account import UserResponse, UsersListResponse
from sarvatra.schemas.auth import (
    AdminCreateUserRequest,
    AdminUpdateUserRequest,
    StatusUpdateRequest,
)
from sarvatra.schemas.command import (
    CommandCreateRequest,
    CommandResponse,
    CommandsListResponse,
    CommandUpdateRequest,
    DeleteResponse,
)
from sarvatra.services import accounts, commands
from sarvatra.stores.base import Store

router = APIRouter()


@router.get("/users", response_model=UsersListResponse)
def list_users(_admin: AdminUser, store: StoreDep) -> UsersListResponse:
    """List all accounts, newest first."""
    records = sorted(accounts.list_accounts(store), key=lambda r: r.created_at, reverse=True)
    return UsersListResponse(users=[accounts.sanitize_account(r) for r in records])


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: AdminCreateUserRequest, _admin: AdminUser, store: StoreDep, settings: SettingsDep
) -> UserResponse:
    """Provision an account. Admin accounts are always created approved."""
    try:
        account = accounts.create_account_by_admin(store, body, settings)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return UserResponse(user=accounts.sanitize_account(account))


@router.put("/users/{user_id}/status", response_model=UserResponse)
def update_user_status(
    user_id: str, body: StatusUpdateRequest, _admin: AdminUser, store: StoreDep
) -> UserResponse:
    """Approve, reject or return an account to pending."""
    try:
        account = accounts.set_account_status(store, user_id, body.status)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return UserResponse(user=accounts.sanitize_account(account))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: AdminUpdateUserRequest,
    _admin: AdminUser,
    store: StoreDep,
    settings: SettingsDep,
) -> UserResponse:
    try:
        account = accounts.update_account(store, user_id, body, settings)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return UserResponse(user=accounts.sanitize_account(account))


@router.get("/commands", response_model=CommandsListResponse)
def list_all_commands(_admin: AdminUser, store: StoreDep) -> CommandsListResponse:
    return CommandsListResponse(commands=commands.list_commands(store))


@router.post("/commands", response_model=CommandResponse, status_code=status.HTTP_201_CREATED)
def create_command(
    body: CommandCreateRequest, _admin: AdminUser, store: StoreDep
) -> CommandResponse:
    return CommandResponse(command=commands.create_command(store, body))


@router.put("/commands/{command_id}", response_model=CommandResponse)
def update_command(
    command_id: str, body: CommandUpdateRequest, _admin: AdminUser, store: StoreDep
) -> CommandResponse:
    try:
        command = commands.update_command(store, command_id, body)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return CommandResponse(command=command)


@router.delete("/commands/{command_id}", response_model=DeleteResponse)
def delete_command(command_id: str, _admin: AdminUser, store: StoreDep) -> DeleteResponse:
    try:
        commands.delete_command(store, command_id)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return DeleteResponse()


def _set_published(store: Store, command_id: str, published: bool) -> CommandResponse:
    try:
        command = commands.set_published(store, command_id, published)
    except SarvatraError as e:
        raise to_http_exception(e) from e
    return CommandResponse(command=command)


@router.put("/commands/{command_id}/publish", response_model=CommandResponse)
def publish_command(command_id: str, _admin: AdminUser, store: StoreDep) -> CommandResponse:
    return _set_published(store, command_id, True)


@router.put("/commands/{command_id}/unpublish", response_model=CommandResponse)
def unpublish_command(command_id: str, _admin: AdminUser, store: StoreDep) -> CommandResponse:
    return _set_published(store, command_id, False)
