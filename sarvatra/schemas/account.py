"""Account records as stored, and the sanitized shape returned to clients."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "admin"]
AccountStatus = Literal["pending", "approved", "rejected"]

ROLE_VALUES: frozenset[str] = frozenset({"user", "admin"})
STATUS_VALUES: frozenset[str] = frozenset({"pending", "approved", "rejected"})


class AccountRecord(BaseModel):
    """
    Persisted account shape consumed by the auth core.

    Updates are whole-record replaces (model_copy + store.put); concurrent writers
    to the same account are last-write-wins.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    username: str
    password_hash: str
    role: Role = "user"
    status: AccountStatus = "pending"
    credential_blob: str | None = None
    created_at: datetime
    last_login_at: datetime | None = None


class AccountPublic(BaseModel):
    """Account as returned to clients: never carries the password hash or credential blob."""

    id: str
    username: str
    role: Role
    status: AccountStatus
    has_api_key: bool = Field(
        default=False,
        description="True when the account has a stored (encrypted) third-party API key",
    )
    created_at: datetime
    last_login_at: datetime | None = None

    @classmethod
    def from_record(cls, record: AccountRecord) -> "AccountPublic":
        return cls(
            id=record.id,
            username=record.username,
            role=record.role,
            status=record.status,
            has_api_key=bool(record.credential_blob),
            created_at=record.created_at,
            last_login_at=record.last_login_at,
        )


class UserResponse(BaseModel):
    user: AccountPublic


class UsersListResponse(BaseModel):
    """Response for GET /admin/users (admin only)."""

    users: list[AccountPublic]


class UserSettingsResponse(BaseModel):
    username: str
    has_api_key: bool


class CredentialStatusResponse(BaseModel):
    """Result of storing or removing a third-party API key."""

    ok: bool = True
    has_api_key: bool
