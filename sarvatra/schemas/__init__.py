"""Pydantic request/response schemas."""

from sarvatra.schemas.account import (
    AccountPublic,
    AccountRecord,
    AccountStatus,
    Role,
)
from sarvatra.schemas.auth import (
    AdminCreateUserRequest,
    AdminUpdateUserRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)
from sarvatra.schemas.command import CommandRecord, PreferenceRecord
from sarvatra.schemas.health import HealthResponse
from sarvatra.schemas.token import TokenPayload
from sarvatra.schemas.validation import Invalid, Valid, validate

__all__ = [
    "AccountPublic",
    "AccountRecord",
    "AccountStatus",
    "AdminCreateUserRequest",
    "AdminUpdateUserRequest",
    "CommandRecord",
    "HealthResponse",
    "Invalid",
    "LoginRequest",
    "LoginResponse",
    "PreferenceRecord",
    "RegisterRequest",
    "Role",
    "TokenPayload",
    "Valid",
    "validate",
]
