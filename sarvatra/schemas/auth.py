"""Request/response schemas for auth, registration and admin account management."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sarvatra.schemas.account import AccountPublic, AccountStatus, Role

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
# bcrypt ignores everything past 72 bytes.
PASSWORD_MAX_BYTES = 72

PASSWORD_SYMBOLS = '!@#$%^&*(),.?":{}|<>'
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SYMBOL_RE = re.compile("[" + re.escape(PASSWORD_SYMBOLS) + "]")


def password_policy_errors(password: str) -> list[str]:
    """Return every password-policy violation (empty list when the password is strong)."""
    errors: list[str] = []
    if len(password) < PASSWORD_MIN_LEN:
        errors.append(f"Password must be at least {PASSWORD_MIN_LEN} characters long")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors.append(f"Password must be at most {PASSWORD_MAX_BYTES} bytes long")
    if not _UPPER_RE.search(password):
        errors.append("Password must contain at least one uppercase letter (A-Z)")
    if not _DIGIT_RE.search(password):
        errors.append("Password must contain at least one number (0-9)")
    if not _SYMBOL_RE.search(password):
        errors.append(
            f"Password must contain at least one special character ({PASSWORD_SYMBOLS})"
        )
    return errors


def _strong_password(value: str) -> str:
    errors = password_policy_errors(value)
    if errors:
        raise ValueError("; ".join(errors))
    return value


def _clean_username(value: str) -> str:
    value = value.strip()
    if not (USERNAME_MIN_LEN <= len(value) <= USERNAME_MAX_LEN):
        raise ValueError(
            f"Username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters"
        )
    return value


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=1024)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        # Registration stores the stripped form.
        return v.strip()


class RegisterRequest(BaseModel):
    """
    Public self-registration. Unknown fields (including 'role' and 'status')
    are dropped: self-registered accounts are always role 'user', status 'pending'.
    """

    model_config = ConfigDict(extra="ignore")

    username: str
    password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _clean_username(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _strong_password(v)


class AdminCreateUserRequest(BaseModel):
    """Admin-only account creation; role may be chosen and status set explicitly."""

    username: str
    password: str
    role: Role = "user"
    status: AccountStatus | None = Field(
        default=None,
        description="Initial status for user accounts (default 'pending'); ignored for admins",
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _clean_username(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _strong_password(v)


class AdminUpdateUserRequest(BaseModel):
    """Partial admin update of an account; omitted fields are left unchanged."""

    username: str | None = None
    password: str | None = None
    role: Role | None = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str | None) -> str | None:
        return None if v is None else _clean_username(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        return None if v is None else _strong_password(v)


class StatusUpdateRequest(BaseModel):
    status: AccountStatus


class ApiKeyUpdateRequest(BaseModel):
    api_key: str = Field(..., min_length=1, max_length=4096, description="Third-party API key")

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("API key is required")
        return v


class LoginResponse(BaseModel):
    """Sanitized account plus session token returned after successful login."""

    user: AccountPublic
    token: str = Field(..., description="Signed session token; send as 'Authorization: Bearer <token>'")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class RegisterResponse(BaseModel):
    user: AccountPublic
    message: str = "Account created successfully. Please wait for admin approval."
