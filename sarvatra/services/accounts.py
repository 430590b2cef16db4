"""Account lifecycle: registration, admin provisioning, login, approval and API key storage."""

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sarvatra.core.crypto import CredentialCipher, CredentialCorruptedError
from sarvatra.core.errors import (
    AccountNotApprovedError,
    AccountNotFoundError,
    CredentialMissingError,
    InvalidCredentialsError,
    UsernameTakenError,
)
from sarvatra.core.security import burn_password_check, hash_password, verify_password
from sarvatra.schemas.account import AccountPublic, AccountRecord, AccountStatus
from sarvatra.schemas.auth import (
    AdminCreateUserRequest,
    AdminUpdateUserRequest,
    RegisterRequest,
)
from sarvatra.stores.base import Store

if TYPE_CHECKING:
    from sarvatra.core.config import Settings

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


def _rounds(settings: "Settings | None") -> int | None:
    return settings.BCRYPT_ROUNDS if settings is not None else None


def sanitize_account(record: AccountRecord) -> AccountPublic:
    """Client-facing view of an account: no password hash, no credential blob."""
    return AccountPublic.from_record(record)


def _create(
    store: Store,
    username: str,
    password: str,
    role: str,
    status: str,
    settings: "Settings | None" = None,
) -> AccountRecord:
    # store.accounts.create is the authoritative uniqueness check.
    if store.accounts.get_by_username(username) is not None:
        raise UsernameTakenError(username)
    record = AccountRecord(
        id=str(uuid.uuid4()),
        username=username,
        password_hash=hash_password(password, rounds=_rounds(settings)),
        role=role,
        status=status,
        created_at=_now(),
    )
    return store.accounts.create(record)


def register_account(
    store: Store, request: RegisterRequest, settings: "Settings | None" = None
) -> AccountRecord:
    """Self-registration: always role 'user' and status 'pending'."""
    account = _create(
        store, request.username, request.password, role="user", status="pending", settings=settings
    )
    logger.info("Account registered", extra={"account_id": account.id})
    return account


def create_account_by_admin(
    store: Store, request: AdminCreateUserRequest, settings: "Settings | None" = None
) -> AccountRecord:
    """
    Admin provisioning. Admin accounts are always 'approved'; user accounts start
    'pending' unless a status is given explicitly.
    """
    status = "approved" if request.role == "admin" else (request.status or "pending")
    account = _create(
        store,
        request.username,
        request.password,
        role=request.role,
        status=status,
        settings=settings,
    )
    logger.info(
        "Account created by admin",
        extra={"account_id": account.id, "role": account.role, "account_status": status},
    )
    return account


def authenticate_credentials(
    store: Store, username: str, password: str, settings: "Settings | None" = None
) -> AccountRecord:
    """
    Check username/password and approval; record the login time.

    Raises InvalidCredentialsError for an unknown user or wrong password (same
    error, same bcrypt cost) and AccountNotApprovedError for pending/rejected.
    """
    account = store.accounts.get_by_username(username)
    if account is None:
        burn_password_check(password, rounds=_rounds(settings))
        raise InvalidCredentialsError()
    if not verify_password(password, account.password_hash):
        raise InvalidCredentialsError()
    if account.status != "approved":
        raise AccountNotApprovedError(account.status)
    return store.accounts.put(account.model_copy(update={"last_login_at": _now()}))


def get_account(store: Store, account_id: str) -> AccountRecord:
    account = store.accounts.get(account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


def list_accounts(store: Store) -> list[AccountRecord]:
    return store.accounts.list_all()


def set_account_status(store: Store, account_id: str, status: AccountStatus) -> AccountRecord:
    """Admins may move an account between any two states."""
    account = get_account(store, account_id)
    updated = store.accounts.put(account.model_copy(update={"status": status}))
    logger.info(
        "Account status changed",
        extra={"account_id": account_id, "from_status": account.status, "to_status": status},
    )
    return updated


def update_account(
    store: Store,
    account_id: str,
    request: AdminUpdateUserRequest,
    settings: "Settings | None" = None,
) -> AccountRecord:
    account = get_account(store, account_id)
    changes = request.model_dump(exclude_none=True)
    password = changes.pop("password", None)
    if password is not None:
        changes["password_hash"] = hash_password(password, rounds=_rounds(settings))
    if not changes:
        return account
    return store.accounts.put(account.model_copy(update=changes))


def store_credential(
    store: Store, cipher: CredentialCipher, account_id: str, plaintext_key: str
) -> AccountRecord:
    """Encrypt and save the account's third-party API key."""
    account = get_account(store, account_id)
    blob = cipher.encrypt(plaintext_key)
    updated = store.accounts.put(account.model_copy(update={"credential_blob": blob}))
    logger.info("API key stored", extra={"account_id": account_id})
    return updated


def clear_credential(store: Store, account_id: str) -> AccountRecord:
    account = get_account(store, account_id)
    updated = store.accounts.put(account.model_copy(update={"credential_blob": None}))
    logger.info("API key removed", extra={"account_id": account_id})
    return updated


def reveal_credential(cipher: CredentialCipher, account: AccountRecord) -> str:
    """
    Decrypt the account's API key for the duration of one request.

    Raises CredentialMissingError when none is stored and CredentialCorruptedError
    (malformed or failed authentication) when it cannot be used.
    """
    if not account.credential_blob:
        raise CredentialMissingError()
    try:
        return cipher.decrypt(account.credential_blob)
    except CredentialCorruptedError as e:
        logger.warning(
            "Stored API key could not be decrypted: %s",
            e.message,
            extra={"account_id": account.id, "error_type": type(e).__name__},
        )
        raise


def ensure_bootstrap_admin(store: Store, settings: "Settings") -> AccountRecord | None:
    """Create the configured bootstrap admin (approved) if it does not exist yet."""
    username = (settings.BOOTSTRAP_ADMIN_USERNAME or "").strip()
    if not username or settings.BOOTSTRAP_ADMIN_PASSWORD is None:
        return None
    existing = store.accounts.get_by_username(username)
    if existing is not None:
        return existing
    account = AccountRecord(
        id=str(uuid.uuid4()),
        username=username,
        password_hash=hash_password(
            settings.BOOTSTRAP_ADMIN_PASSWORD.get_secret_value(), rounds=settings.BCRYPT_ROUNDS
        ),
        role="admin",
        status="approved",
        created_at=_now(),
    )
    try:
        created = store.accounts.create(account)
    except UsernameTakenError:
        return store.accounts.get_by_username(username)
    logger.info("Bootstrap admin created", extra={"account_id": created.id})
    return created
