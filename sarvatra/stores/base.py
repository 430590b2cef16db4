"""Store interfaces consumed by the services; implementations are injected, never global."""

from typing import Protocol

from sarvatra.schemas.account import AccountRecord
from sarvatra.schemas.command import CommandRecord, PreferenceRecord


class AccountStore(Protocol):
    def get(self, account_id: str) -> AccountRecord | None: ...

    def get_by_username(self, username: str) -> AccountRecord | None: ...

    def create(self, record: AccountRecord) -> AccountRecord:
        """Insert a new account. Raises UsernameTakenError if the username exists."""
        ...

    def put(self, record: AccountRecord) -> AccountRecord:
        """
        Replace an existing account record as a whole (last write wins).
        Raises AccountNotFoundError or UsernameTakenError.
        """
        ...

    def list_all(self) -> list[AccountRecord]: ...


class CommandStore(Protocol):
    def get(self, command_id: str) -> CommandRecord | None: ...

    def put(self, record: CommandRecord) -> CommandRecord:
        """Insert or replace a command."""
        ...

    def delete(self, command_id: str) -> bool:
        """Delete a command and its preferences; False when it did not exist."""
        ...

    def list_all(self) -> list[CommandRecord]: ...


class PreferenceStore(Protocol):
    def get(self, user_id: str, command_id: str) -> PreferenceRecord | None: ...

    def put(self, record: PreferenceRecord) -> PreferenceRecord:
        """Insert or replace the preference for (user_id, command_id)."""
        ...

    def list_for_user(self, user_id: str) -> list[PreferenceRecord]: ...


class Store(Protocol):
    """Bundle of the stores a request needs, plus a reachability probe."""

    backend: str
    accounts: AccountStore
    commands: CommandStore
    preferences: PreferenceStore

    def ping(self) -> bool: ...
