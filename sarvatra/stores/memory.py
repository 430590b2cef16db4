"""In-process store: dictionaries guarded by one lock. Used for tests and demos."""

from threading import Lock

from sarvatra.core.errors import AccountNotFoundError, UsernameTakenError
from sarvatra.schemas.account import AccountRecord
from sarvatra.schemas.command import CommandRecord, PreferenceRecord


class MemoryAccountStore:
    def __init__(self, lock: Lock) -> None:
        self._lock = lock
        self._by_id: dict[str, AccountRecord] = {}

    def get(self, account_id: str) -> AccountRecord | None:
        with self._lock:
            return self._by_id.get(account_id)

    def get_by_username(self, username: str) -> AccountRecord | None:
        with self._lock:
            return next(
                (a for a in self._by_id.values() if a.username == username), None
            )

    def _username_taken(self, username: str, exclude_id: str | None = None) -> bool:
        return any(
            a.username == username and a.id != exclude_id for a in self._by_id.values()
        )

    def create(self, record: AccountRecord) -> AccountRecord:
        with self._lock:
            if self._username_taken(record.username):
                raise UsernameTakenError(record.username)
            self._by_id[record.id] = record
            return record

    def put(self, record: AccountRecord) -> AccountRecord:
        with self._lock:
            if record.id not in self._by_id:
                raise AccountNotFoundError(record.id)
            if self._username_taken(record.username, exclude_id=record.id):
                raise UsernameTakenError(record.username)
            self._by_id[record.id] = record
            return record

    def list_all(self) -> list[AccountRecord]:
        with self._lock:
            return sorted(self._by_id.values(), key=lambda a: a.created_at)


class MemoryCommandStore:
    def __init__(self, lock: Lock, preferences: "MemoryPreferenceStore") -> None:
        self._lock = lock
        self._preferences = preferences
        self._by_id: dict[str, CommandRecord] = {}

    def get(self, command_id: str) -> CommandRecord | None:
        with self._lock:
            return self._by_id.get(command_id)

    def put(self, record: CommandRecord) -> CommandRecord:
        with self._lock:
            self._by_id[record.id] = record
            return record

    def delete(self, command_id: str) -> bool:
        with self._lock:
            if self._by_id.pop(command_id, None) is None:
                return False
            self._preferences._drop_command(command_id)
            return True

    def list_all(self) -> list[CommandRecord]:
        with self._lock:
            return sorted(self._by_id.values(), key=lambda c: c.created_at)


class MemoryPreferenceStore:
    def __init__(self, lock: Lock) -> None:
        self._lock = lock
        self._by_key: dict[tuple[str, str], PreferenceRecord] = {}

    def get(self, user_id: str, command_id: str) -> PreferenceRecord | None:
        with self._lock:
            return self._by_key.get((user_id, command_id))

    def put(self, record: PreferenceRecord) -> PreferenceRecord:
        with self._lock:
            self._by_key[(record.user_id, record.command_id)] = record
            return record

    def list_for_user(self, user_id: str) -> list[PreferenceRecord]:
        with self._lock:
            return [p for (uid, _), p in self._by_key.items() if uid == user_id]

    def _drop_command(self, command_id: str) -> None:
        # Caller holds the lock.
        for key in [k for k in self._by_key if k[1] == command_id]:
            del self._by_key[key]


class MemoryStore:
    backend = "memory"

    def __init__(self) -> None:
        # Shared (non-reentrant) so deleting a command drops its preferences atomically.
        lock = Lock()
        self.accounts = MemoryAccountStore(lock)
        self.preferences = MemoryPreferenceStore(lock)
        self.commands = MemoryCommandStore(lock, self.preferences)

    def ping(self) -> bool:
        return True
