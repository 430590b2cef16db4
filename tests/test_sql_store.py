"""SqlStore against in-memory SQLite: record conversion, uniqueness and preference upserts."""

import unittest
from datetime import UTC, datetime

from sarvatra.core.database import create_db_engine
from sarvatra.core.errors import AccountNotFoundError, UsernameTakenError
from sarvatra.schemas.account import AccountRecord
from sarvatra.schemas.command import CommandRecord, PreferenceRecord
from sarvatra.stores import SqlStore


def _account(account_id: str, username: str) -> AccountRecord:
    return AccountRecord(
        id=account_id,
        username=username,
        password_hash="$2b$04$hash",
        created_at=datetime.now(UTC),
    )


def _command(command_id: str = "c-1", temperature: float = 0.35) -> CommandRecord:
    now = datetime.now(UTC)
    return CommandRecord(
        id=command_id,
        name="Summarize",
        prompt="Summarize:",
        temperature=temperature,
        published_to_users=True,
        created_at=now,
        updated_at=now,
    )


def _preference(pref_id: str, visible: bool) -> PreferenceRecord:
    now = datetime.now(UTC)
    return PreferenceRecord(
        id=pref_id,
        user_id="a-1",
        command_id="c-1",
        is_visible=visible,
        created_at=now,
        updated_at=now,
    )


class TestSqlStore(unittest.TestCase):
    def setUp(self) -> None:
        self.store = SqlStore(create_db_engine("sqlite://"))
        self.store.create_schema()

    def tearDown(self) -> None:
        self.store.engine.dispose()

    def test_ping(self) -> None:
        self.assertEqual(self.store.backend, "sql")
        self.assertTrue(self.store.ping())

    def test_account_create_get_put(self) -> None:
        self.store.accounts.create(_account("a-1", "alice"))
        loaded = self.store.accounts.get("a-1")
        assert loaded is not None
        self.assertEqual(loaded.username, "alice")
        self.assertEqual(loaded.status, "pending")
        self.assertEqual(self.store.accounts.get_by_username("alice").id, "a-1")

        self.store.accounts.put(loaded.model_copy(update={"status": "approved", "credential_blob": "ab:cd"}))
        reloaded = self.store.accounts.get("a-1")
        assert reloaded is not None
        self.assertEqual(reloaded.status, "approved")
        self.assertEqual(reloaded.credential_blob, "ab:cd")

    def test_duplicate_username(self) -> None:
        self.store.accounts.create(_account("a-1", "alice"))
        with self.assertRaises(UsernameTakenError):
            self.store.accounts.create(_account("a-2", "alice"))
        self.assertEqual(len(self.store.accounts.list_all()), 1)

    def test_put_missing_account(self) -> None:
        with self.assertRaises(AccountNotFoundError):
            self.store.accounts.put(_account("ghost", "ghost"))

    def test_command_round_trip_and_delete(self) -> None:
        self.store.commands.put(_command())
        loaded = self.store.commands.get("c-1")
        assert loaded is not None
        self.assertIsInstance(loaded.temperature, float)
        self.assertAlmostEqual(loaded.temperature, 0.35)
        self.assertTrue(loaded.is_published)

        self.store.commands.put(loaded.model_copy(update={"name": "Shorten"}))
        self.assertEqual(self.store.commands.get("c-1").name, "Shorten")
        self.assertEqual(len(self.store.commands.list_all()), 1)

        self.assertTrue(self.store.commands.delete("c-1"))
        self.assertFalse(self.store.commands.delete("c-1"))
        self.assertIsNone(self.store.commands.get("c-1"))

    def test_preference_upsert_and_cleanup(self) -> None:
        self.store.accounts.create(_account("a-1", "alice"))
        self.store.commands.put(_command())
        self.store.preferences.put(_preference("p-1", visible=True))
        self.store.preferences.put(_preference("p-1", visible=False))

        prefs = self.store.preferences.list_for_user("a-1")
        self.assertEqual(len(prefs), 1)
        self.assertFalse(prefs[0].is_visible)
        self.assertEqual(self.store.preferences.get("a-1", "c-1").id, "p-1")

        self.store.commands.delete("c-1")
        self.assertEqual(self.store.preferences.list_for_user("a-1"), [])


if __name__ == "__main__":
    unittest.main()
