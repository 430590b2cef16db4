"""SQLAlchemy-backed store: one session per operation, records converted at the boundary."""

import logging

from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from sarvatra.core.database import check_db_connected, make_session_factory
from sarvatra.core.errors import AccountNotFoundError, UsernameTakenError
from sarvatra.models import Account, AiCommand, Base, CommandPreference
from sarvatra.schemas.account import AccountRecord
from sarvatra.schemas.command import CommandRecord, PreferenceRecord

logger = logging.getLogger(__name__)


def _account_record(row: Account) -> AccountRecord:
    return AccountRecord.model_validate(row)


def _command_record(row: AiCommand) -> CommandRecord:
    return CommandRecord(
        id=row.id,
        name=row.name,
        prompt=row.prompt,
        temperature=float(row.temperature),
        output_type=row.output_type,
        is_active=row.is_active,
        published_to_users=row.published_to_users,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _preference_record(row: CommandPreference) -> PreferenceRecord:
    return PreferenceRecord.model_validate(row)


class SqlAccountStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, account_id: str) -> AccountRecord | None:
        with self._session_factory() as db:
            row = db.get(Account, account_id)
            return _account_record(row) if row is not None else None

    def get_by_username(self, username: str) -> AccountRecord | None:
        with self._session_factory() as db:
            row = db.query(Account).filter(Account.username == username).first()
            return _account_record(row) if row is not None else None

    def create(self, record: AccountRecord) -> AccountRecord:
        with self._session_factory() as db:
            db.add(Account(**record.model_dump()))
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise UsernameTakenError(record.username) from e
        return record

    def put(self, record: AccountRecord) -> AccountRecord:
        with self._session_factory() as db:
            row = db.get(Account, record.id)
            if row is None:
                raise AccountNotFoundError(record.id)
            for field, value in record.model_dump(exclude={"id"}).items():
                setattr(row, field, value)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise UsernameTakenError(record.username) from e
        return record

    def list_all(self) -> list[AccountRecord]:
        with self._session_factory() as db:
            rows = db.query(Account).order_by(Account.created_at).all()
            return [_account_record(r) for r in rows]


class SqlCommandStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, command_id: str) -> CommandRecord | None:
        with self._session_factory() as db:
            row = db.get(AiCommand, command_id)
            return _command_record(row) if row is not None else None

    def put(self, record: CommandRecord) -> CommandRecord:
        with self._session_factory() as db:
            db.merge(AiCommand(**record.model_dump()))
            db.commit()
        return record

    def delete(self, command_id: str) -> bool:
        with self._session_factory() as db:
            row = db.get(AiCommand, command_id)
            if row is None:
                return False
            db.query(CommandPreference).filter(
                CommandPreference.command_id == command_id
            ).delete(synchronize_session=False)
            db.delete(row)
            db.commit()
            return True

    def list_all(self) -> list[CommandRecord]:
        with self._session_factory() as db:
            rows = db.query(AiCommand).order_by(AiCommand.created_at).all()
            return [_command_record(r) for r in rows]


class SqlPreferenceStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get(self, user_id: str, command_id: str) -> PreferenceRecord | None:
        with self._session_factory() as db:
            row = (
                db.query(CommandPreference)
                .filter(
                    CommandPreference.user_id == user_id,
                    CommandPreference.command_id == command_id,
                )
                .first()
            )
            return _preference_record(row) if row is not None else None

    def put(self, record: PreferenceRecord) -> PreferenceRecord:
        with self._session_factory() as db:
            row = (
                db.query(CommandPreference)
                .filter(
                    CommandPreference.user_id == record.user_id,
                    CommandPreference.command_id == record.command_id,
                )
                .first()
            )
            if row is None:
                db.add(CommandPreference(**record.model_dump()))
            else:
                row.is_visible = record.is_visible
                row.has_seen_new_badge = record.has_seen_new_badge
                row.updated_at = record.updated_at
            db.commit()
        return record

    def list_for_user(self, user_id: str) -> list[PreferenceRecord]:
        with self._session_factory() as db:
            rows = (
                db.query(CommandPreference)
                .filter(CommandPreference.user_id == user_id)
                .all()
            )
            return [_preference_record(r) for r in rows]


class SqlStore:
    backend = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        session_factory = make_session_factory(engine)
        self._session_factory = session_factory
        self.accounts = SqlAccountStore(session_factory)
        self.commands = SqlCommandStore(session_factory)
        self.preferences = SqlPreferenceStore(session_factory)

    def ping(self) -> bool:
        with self._session_factory() as db:
            connected = check_db_connected(db)
        if not connected:
            logger.warning("Database ping failed")
        return connected

    def create_schema(self) -> None:
        """Create missing tables (SQLite and dev databases); production schemas come from alembic."""
        Base.metadata.create_all(self.engine)
