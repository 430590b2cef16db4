"""AI command catalogue and per-user command preferences."""

import logging
import uuid
from datetime import UTC, datetime

from sarvatra.core.errors import CommandNotFoundError, CommandUnavailableError
from sarvatra.schemas.command import (
    CommandCreateRequest,
    CommandRecord,
    CommandUpdateRequest,
    CommandWithPreference,
    PreferenceRecord,
    PreferenceUpdateRequest,
)
from sarvatra.stores.base import Store

logger = logging.getLogger(__name__)

# Seeded unpublished on first start; admins decide what users see.
DEFAULT_COMMANDS: tuple[dict[str, object], ...] = (
    {
        "name": "Summarize",
        "prompt": "Please provide a concise summary of the following text:",
        "temperature": 0.3,
        "output_type": "replace",
    },
    {
        "name": "Medical Notes",
        "prompt": (
            "Format this patient information as structured medical notes "
            "following standard documentation practices:"
        ),
        "temperature": 0.1,
        "output_type": "new_window",
    },
    {
        "name": "Improve Writing",
        "prompt": (
            "Improve the grammar, style, and clarity of this text while "
            "maintaining the original meaning:"
        ),
        "temperature": 0.5,
        "output_type": "replace",
    },
)


def _now() -> datetime:
    return datetime.now(UTC)


def list_commands(store: Store) -> list[CommandRecord]:
    return store.commands.list_all()


def list_published_commands(store: Store) -> list[CommandRecord]:
    return [c for c in store.commands.list_all() if c.is_published]


def get_command(store: Store, command_id: str) -> CommandRecord:
    command = store.commands.get(command_id)
    if command is None:
        raise CommandNotFoundError(command_id)
    return command


def get_published_command(store: Store, command_id: str) -> CommandRecord:
    """Command a user may run; unpublished or inactive commands look missing."""
    command = store.commands.get(command_id)
    if command is None or not command.is_published:
        raise CommandNotFoundError(command_id)
    return command


def create_command(store: Store, request: CommandCreateRequest) -> CommandRecord:
    now = _now()
    command = CommandRecord(
        id=str(uuid.uuid4()),
        created_at=now,
        updated_at=now,
        **request.model_dump(),
    )
    store.commands.put(command)
    logger.info("Command created", extra={"command_id": command.id})
    return command


def update_command(
    store: Store, command_id: str, request: CommandUpdateRequest
) -> CommandRecord:
    command = get_command(store, command_id)
    changes = request.model_dump(exclude_none=True)
    changes["updated_at"] = _now()
    return store.commands.put(command.model_copy(update=changes))


def set_published(store: Store, command_id: str, published: bool) -> CommandRecord:
    return update_command(
        store, command_id, CommandUpdateRequest(published_to_users=published)
    )


def delete_command(store: Store, command_id: str) -> None:
    if not store.commands.delete(command_id):
        raise CommandNotFoundError(command_id)
    logger.info("Command deleted", extra={"command_id": command_id})


def seed_default_commands(store: Store) -> int:
    """Add the default commands when the catalogue is empty. Returns how many were added."""
    if store.commands.list_all():
        return 0
    for spec in DEFAULT_COMMANDS:
        create_command(store, CommandCreateRequest(**spec))
    return len(DEFAULT_COMMANDS)


def list_preferences(store: Store, user_id: str) -> list[PreferenceRecord]:
    return store.preferences.list_for_user(user_id)


def set_preference(
    store: Store, user_id: str, request: PreferenceUpdateRequest
) -> PreferenceRecord:
    """Create or update the caller's preference for a published command."""
    command = get_command(store, request.command_id)
    if not command.is_published:
        raise CommandUnavailableError(command.id)

    now = _now()
    existing = store.preferences.get(user_id, command.id)
    if existing is not None:
        changes: dict[str, object] = {"is_visible": request.is_visible, "updated_at": now}
        if request.has_seen_new_badge is not None:
            changes["has_seen_new_badge"] = request.has_seen_new_badge
        return store.preferences.put(existing.model_copy(update=changes))

    return store.preferences.put(
        PreferenceRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            command_id=command.id,
            is_visible=request.is_visible,
            has_seen_new_badge=bool(request.has_seen_new_badge),
            created_at=now,
            updated_at=now,
        )
    )


def commands_with_preferences(store: Store, user_id: str) -> list[CommandWithPreference]:
    """Published commands merged with the user's preferences; new until the badge is seen."""
    prefs = {p.command_id: p for p in store.preferences.list_for_user(user_id)}
    merged: list[CommandWithPreference] = []
    for command in list_published_commands(store):
        pref = prefs.get(command.id)
        merged.append(
            CommandWithPreference(
                **command.model_dump(),
                is_visible=pref.is_visible if pref else True,
                is_new=not (pref and pref.has_seen_new_badge),
                user_preference_id=pref.id if pref else None,
            )
        )
    return merged
