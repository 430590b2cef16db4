"""Pydantic schemas for AI commands, per-user command preferences and AI processing."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

OutputType = Literal["replace", "append", "new_window"]

DEFAULT_TEMPERATURE = 0.3


def _validate_temperature(value: float) -> float:
    if not 0 <= value <= 2:
        raise ValueError("temperature must be between 0 and 2")
    return round(value, 2)


class CommandRecord(BaseModel):
    """Admin-configured prompt that users can run against their text."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    prompt: str
    temperature: float = DEFAULT_TEMPERATURE
    output_type: OutputType = "replace"
    is_active: bool = True
    published_to_users: bool = False
    created_at: datetime
    updated_at: datetime

    @property
    def is_published(self) -> bool:
        """Visible to users only when both active and published."""
        return self.is_active and self.published_to_users


class PreferenceRecord(BaseModel):
    """A user's visibility/badge state for one command (unique per user and command)."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    user_id: str
    command_id: str
    is_visible: bool = True
    has_seen_new_badge: bool = False
    created_at: datetime
    updated_at: datetime


class CommandCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    prompt: str = Field(..., min_length=1, max_length=20_000)
    temperature: float = DEFAULT_TEMPERATURE
    output_type: OutputType = "replace"
    is_active: bool = True
    published_to_users: bool = False

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        return _validate_temperature(v)


class CommandUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    prompt: str | None = Field(default=None, min_length=1, max_length=20_000)
    temperature: float | None = None
    output_type: OutputType | None = None
    is_active: bool | None = None
    published_to_users: bool | None = None

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float | None) -> float | None:
        return None if v is None else _validate_temperature(v)


class CommandResponse(BaseModel):
    command: CommandRecord


class CommandsListResponse(BaseModel):
    commands: list[CommandRecord]


class DeleteResponse(BaseModel):
    success: bool = True


class PreferenceUpdateRequest(BaseModel):
    command_id: str = Field(..., min_length=1)
    is_visible: bool
    has_seen_new_badge: bool | None = None


class PreferenceResponse(BaseModel):
    preference: PreferenceRecord


class PreferencesListResponse(BaseModel):
    preferences: list[PreferenceRecord]


class CommandWithPreference(CommandRecord):
    """Published command merged with the caller's preference (visible by default)."""

    is_visible: bool = True
    is_new: bool = True
    user_preference_id: str | None = None


class CommandsWithPreferencesResponse(BaseModel):
    commands: list[CommandWithPreference]


class TextProcessRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=100_000)
    command_id: str = Field(..., min_length=1)


class TextProcessResponse(BaseModel):
    processed_text: str
    output_type: OutputType


class SpeechProcessRequest(BaseModel):
    audio_data: str = Field(..., min_length=1, description="Base64-encoded audio")
    format: str = Field(default="webm", pattern=r"^[a-z0-9]{2,8}$")


class SpeechProcessResponse(BaseModel):
    transcription: str
