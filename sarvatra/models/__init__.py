"""SQLAlchemy ORM models."""

from sarvatra.models.account import Account
from sarvatra.models.base import Base
from sarvatra.models.command import AiCommand, CommandPreference

__all__ = ["Account", "AiCommand", "Base", "CommandPreference"]
