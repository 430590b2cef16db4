"""ORM models for admin-configured AI commands and per-user command preferences."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from sarvatra.models.base import Base


class AiCommand(Base):
    """Prompt template that approved users can run against their text once published."""

    __tablename__ = "ai_commands"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    prompt = Column(Text, nullable=False)
    temperature = Column(Numeric(3, 2), nullable=False, default=0.3)
    output_type = Column(String(32), nullable=False, default="replace")
    is_active = Column(Boolean, nullable=False, default=True)
    published_to_users = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CommandPreference(Base):
    __tablename__ = "user_command_preferences"
    __table_args__ = (
        UniqueConstraint("user_id", "command_id", name="uq_user_command_preference"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    command_id = Column(
        String(36), ForeignKey("ai_commands.id", ondelete="CASCADE"), nullable=False
    )
    is_visible = Column(Boolean, nullable=False, default=True)
    has_seen_new_badge = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
