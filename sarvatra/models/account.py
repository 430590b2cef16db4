"""ORM model for user accounts (auth, approval lifecycle, encrypted API key)."""

from sqlalchemy import Column, DateTime, String, Text, func

from sarvatra.models.base import Base


class Account(Base):
    """
    Account for session-token authentication and role-based access control.

    role: 'admin' or 'user'; status: 'pending', 'approved' or 'rejected'.
    credential_blob holds the user's third-party API key, encrypted (never plaintext).
    """

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")
    status = Column(String(32), nullable=False, default="pending", index=True)
    credential_blob = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)
