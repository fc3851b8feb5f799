"""
AuthSessionRecord Entity

Persisted sign-in sessions of the local credential store.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel, Text

from src.domain.base import utcnow


class AuthSessionRecord(SQLModel, table=True):
    """
    AuthSessionRecord entity - survives process restarts.

    Business Rules:
    - Refresh tokens are hashed (bcrypt)
    - Access token is kept so a restarted process can resume the session
    - Revoked or expired sessions are never returned
    """

    __tablename__ = "auth_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: UUID = Field(foreign_key="credential_accounts.id", index=True)

    access_token: str = Field(sa_column=Column(Text))
    refresh_token_hash: str = Field(max_length=60)
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_auth_session_expires_at", "expires_at"),
        Index("idx_auth_session_revoked", "revoked"),
    )
