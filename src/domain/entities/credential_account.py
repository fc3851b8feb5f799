"""
CredentialAccount Entity

Sign-in identity held by the local credential store.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class CredentialAccount(SQLModel, table=True):
    """
    CredentialAccount entity - the identity behind a session.

    Business Rules:
    - Email must be unique across all accounts
    - password_hash is a bcrypt hash; null for code-only accounts
    - email_confirmed flips on the first successful code verification
    """

    __tablename__ = "credential_accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: Optional[str] = Field(default=None, max_length=60)

    email_confirmed: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_sign_in_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
