"""
OneTimeCode Entity

Six-digit sign-in codes sent by email.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class OneTimeCode(SQLModel, table=True):
    """
    OneTimeCode entity - passwordless sign-in and email confirmation.

    Business Rules:
    - Code is stored as SHA-256 hash, never in plain text
    - Single-use: marked as used after verification
    - Issuing a new code invalidates earlier unused ones
    """

    __tablename__ = "one_time_codes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: UUID = Field(foreign_key="credential_accounts.id", index=True)
    code_hash: str = Field(max_length=64)

    used: bool = Field(default=False)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_one_time_code_account_used", "account_id", "used"),)
