"""
Team Entity

A group of members led by exactly one manager.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import emails_match, utcnow


class Team(SQLModel, table=True):
    """
    Team entity - created by a registering manager.

    Business Rules:
    - id is generated by the directory on insert
    - manager_email identifies the one member whose role is manager
    - Never updated or deleted by the auth flows
    """

    __tablename__ = "teams"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)

    manager_email: Optional[str] = Field(default=None, max_length=255, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    def is_managed_by(self, email: str) -> bool:
        return emails_match(self.manager_email, email)
