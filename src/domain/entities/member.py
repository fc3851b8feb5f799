"""
Member Entity

Links a credential-store identity to a team.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow
from .enums import MemberRole
from .team import Team


class Member(SQLModel, table=True):
    """
    Member entity - one row per confirmed identity.

    Business Rules:
    - id equals the credential-store identity id
    - email is unique and stored lowercase
    - Created exactly once, when a registration completes
    - Role is not stored; see derive_role
    """

    __tablename__ = "members"

    id: UUID = Field(primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)

    team_id: UUID = Field(foreign_key="teams.id", nullable=False, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))


def derive_role(member: Member, team: Optional[Team]) -> MemberRole:
    """Manager iff the member's email is the team's manager email"""
    if team is not None and team.is_managed_by(member.email):
        return MemberRole.manager
    return MemberRole.member
