"""
SessionUser

The signed-in user as the rest of the application sees it.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field

from .enums import MemberRole
from .member import Member, derive_role
from .team import Team


class SessionUser(BaseModel):
    """Recomputed whenever the session or directory changes; never stored"""

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str
    team_id: UUID
    team_name: Optional[str] = None
    role: MemberRole

    @computed_field
    @property
    def name(self) -> str:
        """Display name: the local part of the email"""
        return self.email.split("@")[0]

    @classmethod
    def from_directory(cls, member: Member, team: Optional[Team]) -> "SessionUser":
        return cls(
            id=member.id,
            email=member.email,
            team_id=member.team_id,
            team_name=team.name if team is not None else None,
            role=derive_role(member, team),
        )
