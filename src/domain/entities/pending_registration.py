"""
Pending Registration Intents

A registration that was requested but whose identity has not been confirmed
yet. Tagged by kind so a manager intent always carries a team name and a
member intent always carries a team id.
"""

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ManagerRegistration(BaseModel):
    """Manager creating a new team"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["manager"] = "manager"
    email: str
    team_name: str

    @property
    def is_manager(self) -> bool:
        return True


class MemberRegistration(BaseModel):
    """Member joining an existing team"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["member"] = "member"
    email: str
    team_id: UUID

    @property
    def is_manager(self) -> bool:
        return False


PendingRegistration = Annotated[
    Union[ManagerRegistration, MemberRegistration], Field(discriminator="kind")
]

pending_registration_adapter: TypeAdapter[PendingRegistration] = TypeAdapter(
    PendingRegistration
)
