"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field

from src.app.services.session_state import SessionSnapshot


# ============================================================================
# Command DTOs
# ============================================================================


class LoginCommand(BaseModel):
    """Login intent; no password means a one-time code is emailed"""

    email: str
    password: Optional[str] = None


class ManagerRegisterCommand(BaseModel):
    """Register as the manager of a new team"""

    role: Literal["manager"] = "manager"
    email: str
    team_name: str = ""
    password: Optional[str] = None


class MemberRegisterCommand(BaseModel):
    """Register as a member of an existing team"""

    role: Literal["member"] = "member"
    email: str
    team_id: str = ""
    password: Optional[str] = None


RegisterCommand = Annotated[
    Union[ManagerRegisterCommand, MemberRegisterCommand], Field(discriminator="role")
]


# ============================================================================
# Response DTOs
# ============================================================================


class AuthFlowResponse(BaseModel):
    """
    Response for login, registration, verification and logout.

    status is one of: signed_in, confirmation_sent, registered,
    confirmation_required, account_not_found, signed_out
    """

    status: str
    message: str
    session: SessionSnapshot
