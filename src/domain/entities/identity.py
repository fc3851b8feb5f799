"""
Credential Store Value Objects

Shapes exchanged with the credential store: who signed in, the session that
proves it, and the auth-state events it pushes.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .enums import AuthEventKind


class Identity(BaseModel):
    """Identity issued by the credential store"""

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str


class AuthSession(BaseModel):
    """Active session for an identity"""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: datetime
    identity: Identity


class AuthEvent(BaseModel):
    """Auth-state change delivered to subscribers"""

    model_config = ConfigDict(frozen=True)

    kind: AuthEventKind
    session: Optional[AuthSession] = None


class SignUpOutcome(BaseModel):
    """
    Result of creating an identity.

    session is None when the identity must confirm its email first.
    """

    identity: Identity
    session: Optional[AuthSession] = None

    @property
    def confirmation_required(self) -> bool:
        return self.session is None
