"""
OpsPilot Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import AuthEventKind, MemberRole

# Export directory entities
from .team import Team
from .member import Member, derive_role

# Export credential store entities
from .credential_account import CredentialAccount
from .one_time_code import OneTimeCode
from .session import AuthSessionRecord

# Export value objects
from .identity import AuthEvent, AuthSession, Identity, SignUpOutcome
from .session_user import SessionUser
from .pending_registration import (
    ManagerRegistration,
    MemberRegistration,
    PendingRegistration,
    pending_registration_adapter,
)

__all__ = [
    # Enums
    "AuthEventKind",
    "MemberRole",
    # Entities
    "Team",
    "Member",
    "CredentialAccount",
    "OneTimeCode",
    "AuthSessionRecord",
    # Value objects
    "AuthEvent",
    "AuthSession",
    "Identity",
    "SignUpOutcome",
    "SessionUser",
    "ManagerRegistration",
    "MemberRegistration",
    "PendingRegistration",
    # Helpers
    "derive_role",
    "pending_registration_adapter",
]
