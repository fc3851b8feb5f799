"""
OpsPilot Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class MemberRole(str, Enum):
    """Role of a member within their team, derived at read time"""

    manager = "manager"
    member = "member"


class AuthEventKind(str, Enum):
    """Auth-state changes pushed by the credential store"""

    signed_in = "signed_in"
    signed_out = "signed_out"
    token_refreshed = "token_refreshed"
    user_updated = "user_updated"
