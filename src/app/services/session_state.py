"""
Session State

The {user, is_loading, is_manager} view of authentication that the rest of
the application reads. One instance per application, created at startup and
written only by the session synchronizer and logout.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from src.domain.entities import MemberRole, SessionUser
from src.domain.result import Error

logger = logging.getLogger(__name__)


class SessionSnapshot(BaseModel):
    """Immutable copy of SessionState for API responses"""

    user: Optional[SessionUser] = None
    is_loading: bool
    is_manager: bool


class SessionState:
    def __init__(self):
        self._user: Optional[SessionUser] = None
        self._is_loading = True
        self._error: Optional[Error] = None

    @property
    def user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_manager(self) -> bool:
        # Derived on every read so it can never disagree with user
        return self._user is not None and self._user.role == MemberRole.manager

    @property
    def error(self) -> Optional[Error]:
        """Why the last sign-in could not be resolved, if it failed"""
        return self._error

    def begin_loading(self) -> None:
        self._is_loading = True
        self._error = None

    def resolve(self, user: Optional[SessionUser]) -> None:
        """Settle on user (or no user) and stop loading"""
        self._user = user
        self._is_loading = False
        self._error = None
        if user is None:
            logger.info("Session resolved without a user")
        else:
            logger.info(f"Session resolved for {user.email} as {user.role.value}")

    def fail(self, error: Error) -> None:
        """Stop loading on a failed sign-in; the user is left as it is"""
        self._error = error
        self._is_loading = False

    def clear(self) -> None:
        self.resolve(None)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            user=self._user, is_loading=self._is_loading, is_manager=self.is_manager
        )
