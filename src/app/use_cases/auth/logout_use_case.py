"""
Logout Use Case
"""

import logging

from src.app.services.credential_store import CredentialStore
from src.app.services.session_state import SessionState
from src.domain.result import Result, Return
from .dtos import AuthFlowResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for signing out.

    Business Rules:
    - SessionState is cleared right away, without waiting for the
      credential store's signed_out event
    - A failing sign-out is logged but still logs the user out locally
    """

    def __init__(self, credential_store: CredentialStore, state: SessionState):
        self.credential_store = credential_store
        self.state = state

    async def execute(self) -> Result[AuthFlowResponse]:
        result = await self.credential_store.sign_out()
        if result.is_err():
            logger.warning(f"Credential store sign-out failed: {result.error.code}")

        self.state.clear()

        return Return.ok(
            AuthFlowResponse(
                status="signed_out",
                message="You have been signed out",
                session=self.state.snapshot(),
            )
        )
