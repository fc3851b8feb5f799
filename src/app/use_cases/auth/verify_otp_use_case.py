"""
Verify One-Time Code Use Case

Confirms an emailed sign-in code. Verification makes the credential store
report signed_in, which finishes any registration waiting on it.
"""

import logging

from src.app.services.credential_store import CredentialStore
from src.app.services.session_state import SessionState
from src.domain.base import normalize_email
from src.domain.result import Error, Result, Return
from .dtos import AuthFlowResponse

logger = logging.getLogger(__name__)


class VerifyOtpUseCase:
    def __init__(self, credential_store: CredentialStore, state: SessionState):
        self.credential_store = credential_store
        self.state = state

    async def execute(self, email: str, code: str) -> Result[AuthFlowResponse]:
        email = normalize_email(email)
        code = (code or "").strip()
        if not email or not code:
            return Return.err(
                Error("CODE_REQUIRED", "Enter the email and the code we sent you")
            )

        result = await self.credential_store.verify_otp(email, code)
        if result.is_err():
            logger.warning(f"Code verification failed for {email}: {result.error.code}")
            return Return.err(result.error)

        # The signed_in event has already run the synchronizer
        if self.state.error is not None:
            logger.warning(f"Signed in {email} but sync failed: {self.state.error.code}")
            return Return.err(self.state.error)

        snapshot = self.state.snapshot()
        if snapshot.user is None:
            # Confirmed identity without member or pending registration
            return Return.ok(
                AuthFlowResponse(
                    status="account_not_found",
                    message="You are signed in but not part of a team yet. "
                    "Register or ask your manager for the team code.",
                    session=snapshot,
                )
            )

        return Return.ok(
            AuthFlowResponse(
                status="signed_in", message="Welcome to OpsPilot AI.", session=snapshot
            )
        )
