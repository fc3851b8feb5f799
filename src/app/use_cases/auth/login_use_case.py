"""
Login Use Case

Starts a sign-in for a known directory member.
"""

import logging

from src.app.services.credential_store import CredentialStore
from src.app.services.pending_registration_cache import PendingRegistrationCache
from src.app.services.session_state import SessionState
from src.app.services.unit_of_work import DirectoryError, UnitOfWork
from src.domain.base import emails_match, normalize_email
from src.domain.result import Error, Result, Return
from .dtos import AuthFlowResponse, LoginCommand

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for signing a member in.

    Business Rules:
    - Email is trimmed and lowercased before anything else
    - Unknown emails fail fast, before the credential store is contacted,
      unless a pending registration for that email is waiting to complete
    - With a password the session opens immediately; without one a
      one-time code is emailed and the session opens on verification
    - Either way SessionState is populated by the synchronizer when the
      credential store reports signed_in, never here
    - Failures leave SessionState unchanged
    - A sign-in whose registration or directory lookup then fails is
      reported with that error, not as signed in
    """

    def __init__(
        self,
        uow: UnitOfWork,
        credential_store: CredentialStore,
        pending_registrations: PendingRegistrationCache,
        state: SessionState,
    ):
        self.uow = uow
        self.credential_store = credential_store
        self.pending_registrations = pending_registrations
        self.state = state

    async def execute(self, command: LoginCommand) -> Result[AuthFlowResponse]:
        """
        Execute login use case.

        Args:
            command: LoginCommand with email and optional password

        Returns:
            Result with AuthFlowResponse, or Error

        Errors:
            - EMAIL_REQUIRED: Blank email
            - USER_NOT_FOUND: No directory member with this email
            - DIRECTORY_FAULT: Member lookup failed
            - REGISTRATION_FAILED / TEAM_NOT_FOUND: Signed in, but the pending
              registration could not be completed
            - INVALID_CREDENTIALS / credential store errors: passed through
        """
        email = normalize_email(command.email)
        if not email:
            return Return.err(Error("EMAIL_REQUIRED", "Please enter your email address"))

        try:
            async with self.uow:
                member = await self.uow.members.get_by_email(email)
        except DirectoryError as exc:
            logger.error(f"Member lookup failed during login: {exc}")
            return Return.err(
                Error(
                    "DIRECTORY_FAULT", "Could not reach the team directory, please retry"
                )
            )

        if member is None and not self._registration_pending(email):
            return Return.err(
                Error(
                    "USER_NOT_FOUND",
                    "No account found for this email. Sign up or ask your manager for access.",
                )
            )

        if command.password:
            result = await self.credential_store.sign_in_with_password(
                email, command.password
            )
            if result.is_err():
                logger.warning(f"Password sign-in failed for {email}: {result.error.code}")
                return Return.err(result.error)

            # signed_in has been handled by the synchronizer by now
            if self.state.error is not None:
                return Return.err(self.state.error)

            return Return.ok(
                AuthFlowResponse(
                    status="signed_in",
                    message="Welcome back!",
                    session=self.state.snapshot(),
                )
            )

        result = await self.credential_store.sign_in_with_otp(email)
        if result.is_err():
            logger.warning(f"Sign-in code request failed for {email}: {result.error.code}")
            return Return.err(result.error)

        return Return.ok(
            AuthFlowResponse(
                status="confirmation_sent",
                message="Check your email for a sign-in code",
                session=self.state.snapshot(),
            )
        )

    def _registration_pending(self, email: str) -> bool:
        # Sign-up went through but the member was never created; signing in
        # again is what completes it
        intent = self.pending_registrations.get()
        return intent is not None and emails_match(intent.email, email)
