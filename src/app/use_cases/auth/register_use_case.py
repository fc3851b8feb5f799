"""
Register Use Case

Registers a manager (with a new team) or a member (of an existing team).
"""

import logging
from typing import Union
from uuid import UUID

from src.app.services.credential_store import CredentialStore
from src.app.services.pending_registration_cache import PendingRegistrationCache
from src.app.services.session_state import SessionState
from src.app.services.unit_of_work import DirectoryError, UnitOfWork
from src.app.use_cases.session import SessionSynchronizer
from src.domain.base import normalize_email
from src.domain.entities import (
    ManagerRegistration,
    MemberRegistration,
    PendingRegistration,
)
from src.domain.result import Error, Result, Return
from .dtos import AuthFlowResponse, ManagerRegisterCommand, MemberRegisterCommand

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class RegisterUseCase:
    """
    Registration Use Case

    Business Logic:
    1. Validate fields for the chosen role (no remote calls)
    2. Reject emails that already belong to a directory member
    3. Members: verify the team exists before creating any identity
    4. Store the pending registration (overwrites any earlier one)
    5. With a password: sign up; if a session comes back, finish the
       registration inline, otherwise wait for email confirmation
    6. Without a password: email a one-time code; the registration is
       finished by the synchronizer when the code is verified

    Team and member records are never created here directly; they are
    created by SessionSynchronizer.complete_registration, which is safe to
    run more than once.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        credential_store: CredentialStore,
        pending_registrations: PendingRegistrationCache,
        synchronizer: SessionSynchronizer,
        state: SessionState,
    ):
        self.uow = uow
        self.credential_store = credential_store
        self.pending_registrations = pending_registrations
        self.synchronizer = synchronizer
        self.state = state

    def _build_intent(
        self, command: Union[ManagerRegisterCommand, MemberRegisterCommand]
    ) -> Result[PendingRegistration]:
        """
        Validate command fields and build the pending registration.

        Returns:
            Result with the intent, or a validation Error
        """
        email = normalize_email(command.email)
        if not email:
            return Return.err(
                Error("EMAIL_REQUIRED", "Please enter your email to get started")
            )

        if command.password is not None and len(command.password) < MIN_PASSWORD_LENGTH:
            return Return.err(
                Error(
                    "INVALID_PASSWORD",
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                )
            )

        if isinstance(command, ManagerRegisterCommand):
            team_name = command.team_name.strip()
            if not team_name:
                return Return.err(
                    Error("TEAM_NAME_REQUIRED", "Please give your team a name")
                )
            return Return.ok(ManagerRegistration(email=email, team_name=team_name))

        team_id = command.team_id.strip()
        if not team_id:
            return Return.err(
                Error(
                    "TEAM_ID_REQUIRED",
                    "Ask your manager for the team verification code",
                )
            )
        try:
            return Return.ok(MemberRegistration(email=email, team_id=UUID(team_id)))
        except ValueError:
            return Return.err(_team_not_found())

    async def execute(
        self, command: Union[ManagerRegisterCommand, MemberRegisterCommand]
    ) -> Result[AuthFlowResponse]:
        """
        Execute registration use case

        Args:
            command: ManagerRegisterCommand or MemberRegisterCommand

        Returns:
            Result[AuthFlowResponse] with status registered or
            confirmation_required, or Error

        Errors:
            - EMAIL_REQUIRED, INVALID_PASSWORD, TEAM_NAME_REQUIRED,
              TEAM_ID_REQUIRED: validation, nothing contacted
            - TEAM_NOT_FOUND: member team does not exist, no signup attempted
            - EMAIL_ALREADY_REGISTERED: member or identity exists already
            - REGISTRATION_FAILED: directory records could not be created
        """
        intent_result = self._build_intent(command)
        if intent_result.is_err():
            return Return.err(intent_result.error)
        intent = intent_result.value

        team = None
        try:
            async with self.uow:
                member = await self.uow.members.get_by_email(intent.email)
                if member is None and isinstance(intent, MemberRegistration):
                    team = await self.uow.teams.get_by_id(intent.team_id)
        except DirectoryError as exc:
            logger.error(f"Directory lookup failed during registration: {exc}")
            return Return.err(
                Error(
                    "DIRECTORY_FAULT", "Could not reach the team directory, please retry"
                )
            )

        if member is not None:
            return Return.err(_already_registered())
        if isinstance(intent, MemberRegistration) and team is None:
            return Return.err(_team_not_found())

        self.pending_registrations.set(intent)

        if command.password is None:
            result = await self.credential_store.sign_in_with_otp(
                intent.email, create_account=True
            )
            if result.is_err():
                logger.warning(
                    f"Registration code request failed for {intent.email}: {result.error.code}"
                )
                return Return.err(result.error)
            return Return.ok(self._confirmation_required())

        signup_result = await self.credential_store.sign_up(intent.email, command.password)
        if signup_result.is_err():
            error = signup_result.error
            logger.warning(f"Sign-up failed for {intent.email}: {error.code}")
            if error.code == "EMAIL_ALREADY_REGISTERED":
                return Return.err(_already_registered())
            return Return.err(error)

        outcome = signup_result.value
        if outcome.confirmation_required:
            return Return.ok(self._confirmation_required())

        completion = await self.synchronizer.complete_registration(intent, outcome.identity)
        if completion.is_err():
            return Return.err(completion.error)

        return Return.ok(
            AuthFlowResponse(
                status="registered",
                message=(
                    "Team successfully created!"
                    if intent.is_manager
                    else "Successfully joined team!"
                ),
                session=self.state.snapshot(),
            )
        )

    def _confirmation_required(self) -> AuthFlowResponse:
        return AuthFlowResponse(
            status="confirmation_required",
            message="Check your email to finish setting up your account",
            session=self.state.snapshot(),
        )


def _team_not_found() -> Error:
    return Error(
        "TEAM_NOT_FOUND", "No team matches this code. Check it with your manager."
    )


def _already_registered() -> Error:
    return Error(
        "EMAIL_ALREADY_REGISTERED",
        "This email is already registered. Please sign in instead.",
    )
