"""
Session Synchronizer

Turns whatever signal is available (a persisted session, an auth event, a
freshly completed registration) into a consistent SessionState, and finishes
registrations that were started before the identity was confirmed.
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from src.app.services.credential_store import CredentialStore, Subscription
from src.app.services.pending_registration_cache import PendingRegistrationCache
from src.app.services.session_state import SessionState
from src.app.services.unit_of_work import DirectoryError, UnitOfWork
from src.domain.base import emails_match, normalize_email
from src.domain.entities import (
    AuthEvent,
    AuthEventKind,
    Identity,
    ManagerRegistration,
    Member,
    PendingRegistration,
    SessionUser,
    Team,
)
from src.domain.result import Error, Result, Return

logger = logging.getLogger(__name__)


class SessionSynchronizer:
    """
    Sole writer of SessionState during sign-in.

    Business Rules:
    - Unrecognized auth events never change SessionState
    - An identity without a member and without a matching pending
      registration resolves to "no user"; it is not an error
    - Registration completion is two-phase (team, then member) and every
      phase re-checks before inserting, so it can be re-run after a crash
    - The pending registration is cleared only after the member exists
    - No locks: a duplicate reconcile is a no-op once the member exists
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        credential_store: CredentialStore,
        pending_registrations: PendingRegistrationCache,
        state: SessionState,
    ):
        self.uow_factory = uow_factory
        self.credential_store = credential_store
        self.pending_registrations = pending_registrations
        self.state = state
        self._subscription: Optional[Subscription] = None

    async def start(self) -> Result[Optional[SessionUser]]:
        """Subscribe to auth events, then restore any persisted session"""
        if self._subscription is None:
            self._subscription = self.credential_store.subscribe(self.on_auth_event)
        return await self.bootstrap()

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def bootstrap(self) -> Result[Optional[SessionUser]]:
        """
        Resolve SessionState from the credential store's persisted session.

        Returns:
            Result with the session user (None when signed out), or Error
        """
        session_result = await self.credential_store.get_session()
        if session_result.is_err():
            logger.error(f"Session bootstrap failed: {session_result.error.code}")
            self.state.resolve(None)
            return Return.err(session_result.error)

        session = session_result.value
        if session is None:
            self.state.resolve(None)
            return Return.ok(None)

        return await self.reconcile(session.identity)

    async def on_auth_event(self, event: AuthEvent) -> None:
        """Credential store listener"""
        if event.kind == AuthEventKind.signed_in and event.session is not None:
            await self.reconcile(event.session.identity)
        elif event.kind == AuthEventKind.signed_out:
            self.state.clear()
        else:
            logger.debug(f"Ignoring auth event {event.kind.value}")

    async def reconcile(self, identity: Identity) -> Result[Optional[SessionUser]]:
        """
        Resolve the directory member behind identity.

        Falls through to complete_registration when the member is missing
        and the pending registration belongs to this identity.

        Returns:
            Result with the session user (None when there is nothing to
            resolve), or Error(DIRECTORY_FAULT / REGISTRATION_FAILED)
        """
        self.state.begin_loading()

        try:
            async with self.uow_factory() as uow:
                member = await uow.members.get_by_email(normalize_email(identity.email))
                user = None
                if member is not None:
                    team = await uow.teams.get_by_id(member.team_id)
                    user = SessionUser.from_directory(member, team)
        except DirectoryError as exc:
            logger.error(f"Member lookup failed for {identity.email}: {exc}")
            return self._fail(
                Error("DIRECTORY_FAULT", "Could not load your account, please retry")
            )

        intent = self.pending_registrations.get()
        matches_intent = intent is not None and emails_match(
            intent.email, identity.email
        )

        if user is not None:
            if matches_intent:
                # Already a member, so this registration can never complete
                logger.info(f"Dropping pending registration of member {user.email}")
                self.pending_registrations.clear()
            self.state.resolve(user)
            return Return.ok(user)

        if not matches_intent:
            logger.info(f"No member or pending registration for {identity.email}")
            self.state.resolve(None)
            return Return.ok(None)

        return await self.complete_registration(intent, identity)

    async def complete_registration(
        self, intent: PendingRegistration, identity: Identity
    ) -> Result[SessionUser]:
        """
        Create the team (managers only) and member for a confirmed identity.

        Each phase reuses what an earlier, interrupted attempt left behind:
        the team is looked up by manager email and the member by identity id
        before anything is inserted.

        Returns:
            Result with the session user, or Error(REGISTRATION_FAILED /
            TEAM_NOT_FOUND)
        """
        self.state.begin_loading()
        email = normalize_email(intent.email)

        try:
            async with self.uow_factory() as uow:
                if isinstance(intent, ManagerRegistration):
                    team = await self._ensure_team(uow, intent, email)
                else:
                    team = await uow.teams.get_by_id(intent.team_id)

                user = None
                if team is not None:
                    member = await self._ensure_member(uow, identity.id, email, team.id)
                    team = await uow.teams.get_by_id(member.team_id)
                    user = SessionUser.from_directory(member, team)
        except DirectoryError as exc:
            # Pending registration stays so the next reconcile resumes here
            logger.error(f"Registration for {email} did not complete: {exc}")
            return self._fail(
                Error("REGISTRATION_FAILED", "Could not finish setting up your account")
            )

        if user is None:
            logger.warning(f"Team {intent.team_id} vanished before {email} could join")
            return self._fail(
                Error("TEAM_NOT_FOUND", "The team you are joining no longer exists")
            )

        self.pending_registrations.clear()

        self.state.resolve(user)
        logger.info(f"Registration completed for {email} in team {user.team_id}")
        return Return.ok(user)

    def _fail(self, error: Error) -> Result:
        self.state.fail(error)
        return Return.err(error)

    async def _ensure_team(
        self, uow: UnitOfWork, intent: ManagerRegistration, email: str
    ) -> Team:
        team = await uow.teams.get_by_manager_email(email)
        if team is not None:
            logger.info(f"Reusing team {team.id} managed by {email}")
            return team

        team = await uow.teams.create(
            Team(name=intent.team_name.strip(), manager_email=email)
        )
        await uow.commit()
        return team

    async def _ensure_member(
        self, uow: UnitOfWork, member_id: UUID, email: str, team_id: UUID
    ) -> Member:
        member = await uow.members.get_by_id(member_id)
        if member is not None:
            logger.info(f"Reusing member {member_id}")
            return member

        try:
            member = await uow.members.create(
                Member(id=member_id, email=email, team_id=team_id)
            )
            await uow.commit()
        except DirectoryError:
            # A concurrent pass may have inserted the same member first
            await uow.rollback()
            member = await uow.members.get_by_id(member_id)
            if member is None:
                raise
        return member
