"""
Local Credential Store

Self-hosted credential store backed by the service database: password and
one-time-code sign-in, persisted sessions, and an in-process event stream.
"""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Callable, List, Optional

import bcrypt
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.utils.jwt import generate_access_token, verify_access_token
from src.app.services.credential_store import (
    AuthEventListener,
    CredentialStore,
    Subscription,
)
from src.app.services.otp_sender import OtpSender
from src.domain.base import normalize_email, utcnow
from src.domain.entities import (
    AuthEvent,
    AuthEventKind,
    AuthSession,
    AuthSessionRecord,
    CredentialAccount,
    Identity,
    OneTimeCode,
    SignUpOutcome,
)
from src.domain.result import Error, Result, Return

logger = logging.getLogger(__name__)

_DUMMY_HASH = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(12))


def _hash_code(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()


def _fault() -> Error:
    return Error(
        "CREDENTIAL_STORE_FAULT", "Authentication is unavailable right now, please retry"
    )


def _invalid_credentials() -> Error:
    return Error("INVALID_CREDENTIALS", "Invalid email or password")


class _ListenerSubscription(Subscription):
    def __init__(self, listeners: List[AuthEventListener], listener: AuthEventListener):
        self._listeners = listeners
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


class LocalCredentialStore(CredentialStore):
    """
    Credential store implementation using SQLModel.

    Business Rules:
    - Passwords are bcrypt hashes (cost factor 12)
    - One-time codes are 6 digits, SHA-256 hashed, single-use, and a new
      code invalidates older unused ones
    - Sessions hold a bcrypt-hashed refresh token and an HS256 access token;
      an expired access token is rotated on get_session (token_refreshed)
    - With require_email_confirmation, sign_up returns no session and sends
      a code instead
    - Events are dispatched after the database commit, one listener at a
      time; a failing listener does not affect the caller
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        otp_sender: OtpSender,
        require_email_confirmation: bool = False,
        session_ttl: timedelta = timedelta(days=30),
        access_token_ttl: timedelta = timedelta(minutes=15),
        otp_ttl: timedelta = timedelta(minutes=10),
    ):
        self.session_factory = session_factory
        self.otp_sender = otp_sender
        self.require_email_confirmation = require_email_confirmation
        self.session_ttl = session_ttl
        self.access_token_ttl = access_token_ttl
        self.otp_ttl = otp_ttl
        self._listeners: List[AuthEventListener] = []

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------

    def subscribe(self, listener: AuthEventListener) -> Subscription:
        self._listeners.append(listener)
        return _ListenerSubscription(self._listeners, listener)

    async def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                logger.exception(f"Auth event listener failed on {event.kind.value}")

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def get_session(self) -> Result[Optional[AuthSession]]:
        refreshed = False
        try:
            async with self.session_factory() as session:
                stmt = (
                    select(AuthSessionRecord)
                    .where(
                        AuthSessionRecord.revoked == False,  # noqa: E712
                        AuthSessionRecord.expires_at > utcnow(),
                    )
                    .order_by(AuthSessionRecord.created_at.desc())
                )
                record = (await session.exec(stmt)).first()
                if record is None:
                    return Return.ok(None)

                account = await session.get(CredentialAccount, record.account_id)
                if account is None:
                    return Return.ok(None)

                identity = Identity(id=account.id, email=account.email)
                if verify_access_token(record.access_token) is None:
                    record.access_token = generate_access_token(
                        identity, self.access_token_ttl
                    )
                    session.add(record)
                    await session.commit()
                    refreshed = True

                auth_session = AuthSession(
                    access_token=record.access_token,
                    expires_at=record.expires_at,
                    identity=identity,
                )
        except SQLAlchemyError as exc:
            logger.error(f"Loading persisted session failed: {exc}")
            return Return.err(_fault())

        if refreshed:
            await self._emit(
                AuthEvent(kind=AuthEventKind.token_refreshed, session=auth_session)
            )
        return Return.ok(auth_session)

    async def _open_session(
        self, session: AsyncSession, account: CredentialAccount
    ) -> AuthSession:
        identity = Identity(id=account.id, email=account.email)
        refresh_token = secrets.token_urlsafe(32)
        refresh_token_hash = bcrypt.hashpw(refresh_token.encode(), bcrypt.gensalt(12))

        record = AuthSessionRecord(
            account_id=account.id,
            access_token=generate_access_token(identity, self.access_token_ttl),
            refresh_token_hash=refresh_token_hash.decode(),
            expires_at=utcnow() + self.session_ttl,
        )
        session.add(record)

        account.last_sign_in_at = utcnow()
        session.add(account)

        return AuthSession(
            access_token=record.access_token,
            refresh_token=refresh_token,
            expires_at=record.expires_at,
            identity=identity,
        )

    async def _get_account(
        self, session: AsyncSession, email: str
    ) -> Optional[CredentialAccount]:
        stmt = select(CredentialAccount).where(CredentialAccount.email == email)
        return (await session.exec(stmt)).one_or_none()

    async def _issue_code(self, session: AsyncSession, account: CredentialAccount) -> str:
        # Older unused codes stop working once a new one is issued
        await session.execute(
            update(OneTimeCode)
            .where(
                OneTimeCode.account_id == account.id,
                OneTimeCode.used == False,  # noqa: E712
            )
            .values(used=True)
        )
        code = f"{secrets.randbelow(10**6):06d}"
        session.add(
            OneTimeCode(
                account_id=account.id,
                code_hash=_hash_code(code),
                expires_at=utcnow() + self.otp_ttl,
            )
        )
        return code

    # ------------------------------------------------------------------
    # Sign-in / sign-up
    # ------------------------------------------------------------------

    async def sign_in_with_otp(
        self, email: str, create_account: bool = False
    ) -> Result[None]:
        email = normalize_email(email)
        try:
            async with self.session_factory() as session:
                account = await self._get_account(session, email)
                if account is None:
                    if not create_account:
                        return Return.err(
                            Error("ACCOUNT_NOT_FOUND", "No account found for this email")
                        )
                    account = CredentialAccount(email=email)
                    session.add(account)
                    await session.flush()

                code = await self._issue_code(session, account)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Issuing sign-in code failed: {exc}")
            return Return.err(_fault())

        await self.otp_sender.send(email, code)
        return Return.ok(None)

    async def verify_otp(self, email: str, code: str) -> Result[AuthSession]:
        email = normalize_email(email)
        try:
            async with self.session_factory() as session:
                account = await self._get_account(session, email)
                if account is None:
                    return Return.err(Error("INVALID_CODE", "Invalid or expired code"))

                stmt = select(OneTimeCode).where(
                    OneTimeCode.account_id == account.id,
                    OneTimeCode.code_hash == _hash_code(code.strip()),
                    OneTimeCode.used == False,  # noqa: E712
                )
                otp = (await session.exec(stmt)).first()
                if otp is None:
                    return Return.err(Error("INVALID_CODE", "Invalid or expired code"))

                if otp.expires_at < utcnow():
                    return Return.err(
                        Error("INVALID_CODE", "This code has expired, request a new one")
                    )

                otp.used = True
                session.add(otp)
                account.email_confirmed = True
                auth_session = await self._open_session(session, account)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Verifying sign-in code failed: {exc}")
            return Return.err(_fault())

        await self._emit(AuthEvent(kind=AuthEventKind.signed_in, session=auth_session))
        return Return.ok(auth_session)

    async def sign_in_with_password(
        self, email: str, password: str
    ) -> Result[AuthSession]:
        email = normalize_email(email)
        try:
            async with self.session_factory() as session:
                account = await self._get_account(session, email)

                # Always perform a hash check so unknown emails take as long
                if account is None or account.password_hash is None:
                    bcrypt.checkpw(password.encode(), _DUMMY_HASH)
                    return Return.err(_invalid_credentials())

                if not bcrypt.checkpw(password.encode(), account.password_hash.encode()):
                    return Return.err(_invalid_credentials())

                if self.require_email_confirmation and not account.email_confirmed:
                    return Return.err(
                        Error("EMAIL_NOT_CONFIRMED", "Confirm your email before signing in")
                    )

                auth_session = await self._open_session(session, account)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Password sign-in failed: {exc}")
            return Return.err(_fault())

        await self._emit(AuthEvent(kind=AuthEventKind.signed_in, session=auth_session))
        return Return.ok(auth_session)

    async def sign_up(self, email: str, password: str) -> Result[SignUpOutcome]:
        email = normalize_email(email)
        code = None
        auth_session = None
        try:
            async with self.session_factory() as session:
                if await self._get_account(session, email) is not None:
                    return Return.err(
                        Error("EMAIL_ALREADY_REGISTERED", "Email already registered")
                    )

                password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(12))
                account = CredentialAccount(
                    email=email,
                    password_hash=password_hash.decode("utf-8"),
                    email_confirmed=not self.require_email_confirmation,
                )
                session.add(account)
                await session.flush()
                identity = Identity(id=account.id, email=account.email)

                if self.require_email_confirmation:
                    code = await self._issue_code(session, account)
                else:
                    auth_session = await self._open_session(session, account)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Sign-up failed: {exc}")
            return Return.err(_fault())

        if code is not None:
            await self.otp_sender.send(email, code)
            return Return.ok(SignUpOutcome(identity=identity))

        await self._emit(AuthEvent(kind=AuthEventKind.signed_in, session=auth_session))
        return Return.ok(SignUpOutcome(identity=identity, session=auth_session))

    async def sign_out(self) -> Result[None]:
        try:
            async with self.session_factory() as session:
                await session.execute(
                    update(AuthSessionRecord)
                    .where(AuthSessionRecord.revoked == False)  # noqa: E712
                    .values(revoked=True, revoked_at=utcnow())
                )
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Sign-out failed: {exc}")
            return Return.err(_fault())

        await self._emit(AuthEvent(kind=AuthEventKind.signed_out))
        return Return.ok(None)
