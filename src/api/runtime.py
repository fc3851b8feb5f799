"""
Auth Runtime

Everything the auth flows share for the lifetime of one application
instance: the credential store, the pending registration slot, the
SessionState and the synchronizer that writes it.
"""

import logging
from datetime import timedelta
from typing import Callable, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.local_credential_store import LocalCredentialStore
from src.adapter.services.local_storage import LocalStorage
from src.adapter.services.otp_sender import LoggingOtpSender
from src.adapter.services.pending_registration_cache import LocalPendingRegistrationCache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.credential_store import CredentialStore
from src.app.services.otp_sender import OtpSender
from src.app.services.pending_registration_cache import PendingRegistrationCache
from src.app.services.session_state import SessionState
from src.app.use_cases.session import SessionSynchronizer

logger = logging.getLogger(__name__)


class AuthRuntime:
    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        credential_store: CredentialStore,
        pending_registrations: PendingRegistrationCache,
    ):
        self.session_factory = session_factory
        self.credential_store = credential_store
        self.pending_registrations = pending_registrations
        self.state = SessionState()
        self.synchronizer = SessionSynchronizer(
            uow_factory=lambda: SqlAlchemyUnitOfWork(self.session_factory),
            credential_store=credential_store,
            pending_registrations=pending_registrations,
            state=self.state,
        )

    async def start(self) -> None:
        result = await self.synchronizer.start()
        if result.is_err():
            logger.error(f"Session bootstrap finished with {result.error.code}")
        else:
            logger.info("Auth runtime started")

    def stop(self) -> None:
        self.synchronizer.stop()
        logger.info("Auth runtime stopped")


def build_runtime(
    config,
    session_factory: Callable[[], AsyncSession],
    otp_sender: Optional[OtpSender] = None,
    storage: Optional[LocalStorage] = None,
) -> AuthRuntime:
    """Wire the local adapters from ApplicationConfig"""
    credential_store = LocalCredentialStore(
        session_factory,
        otp_sender or LoggingOtpSender(),
        require_email_confirmation=config.REQUIRE_EMAIL_CONFIRMATION,
        session_ttl=timedelta(days=config.SESSION_TTL_DAYS),
        access_token_ttl=timedelta(minutes=config.ACCESS_TOKEN_TTL_MINUTES),
        otp_ttl=timedelta(minutes=config.OTP_TTL_MINUTES),
    )
    pending_registrations = LocalPendingRegistrationCache(
        storage or LocalStorage(config.LOCAL_STORAGE_DIR)
    )
    return AuthRuntime(session_factory, credential_store, pending_registrations)
