from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from src.domain.entities import AuthEvent, AuthSession, SignUpOutcome
from src.domain.result import Result

AuthEventListener = Callable[[AuthEvent], Awaitable[None]]


class Subscription(ABC):
    """Handle returned by CredentialStore.subscribe"""

    @abstractmethod
    def unsubscribe(self) -> None:
        pass


class CredentialStore(ABC):
    """
    Credential store interface - application layer

    Manages sign-in, sign-up and session tokens, and pushes auth-state
    changes to subscribers. Events are delivered serially: a listener is
    awaited before the next event is dispatched.

    Error codes returned by implementations:
        - EMAIL_ALREADY_REGISTERED: sign_up for an existing email
        - INVALID_CREDENTIALS: wrong email/password pair
        - ACCOUNT_NOT_FOUND: code requested for an unknown email
        - INVALID_CODE: one-time code unknown, used or expired
        - CREDENTIAL_STORE_FAULT: backend failure
    """

    @abstractmethod
    async def get_session(self) -> Result[Optional[AuthSession]]:
        """Return the persisted active session, if any"""
        pass

    @abstractmethod
    async def sign_in_with_otp(
        self, email: str, create_account: bool = False
    ) -> Result[None]:
        """Send a one-time sign-in code to email"""
        pass

    @abstractmethod
    async def verify_otp(self, email: str, code: str) -> Result[AuthSession]:
        """Confirm a one-time code and open a session"""
        pass

    @abstractmethod
    async def sign_in_with_password(
        self, email: str, password: str
    ) -> Result[AuthSession]:
        """Open a session with email and password"""
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Result[SignUpOutcome]:
        """Create an identity; no session means confirmation is required"""
        pass

    @abstractmethod
    async def sign_out(self) -> Result[None]:
        """Revoke the active session"""
        pass

    @abstractmethod
    def subscribe(self, listener: AuthEventListener) -> Subscription:
        """Register a listener for auth-state events"""
        pass
