from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import PendingRegistration


class PendingRegistrationCache(ABC):
    """
    Single durable slot holding at most one unconfirmed registration.

    Last write wins; there is no protection against concurrent writers.
    """

    @abstractmethod
    def set(self, intent: PendingRegistration) -> None:
        """Store intent, overwriting any existing one"""
        pass

    @abstractmethod
    def get(self) -> Optional[PendingRegistration]:
        """Return the stored intent without removing it"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored intent; no-op when empty"""
        pass
