import logging
from typing import Optional

from pydantic import ValidationError

from src.adapter.services.local_storage import LocalStorage
from src.app.services.pending_registration_cache import PendingRegistrationCache
from src.domain.entities import PendingRegistration, pending_registration_adapter

logger = logging.getLogger(__name__)

PENDING_REGISTRATION_KEY = "opspilot_pending_registration"


class LocalPendingRegistrationCache(PendingRegistrationCache):
    """Pending registration kept in a LocalStorage slot under a fixed key"""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def set(self, intent: PendingRegistration) -> None:
        self.storage.set_item(
            PENDING_REGISTRATION_KEY,
            pending_registration_adapter.dump_python(intent, mode="json"),
        )

    def get(self) -> Optional[PendingRegistration]:
        try:
            data = self.storage.get_item(PENDING_REGISTRATION_KEY)
            if data is None:
                return None
            return pending_registration_adapter.validate_python(data)
        except (ValueError, ValidationError) as exc:
            # Unreadable slot: drop it rather than fail every sign-in
            logger.warning(f"Discarding unreadable pending registration: {exc}")
            self.storage.remove_item(PENDING_REGISTRATION_KEY)
            return None

    def clear(self) -> None:
        self.storage.remove_item(PENDING_REGISTRATION_KEY)
