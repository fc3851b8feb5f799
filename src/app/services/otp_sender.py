from abc import ABC, abstractmethod


class OtpSender(ABC):
    """Delivers one-time sign-in codes to their owner"""

    @abstractmethod
    async def send(self, email: str, code: str) -> None:
        pass
