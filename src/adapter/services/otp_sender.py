import logging

from src.app.services.otp_sender import OtpSender

logger = logging.getLogger(__name__)


class LoggingOtpSender(OtpSender):
    """
    Writes sign-in codes to the service log.

    NOTE: In production this would hand the code to the mail provider.
    """

    async def send(self, email: str, code: str) -> None:
        logger.info(f"Sign-in code for {email}: {code}")
