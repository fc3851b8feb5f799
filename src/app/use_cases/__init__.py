"""
Use Cases

Organized into domain folders:
- session/: Session synchronization and registration completion
- auth/: Login, registration, code verification and logout
"""

from .session import SessionSynchronizer
from .auth import (
    LoginUseCase,
    LogoutUseCase,
    RegisterUseCase,
    VerifyOtpUseCase,
)

__all__ = [
    # Session
    "SessionSynchronizer",
    # Auth
    "LoginUseCase",
    "LogoutUseCase",
    "RegisterUseCase",
    "VerifyOtpUseCase",
]
