"""
Authentication Use Cases

All authentication-related business logic.
"""

from .login_use_case import LoginUseCase
from .register_use_case import RegisterUseCase
from .verify_otp_use_case import VerifyOtpUseCase
from .logout_use_case import LogoutUseCase
from .dtos import (
    AuthFlowResponse,
    LoginCommand,
    ManagerRegisterCommand,
    MemberRegisterCommand,
    RegisterCommand,
)

__all__ = [
    # Use Cases
    "LoginUseCase",
    "RegisterUseCase",
    "VerifyOtpUseCase",
    "LogoutUseCase",
    # DTOs - Commands
    "LoginCommand",
    "ManagerRegisterCommand",
    "MemberRegisterCommand",
    "RegisterCommand",
    # DTOs - Responses
    "AuthFlowResponse",
]
