from typing import Literal, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import ClientError, ServerError
from src.api.runtime import AuthRuntime
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AuthFlowResponse,
    LoginCommand,
    LoginUseCase,
    LogoutUseCase,
    ManagerRegisterCommand,
    MemberRegisterCommand,
    RegisterUseCase,
    VerifyOtpUseCase,
)
from src.depends import get_runtime, get_unit_of_work

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Backend faults that are worth retrying; messages are safe to show
UNAVAILABLE_CODES = ("DIRECTORY_FAULT", "CREDENTIAL_STORE_FAULT", "REGISTRATION_FAILED")


class RegisterRequest(BaseModel):
    """
    Registration HTTP request payload

    role selects which of team_name (manager) or team_id (member) is used.
    Field presence per role is checked by the use case.
    """

    role: Literal["manager", "member"] = Field(..., description="Registering as")
    email: EmailStr = Field(..., description="User email address")
    team_name: Optional[str] = Field(None, max_length=255, description="New team name")
    team_id: Optional[str] = Field(None, description="Team verification code")
    password: Optional[str] = Field(
        None, description="Password; omit to confirm by emailed code"
    )


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=AuthFlowResponse
)
async def register(
    request: RegisterRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    runtime: AuthRuntime = Depends(get_runtime),
):
    """
    Register a manager (new team) or a member (existing team).

    Command/Response Flow:
    1. RegisterRequest validates HTTP input
    2. Map to ManagerRegisterCommand or MemberRegisterCommand
    3. Execute RegisterUseCase
    4. Return the resulting session snapshot

    Raises:
        - 400 Bad Request: Missing team name / team id, short password
        - 404 Not Found: Team id does not match a team
        - 409 Conflict: Email already registered
        - 503 Service Unavailable: Directory or credential store fault
    """
    if request.role == "manager":
        command = ManagerRegisterCommand(
            email=request.email,
            team_name=request.team_name or "",
            password=request.password,
        )
    else:
        command = MemberRegisterCommand(
            email=request.email,
            team_id=request.team_id or "",
            password=request.password,
        )

    use_case = RegisterUseCase(
        uow,
        runtime.credential_store,
        runtime.pending_registrations,
        runtime.synchronizer,
        runtime.state,
    )
    result = await use_case.execute(command)

    # Handle errors
    if result.is_err():
        error = result.error
        if error.code in (
            "EMAIL_REQUIRED",
            "INVALID_PASSWORD",
            "TEAM_NAME_REQUIRED",
            "TEAM_ID_REQUIRED",
        ):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "TEAM_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "EMAIL_ALREADY_REGISTERED":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code in UNAVAILABLE_CODES:
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: Optional[str] = Field(
        None, description="Password; omit to receive a sign-in code"
    )


@router.post("/login", status_code=status.HTTP_200_OK, response_model=AuthFlowResponse)
async def login(
    request: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    runtime: AuthRuntime = Depends(get_runtime),
):
    """
    User Login

    Signs a known member in with a password, or emails a one-time code.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Email not confirmed yet
        - 404 Not Found: No member with this email, or the team being
          joined no longer exists
        - 503 Service Unavailable: Directory or credential store fault
    """
    use_case = LoginUseCase(
        uow, runtime.credential_store, runtime.pending_registrations, runtime.state
    )
    result = await use_case.execute(
        LoginCommand(email=request.email, password=request.password)
    )

    # Handle errors
    if result.is_err():
        error = result.error
        if error.code == "EMAIL_REQUIRED":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "EMAIL_NOT_CONFIRMED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code in ("USER_NOT_FOUND", "ACCOUNT_NOT_FOUND", "TEAM_NOT_FOUND"):
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code in UNAVAILABLE_CODES:
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


class VerifyRequest(BaseModel):
    """
    Verify code HTTP request payload
    """

    email: EmailStr = Field(..., description="User email address")
    code: str = Field(..., min_length=1, max_length=12, description="Emailed code")


@router.post("/verify", status_code=status.HTTP_200_OK, response_model=AuthFlowResponse)
async def verify(request: VerifyRequest, runtime: AuthRuntime = Depends(get_runtime)):
    """
    Confirm an emailed sign-in code.

    Opens the session and finishes any registration waiting on this email.

    Raises:
        - 400 Bad Request: Missing code
        - 401 Unauthorized: Invalid, used or expired code
        - 404 Not Found: The team being joined no longer exists
        - 503 Service Unavailable: Credential store or directory fault, or
          the pending registration could not be completed
    """
    use_case = VerifyOtpUseCase(runtime.credential_store, runtime.state)
    result = await use_case.execute(request.email, request.code)

    # Handle errors
    if result.is_err():
        error = result.error
        if error.code == "CODE_REQUIRED":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "INVALID_CODE":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "TEAM_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code in UNAVAILABLE_CODES:
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=AuthFlowResponse)
async def logout(runtime: AuthRuntime = Depends(get_runtime)):
    """
    Sign out. The local session is cleared even if the credential store
    could not be reached.
    """
    use_case = LogoutUseCase(runtime.credential_store, runtime.state)
    result = await use_case.execute()
    return result.value
