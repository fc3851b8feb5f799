from datetime import datetime

import pytest

from src.app.services.unit_of_work import DirectoryError
from src.app.use_cases.auth import LoginCommand, LoginUseCase
from src.domain.entities import AuthSession, ManagerRegistration
from src.domain.result import Error, Return


@pytest.fixture
def use_case(mock_uow, mock_credential_store, mock_pending_registrations, session_state):
    return LoginUseCase(
        uow=mock_uow,
        credential_store=mock_credential_store,
        pending_registrations=mock_pending_registrations,
        state=session_state,
    )


@pytest.mark.asyncio
async def test_login_unknown_email(use_case, mock_uow, mock_credential_store, session_state):
    """Email absent from the directory fails before the credential store is contacted"""
    result = await use_case.execute(LoginCommand(email="ghost@x.com", password="password123"))

    assert result.is_err()
    assert result.error.code == "USER_NOT_FOUND"
    assert "No account found" in result.error.message
    assert session_state.user is None
    mock_credential_store.sign_in_with_password.assert_not_called()
    mock_credential_store.sign_in_with_otp.assert_not_called()


@pytest.mark.asyncio
async def test_login_blank_email(use_case, mock_uow):
    result = await use_case.execute(LoginCommand(email="   "))

    assert result.is_err()
    assert result.error.code == "EMAIL_REQUIRED"
    mock_uow.members.get_by_email.assert_not_called()


@pytest.mark.asyncio
async def test_login_normalizes_email(use_case, mock_uow, mock_credential_store, member):
    mock_uow.members.get_by_email.return_value = member
    mock_credential_store.sign_in_with_otp.return_value = Return.ok(None)

    await use_case.execute(LoginCommand(email="  Dev@X.COM "))

    mock_uow.members.get_by_email.assert_called_once_with("dev@x.com")
    mock_credential_store.sign_in_with_otp.assert_called_once_with("dev@x.com")


@pytest.mark.asyncio
async def test_login_with_password(use_case, mock_uow, mock_credential_store, member, member_identity):
    mock_uow.members.get_by_email.return_value = member
    mock_credential_store.sign_in_with_password.return_value = Return.ok(
        AuthSession(
            access_token="token", expires_at=datetime(2030, 1, 1), identity=member_identity
        )
    )

    result = await use_case.execute(LoginCommand(email="dev@x.com", password="password123"))

    assert result.is_ok()
    assert result.value.status == "signed_in"
    mock_credential_store.sign_in_with_password.assert_called_once_with(
        "dev@x.com", "password123"
    )


@pytest.mark.asyncio
async def test_login_wrong_password_leaves_state(use_case, mock_uow, mock_credential_store, member, session_state):
    mock_uow.members.get_by_email.return_value = member
    mock_credential_store.sign_in_with_password.return_value = Return.err(
        Error("INVALID_CREDENTIALS", "Invalid email or password")
    )

    result = await use_case.execute(LoginCommand(email="dev@x.com", password="nope-nope"))

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"
    assert session_state.user is None
    assert session_state.is_loading is True


@pytest.mark.asyncio
async def test_login_without_password_sends_code(use_case, mock_uow, mock_credential_store, member):
    mock_uow.members.get_by_email.return_value = member
    mock_credential_store.sign_in_with_otp.return_value = Return.ok(None)

    result = await use_case.execute(LoginCommand(email="dev@x.com"))

    assert result.is_ok()
    assert result.value.status == "confirmation_sent"
    mock_credential_store.sign_in_with_password.assert_not_called()


@pytest.mark.asyncio
async def test_login_directory_fault(use_case, mock_uow, mock_credential_store):
    mock_uow.members.get_by_email.side_effect = DirectoryError("connection refused")

    result = await use_case.execute(LoginCommand(email="dev@x.com"))

    assert result.is_err()
    assert result.error.code == "DIRECTORY_FAULT"
    mock_credential_store.sign_in_with_otp.assert_not_called()


def _session_for(identity):
    return AuthSession(
        access_token="token", expires_at=datetime(2030, 1, 1), identity=identity
    )


@pytest.mark.asyncio
async def test_login_completes_pending_registration(use_case, mock_credential_store, mock_pending_registrations, manager_identity):
    """Signed up earlier but the member was never created: signing in resumes it"""
    mock_pending_registrations.get.return_value = ManagerRegistration(
        email="M@x.com", team_name="Eng"
    )
    mock_credential_store.sign_in_with_password.return_value = Return.ok(
        _session_for(manager_identity)
    )

    result = await use_case.execute(LoginCommand(email="m@x.com", password="password123"))

    assert result.is_ok()
    assert result.value.status == "signed_in"
    mock_credential_store.sign_in_with_password.assert_called_once_with(
        "m@x.com", "password123"
    )


@pytest.mark.asyncio
async def test_login_code_for_pending_registration(use_case, mock_credential_store, mock_pending_registrations):
    mock_pending_registrations.get.return_value = ManagerRegistration(
        email="m@x.com", team_name="Eng"
    )
    mock_credential_store.sign_in_with_otp.return_value = Return.ok(None)

    result = await use_case.execute(LoginCommand(email="m@x.com"))

    assert result.is_ok()
    assert result.value.status == "confirmation_sent"


@pytest.mark.asyncio
async def test_login_pending_registration_for_other_email(use_case, mock_credential_store, mock_pending_registrations):
    mock_pending_registrations.get.return_value = ManagerRegistration(
        email="someone@x.com", team_name="Eng"
    )

    result = await use_case.execute(LoginCommand(email="m@x.com", password="password123"))

    assert result.is_err()
    assert result.error.code == "USER_NOT_FOUND"
    mock_credential_store.sign_in_with_password.assert_not_called()


@pytest.mark.asyncio
async def test_login_reports_failed_registration(use_case, mock_credential_store, mock_pending_registrations, session_state, manager_identity):
    """Credentials were fine but the synchronizer could not create the member"""
    mock_pending_registrations.get.return_value = ManagerRegistration(
        email="m@x.com", team_name="Eng"
    )

    async def sign_in(email, password):
        session_state.fail(
            Error("REGISTRATION_FAILED", "Could not finish setting up your account")
        )
        return Return.ok(_session_for(manager_identity))

    mock_credential_store.sign_in_with_password.side_effect = sign_in

    result = await use_case.execute(LoginCommand(email="m@x.com", password="password123"))

    assert result.is_err()
    assert result.error.code == "REGISTRATION_FAILED"
    assert session_state.user is None
