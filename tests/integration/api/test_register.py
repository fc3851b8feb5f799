from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.adapter.services.pending_registration_cache import PENDING_REGISTRATION_KEY
from src.domain.entities import Member, Team


@pytest.mark.asyncio
async def test_manager_registration_with_emailed_code(client: AsyncClient, otp_sender, storage):
    """Manager registers without a password and confirms by code

    Given no account exists for lead@acme.com
    When the manager registers with team name "Platform"
    Then a code is emailed and the registration waits for confirmation
    When the code is verified
    Then the team and member exist, the user is a manager of "Platform"
    And the pending registration is cleared
    """
    response = await client.post("/auth/register", json={
        "role": "manager",
        "email": "Lead@Acme.com",
        "team_name": "Platform",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "confirmation_required"
    assert data["session"]["user"] is None
    assert storage.get_item(PENDING_REGISTRATION_KEY)["kind"] == "manager"

    code = otp_sender.latest["lead@acme.com"]
    response = await client.post("/auth/verify", json={
        "email": "lead@acme.com",
        "code": code,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "signed_in"
    user = data["session"]["user"]
    assert user["email"] == "lead@acme.com"
    assert user["team_name"] == "Platform"
    assert user["role"] == "manager"
    assert data["session"]["is_manager"] is True
    assert data["session"]["is_loading"] is False
    assert storage.get_item(PENDING_REGISTRATION_KEY) is None

    session_response = await client.get("/session")
    assert session_response.json()["user"] == user


@pytest.mark.asyncio
async def test_manager_registration_with_password(client: AsyncClient, session_factory):
    response = await client.post("/auth/register", json={
        "role": "manager",
        "email": "lead@acme.com",
        "team_name": "Platform",
        "password": "SecurePass123!",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "registered"
    assert data["message"] == "Team successfully created!"
    assert data["session"]["user"]["role"] == "manager"

    # Completion ran from both the signed_in event and the inline call
    async with session_factory() as session:
        teams = (await session.exec(select(Team))).all()
        members = (await session.exec(select(Member))).all()
    assert len(teams) == 1
    assert len(members) == 1
    assert str(members[0].team_id) == data["session"]["user"]["team_id"]


@pytest.mark.asyncio
async def test_member_joins_existing_team(client: AsyncClient):
    manager_response = await client.post("/auth/register", json={
        "role": "manager",
        "email": "lead@acme.com",
        "team_name": "Platform",
        "password": "SecurePass123!",
    })
    team_id = manager_response.json()["session"]["user"]["team_id"]

    response = await client.post("/auth/register", json={
        "role": "member",
        "email": "dev@acme.com",
        "team_id": team_id,
        "password": "SecurePass123!",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "registered"
    assert data["message"] == "Successfully joined team!"
    assert data["session"]["user"]["team_id"] == team_id
    assert data["session"]["user"]["team_name"] == "Platform"
    assert data["session"]["user"]["role"] == "member"
    assert data["session"]["is_manager"] is False


@pytest.mark.asyncio
async def test_member_with_unknown_team(client: AsyncClient, otp_sender, storage):
    """No signup happens for a team code that matches nothing"""
    response = await client.post("/auth/register", json={
        "role": "member",
        "email": "dev@acme.com",
        "team_id": str(uuid4()),
    })

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TEAM_NOT_FOUND"
    assert otp_sender.sent == []
    assert storage.get_item(PENDING_REGISTRATION_KEY) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload,code",
    [
        ({"role": "manager", "email": "lead@acme.com", "team_name": "  "}, "TEAM_NAME_REQUIRED"),
        ({"role": "member", "email": "dev@acme.com"}, "TEAM_ID_REQUIRED"),
        (
            {"role": "manager", "email": "lead@acme.com", "team_name": "Platform", "password": "short"},
            "INVALID_PASSWORD",
        ),
    ],
)
async def test_registration_validation(client: AsyncClient, otp_sender, payload, code):
    response = await client.post("/auth/register", json=payload)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == code
    assert otp_sender.sent == []


@pytest.mark.asyncio
async def test_registration_with_malformed_email(client: AsyncClient):
    response = await client.post("/auth/register", json={
        "role": "manager",
        "email": "not-an-email",
        "team_name": "Platform",
    })

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_registration(client: AsyncClient):
    payload = {
        "role": "manager",
        "email": "lead@acme.com",
        "team_name": "Platform",
        "password": "SecurePass123!",
    }
    await client.post("/auth/register", json=payload)

    response = await client.post("/auth/register", json=payload)

    assert response.status_code == 409
    data = response.json()
    assert data["error"]["code"] == "EMAIL_ALREADY_REGISTERED"
    assert data["error"]["message"] == "This email is already registered. Please sign in instead."


@pytest.mark.asyncio
async def test_existing_member_registering_without_password(client: AsyncClient, otp_sender, storage):
    """A member asking to manage a new team by code gets a conflict

    Given lead@acme.com is already the manager of "Platform"
    When they register again as manager of "Other" without a password
    Then the request fails with 409 and no code is sent
    And no pending registration is left behind
    """
    await client.post("/auth/register", json={
        "role": "manager",
        "email": "lead@acme.com",
        "team_name": "Platform",
        "password": "SecurePass123!",
    })
    await client.post("/auth/logout")

    response = await client.post("/auth/register", json={
        "role": "manager",
        "email": "lead@acme.com",
        "team_name": "Other",
    })

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_REGISTERED"
    assert otp_sender.sent == []
    assert storage.get_item(PENDING_REGISTRATION_KEY) is None


@pytest.mark.asyncio
async def test_verify_reports_team_removed_before_confirmation(client: AsyncClient, otp_sender, session_factory):
    manager_response = await client.post("/auth/register", json={
        "role": "manager",
        "email": "lead@acme.com",
        "team_name": "Platform",
        "password": "SecurePass123!",
    })
    team_id = manager_response.json()["session"]["user"]["team_id"]
    await client.post("/auth/register", json={
        "role": "member",
        "email": "dev@acme.com",
        "team_id": team_id,
    })

    async with session_factory() as session:
        for member in (await session.exec(select(Member))).all():
            await session.delete(member)
        for team in (await session.exec(select(Team))).all():
            await session.delete(team)
        await session.commit()

    response = await client.post("/auth/verify", json={
        "email": "dev@acme.com",
        "code": otp_sender.latest["dev@acme.com"],
    })

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "TEAM_NOT_FOUND"


@pytest.mark.asyncio
async def test_session_user_has_display_name(client: AsyncClient):
    response = await client.post("/auth/register", json={
        "role": "manager",
        "email": "lead@acme.com",
        "team_name": "Platform",
        "password": "SecurePass123!",
    })

    assert response.json()["session"]["user"]["name"] == "lead"
