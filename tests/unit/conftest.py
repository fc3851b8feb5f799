from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.app.services.credential_store import CredentialStore
from src.app.services.pending_registration_cache import PendingRegistrationCache
from src.app.services.session_state import SessionState
from src.domain.entities import Identity, Member, Team

MANAGER_ID = UUID("00000000-0000-0000-0000-0000000000a1")
MEMBER_ID = UUID("00000000-0000-0000-0000-0000000000b2")
TEAM_ID = UUID("00000000-0000-0000-0000-0000000000c3")


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    # Mock repositories
    uow.teams = MagicMock()
    uow.teams.get_by_id = AsyncMock(return_value=None)
    uow.teams.get_by_manager_email = AsyncMock(return_value=None)
    uow.teams.create = AsyncMock()

    uow.members = MagicMock()
    uow.members.get_by_email = AsyncMock(return_value=None)
    uow.members.get_by_id = AsyncMock(return_value=None)
    uow.members.create = AsyncMock()

    return uow


@pytest.fixture
def mock_credential_store():
    store = MagicMock(spec=CredentialStore)
    store.get_session = AsyncMock()
    store.sign_in_with_otp = AsyncMock()
    store.verify_otp = AsyncMock()
    store.sign_in_with_password = AsyncMock()
    store.sign_up = AsyncMock()
    store.sign_out = AsyncMock()
    return store


@pytest.fixture
def mock_pending_registrations():
    cache = MagicMock(spec=PendingRegistrationCache)
    cache.get.return_value = None
    return cache


@pytest.fixture
def session_state():
    return SessionState()


@pytest.fixture
def team():
    return Team(id=TEAM_ID, name="Eng", manager_email="m@x.com")


@pytest.fixture
def manager(team):
    return Member(id=MANAGER_ID, email="m@x.com", team_id=team.id)


@pytest.fixture
def member(team):
    return Member(id=MEMBER_ID, email="dev@x.com", team_id=team.id)


@pytest.fixture
def manager_identity():
    return Identity(id=MANAGER_ID, email="m@x.com")


@pytest.fixture
def member_identity():
    return Identity(id=MEMBER_ID, email="dev@x.com")
