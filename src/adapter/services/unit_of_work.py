from typing import Callable, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.errors import directory_errors
from src.adapter.repositories.member_repository import MemberRepository
from src.adapter.repositories.team_repository import TeamRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self):
        self.session = self.session_factory()
        # Initialize all repositories with the session
        self.teams = TeamRepository(self.session)
        self.members = MemberRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()
        await self.session.close()

    async def commit(self):
        with directory_errors("commit"):
            await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
