from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.errors import directory_errors
from src.app.repositories.team_repository import ITeamRepository
from src.domain.entities import Team


class TeamRepository(ITeamRepository):
    """Team repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, team_id: UUID) -> Optional[Team]:
        """Get team by ID"""
        stmt = select(Team).where(Team.id == team_id)
        with directory_errors("team lookup"):
            result = await self.session.exec(stmt)
            return result.one_or_none()

    async def get_by_manager_email(self, email: str) -> Optional[Team]:
        """Get the team managed by this email (case-insensitive)"""
        stmt = select(Team).where(func.lower(Team.manager_email) == email.lower())
        with directory_errors("team lookup by manager"):
            result = await self.session.exec(stmt)
            return result.first()

    async def create(self, team: Team) -> Team:
        """Create a new team"""
        with directory_errors("team insert"):
            self.session.add(team)
            await self.session.flush()
            await self.session.refresh(team)
        return team
