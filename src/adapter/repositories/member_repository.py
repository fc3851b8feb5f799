from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.errors import directory_errors
from src.app.repositories.member_repository import IMemberRepository
from src.domain.entities import Member


class MemberRepository(IMemberRepository):
    """Member repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[Member]:
        """Get member by email address (case-insensitive)"""
        stmt = select(Member).where(func.lower(Member.email) == email.lower())
        with directory_errors("member lookup"):
            result = await self.session.exec(stmt)
            return result.first()

    async def get_by_id(self, member_id: UUID) -> Optional[Member]:
        """Get member by ID"""
        stmt = select(Member).where(Member.id == member_id)
        with directory_errors("member lookup by id"):
            result = await self.session.exec(stmt)
            return result.one_or_none()

    async def create(self, member: Member) -> Member:
        """Create a new member"""
        member.email = member.email.lower()
        with directory_errors("member insert"):
            self.session.add(member)
            await self.session.flush()
            await self.session.refresh(member)
        return member
