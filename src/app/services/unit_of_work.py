from abc import ABC, abstractmethod

from src.app.repositories.member_repository import IMemberRepository
from src.app.repositories.team_repository import ITeamRepository


class DirectoryError(Exception):
    """A directory lookup or insert failed in the backing store"""


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines directory access and transaction management"""

    # Repository properties (initialized in __aenter__)
    teams: ITeamRepository
    members: IMemberRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
