from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.runtime import AuthRuntime

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def init_db():
    """Create missing tables"""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_runtime(request: Request) -> AuthRuntime:
    """The AuthRuntime owned by the running application"""
    return request.app.state.runtime


def get_unit_of_work(runtime: AuthRuntime = Depends(get_runtime)):
    return SqlAlchemyUnitOfWork(runtime.session_factory)
