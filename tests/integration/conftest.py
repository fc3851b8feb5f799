from typing import Dict, List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.local_storage import LocalStorage
from src.api.app import create_app
from src.api.runtime import build_runtime
from src.app.services.otp_sender import OtpSender


class CapturingOtpSender(OtpSender):
    """Keeps every code it is asked to send so tests can verify them"""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    async def send(self, email: str, code: str) -> None:
        self.sent.append((email, code))

    @property
    def latest(self) -> Dict[str, str]:
        return {email: code for email, code in self.sent}


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def otp_sender():
    return CapturingOtpSender()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "storage"))


@pytest_asyncio.fixture
async def runtime(session_factory, otp_sender, storage):
    # ASGITransport does not run the app lifespan, so start the runtime here
    runtime = build_runtime(ApplicationConfig, session_factory, otp_sender, storage)
    await runtime.start()
    yield runtime
    runtime.stop()


@pytest_asyncio.fixture
async def client(runtime):
    app = create_app(ApplicationConfig, runtime=runtime)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
