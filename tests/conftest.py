from __future__ import annotations

import os

os.environ.setdefault("TASKTRACKER_ENVIRONMENT", "test")
os.environ.setdefault("TASKTRACKER_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from dataclasses import dataclass
from itertools import count
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from tasktracker.core.config import Settings, get_settings
from tasktracker.db.session import init_db
from tasktracker.deps import get_db_session
from tasktracker.main import create_app


@dataclass(slots=True)
class RegisteredUser:
    id: int
    name: str
    email: str
    password: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def settings() -> Iterator[Settings]:
    get_settings.cache_clear()
    try:
        yield get_settings()
    finally:
        get_settings.cache_clear()


@pytest_asyncio.fixture
async def app(session: AsyncSession, settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(settings)

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        yield session

    application.dependency_overrides[get_db_session] = _override_db_session
    application.dependency_overrides[get_settings] = lambda: settings
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def register_user(client: AsyncClient) -> Callable[..., Awaitable[RegisteredUser]]:
    counter = count()

    async def _factory(
        *,
        name: str = "Test User",
        email: str | None = None,
        password: str = "secret123",
    ) -> RegisteredUser:
        actual_email = email or f"user-{next(counter)}@example.com"
        response = await client.post(
            "/users/register",
            json={"name": name, "email": actual_email, "password": password},
        )
        assert response.status_code == 201, response.text
        body: dict[str, Any] = response.json()
        return RegisteredUser(
            id=body["user"]["id"],
            name=body["user"]["name"],
            email=body["user"]["email"],
            password=password,
            token=body["token"],
        )

    return _factory


@pytest_asyncio.fixture
async def create_task(client: AsyncClient) -> Callable[..., Awaitable[dict[str, Any]]]:
    async def _factory(user: RegisteredUser, **fields: Any) -> dict[str, Any]:
        payload = {"title": "Task"}
        payload.update(fields)
        response = await client.post("/tasks", json=payload, headers=user.headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _factory
