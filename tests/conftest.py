# tests/conftest.py
from __future__ import annotations

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.pool import NullPool

from core.config import Settings
from core.session import SESSION_COOKIE_NAME, sign_session
from db.database import Database
from main import create_app

TEST_PASSWORD = "correct horse battery staple"
TEST_COOKIE_SECRET = "test-cookie-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings()
    s.database_url = f"sqlite+aiosqlite:///{tmp_path / 'prepperstore.db'}"
    s.database_echo = False
    s.database_ssl = False
    s.app_password = TEST_PASSWORD
    s.cookie_secret = TEST_COOKIE_SECRET
    s.session_cookie_secure = False
    s.allowed_origins = ["http://localhost:5173"]
    s.run_migrations = False
    return s


# One SQLite file per test; NullPool so no connection outlives its event loop
@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    db = Database(settings.database_url, poolclass=NullPool)
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
def app(settings: Settings, database: Database) -> FastAPI:
    return create_app(settings, database)


@pytest_asyncio.fixture
async def anon_client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest_asyncio.fixture
async def client(app: FastAPI, settings: Settings) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Client already holding a valid session cookie"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://testserver",
        cookies={SESSION_COOKIE_NAME: sign_session(settings.cookie_secret)},
    ) as c:
        yield c
