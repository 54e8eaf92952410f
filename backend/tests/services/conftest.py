"""Service test fixtures — file-backed SQLite with independent sessions.

Invariants:
    - Every test gets a fresh database file under tmp_path
    - Sessions from `session_factory` use separate connections, so two of them
      can hold diverging views of the same row
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from app.db.base import Base
import app.models  # noqa: F401


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'packstation.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session
