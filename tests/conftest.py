from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from cardtracker.db.database import get_session
from cardtracker.db.operations import create_card, create_user, upsert_printing
from cardtracker.main import app
from cardtracker.models.db import Base
from tests.support import Catalog


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def catalog(session_factory: async_sessionmaker[AsyncSession]) -> Catalog:
    """One admin, two regular users, and three printings across two games."""
    async with session_factory() as session:
        admin = await create_user(session, "admin", is_admin=True)
        user = await create_user(session, "alice")
        other = await create_user(session, "bob")

        bolt = await create_card(session, "Magic: The Gathering", "Lightning Bolt", "Instant")
        alpha, _ = await upsert_printing(
            session,
            card_id=bolt.id,
            set_name="Limited Edition Alpha",
            number="161",
            rarity="Common",
            style="Standard",
        )
        beta, _ = await upsert_printing(
            session,
            card_id=bolt.id,
            set_name="Limited Edition Beta",
            number="162",
            rarity="Common",
            style="Proxy",
        )
        pikachu_card = await create_card(session, "Pokemon TCG", "Pikachu", "Pokemon")
        pikachu, _ = await upsert_printing(
            session,
            card_id=pikachu_card.id,
            set_name="Mega Evolution",
            number="58",
            rarity="Common",
            style="Standard",
        )
        await session.commit()

        return Catalog(
            admin_id=admin.id,
            user_id=user.id,
            other_user_id=other.id,
            bolt_alpha_id=alpha.id,
            bolt_beta_id=beta.id,
            pikachu_id=pikachu.id,
        )


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async test client with overridden database session."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
