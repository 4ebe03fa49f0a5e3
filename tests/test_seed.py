"""Tests for database seeding."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.db.seed import SEED_CARDS, SEED_USERS, seed_database
from cardtracker.models.db import CardDB, CardPrintingDB, UserDB


class TestSeedDatabase:
    async def test_seeds_empty_database(self, session: AsyncSession) -> None:
        """Users, cards and printings are inserted on first run."""
        inserted = await seed_database(session)
        await session.commit()

        assert inserted is True
        users = await session.scalar(select(func.count()).select_from(UserDB))
        cards = await session.scalar(select(func.count()).select_from(CardDB))
        printings = await session.scalar(select(func.count()).select_from(CardPrintingDB))
        assert users == len(SEED_USERS)
        assert cards == len(SEED_CARDS)
        assert printings == sum(len(p) for *_, p in SEED_CARDS)

    async def test_seeds_an_administrator(self, session: AsyncSession) -> None:
        await seed_database(session)
        await session.commit()

        admins = await session.scalar(
            select(func.count()).select_from(UserDB).where(UserDB.is_admin.is_(True))
        )
        assert admins >= 1

    async def test_second_run_is_noop(self, session: AsyncSession) -> None:
        """Running twice does not duplicate data."""
        await seed_database(session)
        await session.commit()

        inserted = await seed_database(session)

        assert inserted is False
        cards = await session.scalar(select(func.count()).select_from(CardDB))
        assert cards == len(SEED_CARDS)
