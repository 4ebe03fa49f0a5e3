"""Tests for daily value timelines."""

from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.db.operations import add_value_point, create_deck, get_printing, upsert_printing
from cardtracker.models.db import DeckCardDB
from cardtracker.models.failure import BadRequestError, NotFoundError
from cardtracker.services.adjustments import set_absolute
from cardtracker.services.values import (
    DailyValue,
    build_timeline,
    card_sparkline,
    collection_value_history,
    deck_value_history,
    window_start,
)
from tests.support import Catalog

TODAY = datetime.now(UTC).date()


def _at(day: date, hour: int = 12) -> datetime:
    return datetime.combine(day, time(hour), tzinfo=UTC)


def _days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


class TestWindowStart:
    def test_one_day_window_is_today(self) -> None:
        assert window_start(date(2024, 5, 10), 1) == date(2024, 5, 10)

    def test_thirty_day_window(self) -> None:
        assert window_start(date(2024, 5, 30), 30) == date(2024, 5, 1)

    def test_window_longer_than_the_calendar(self) -> None:
        assert window_start(date(2024, 5, 30), 2**31 - 1) == date.min


class TestBuildTimeline:
    def test_no_values(self) -> None:
        assert build_timeline(date(2024, 5, 1), date(2024, 5, 3), {}) == []

    def test_starts_at_first_priced_day_and_fills_gaps(self) -> None:
        values = {date(2024, 5, 2): Decimal("1.5"), date(2024, 5, 4): Decimal("2.005")}

        timeline = build_timeline(date(2024, 4, 1), date(2024, 5, 5), values)

        assert timeline == [
            DailyValue(date(2024, 5, 2), Decimal("1.50")),
            DailyValue(date(2024, 5, 3), None),
            DailyValue(date(2024, 5, 4), Decimal("2.01")),
            DailyValue(date(2024, 5, 5), None),
        ]

    def test_older_values_clipped_to_requested_start(self) -> None:
        values = {date(2024, 4, 1): Decimal(1), date(2024, 5, 2): Decimal(2)}

        timeline = build_timeline(date(2024, 5, 1), date(2024, 5, 2), values)

        assert [entry.day for entry in timeline] == [date(2024, 5, 1), date(2024, 5, 2)]
        assert timeline[0].value is None

    def test_start_after_today(self) -> None:
        values = {date(2024, 5, 2): Decimal(1)}

        assert build_timeline(date(2024, 5, 3), date(2024, 5, 2), values) == []


class TestCardSparkline:
    async def test_proxy_printings_excluded(self, session: AsyncSession, catalog: Catalog) -> None:
        alpha = await get_printing(session, catalog.bolt_alpha_id)
        assert alpha is not None
        await add_value_point(session, catalog.bolt_alpha_id, 100, _at(_days_ago(2)))
        await add_value_point(session, catalog.bolt_beta_id, 900, _at(_days_ago(2)))
        await add_value_point(session, catalog.bolt_alpha_id, 150, _at(TODAY))

        timeline = await card_sparkline(session, alpha.card_id, days=30, today=TODAY)

        assert timeline == [
            DailyValue(_days_ago(2), Decimal("1.00")),
            DailyValue(_days_ago(1), None),
            DailyValue(TODAY, Decimal("1.50")),
        ]

    async def test_average_across_printings(self, session: AsyncSession, catalog: Catalog) -> None:
        alpha = await get_printing(session, catalog.bolt_alpha_id)
        assert alpha is not None
        unlimited, _ = await upsert_printing(
            session,
            card_id=alpha.card_id,
            set_name="Unlimited Edition",
            number="163",
            rarity="Common",
            style="Standard",
        )
        await add_value_point(session, catalog.bolt_alpha_id, 100, _at(TODAY))
        await add_value_point(session, unlimited.id, 200, _at(TODAY))

        timeline = await card_sparkline(session, alpha.card_id, today=TODAY)

        assert timeline == [DailyValue(TODAY, Decimal("1.50"))]

    async def test_no_prices(self, session: AsyncSession, catalog: Catalog) -> None:
        alpha = await get_printing(session, catalog.bolt_alpha_id)
        assert alpha is not None

        assert await card_sparkline(session, alpha.card_id, today=TODAY) == []

    async def test_rejects_non_positive_id(self, session: AsyncSession) -> None:
        with pytest.raises(BadRequestError):
            await card_sparkline(session, 0)

    async def test_unknown_card(self, session: AsyncSession, catalog: Catalog) -> None:
        with pytest.raises(NotFoundError):
            await card_sparkline(session, 999)


class TestCollectionValueHistory:
    async def test_owned_quantities_times_daily_price(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        await set_absolute(session, catalog.user_id, catalog.pikachu_id, 3, 0, 0)
        await set_absolute(session, catalog.user_id, catalog.bolt_beta_id, 2, 0, 0)
        await add_value_point(session, catalog.pikachu_id, 100, _at(_days_ago(1)))
        await add_value_point(session, catalog.pikachu_id, 110, _at(TODAY, hour=1))
        await add_value_point(session, catalog.pikachu_id, 120, _at(TODAY, hour=2))
        await add_value_point(session, catalog.bolt_beta_id, 5000, _at(TODAY))

        timeline = await collection_value_history(session, catalog.user_id, today=TODAY)

        assert timeline == [
            DailyValue(_days_ago(1), Decimal("3.00")),
            DailyValue(TODAY, Decimal("3.60")),
        ]

    async def test_wanted_only_rows_are_not_valued(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        await set_absolute(session, catalog.user_id, catalog.pikachu_id, 0, 4, 0)
        await add_value_point(session, catalog.pikachu_id, 100, _at(TODAY))

        assert await collection_value_history(session, catalog.user_id, today=TODAY) == []

    async def test_window_limits_history(self, session: AsyncSession, catalog: Catalog) -> None:
        await set_absolute(session, catalog.user_id, catalog.pikachu_id, 1, 0, 0)
        await add_value_point(session, catalog.pikachu_id, 100, _at(_days_ago(10)))
        await add_value_point(session, catalog.pikachu_id, 200, _at(_days_ago(1)))

        timeline = await collection_value_history(session, catalog.user_id, days=2, today=TODAY)

        assert timeline == [
            DailyValue(_days_ago(1), Decimal("2.00")),
            DailyValue(TODAY, None),
        ]


class TestDeckValueHistory:
    async def test_deck_quantities_times_daily_price(
        self, session: AsyncSession, catalog: Catalog
    ) -> None:
        deck = await create_deck(session, catalog.user_id, "Pokemon TCG", "Sparks")
        session.add(
            DeckCardDB(
                deck_id=deck.id,
                card_printing_id=catalog.pikachu_id,
                quantity_in_deck=4,
                quantity_idea=1,
                quantity_acquire=0,
                quantity_proxy=0,
            )
        )
        await add_value_point(session, catalog.pikachu_id, 125, _at(TODAY))

        timeline = await deck_value_history(session, deck, today=TODAY)

        assert timeline == [DailyValue(TODAY, Decimal("5.00"))]

    async def test_empty_deck(self, session: AsyncSession, catalog: Catalog) -> None:
        deck = await create_deck(session, catalog.user_id, "Pokemon TCG", "Empty")

        assert await deck_value_history(session, deck, today=TODAY) == []
