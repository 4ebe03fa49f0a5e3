"""
Price history and collection value.

Prices are stored as integer cents in value history. Reads convert to
currency units only at the edge, rounding half away from zero.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from cardtracker.config import settings
from cardtracker.db.operations import (
    add_value_point,
    get_deck_cards,
    get_printings_with_cards,
    get_value_series,
    get_values_since,
    latest_prices,
    printing_exists,
)
from cardtracker.models.db import (
    CardDB,
    CardPrintingDB,
    DeckCardDB,
    DeckDB,
    UserCardDB,
    ValueHistoryDB,
)
from cardtracker.models.failure import BadRequestError, NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class PricePoint:
    day: date
    price: Decimal


@dataclass(frozen=True)
class PriceUpdate:
    printing_id: int
    price_cents: int
    source: str | None = None


@dataclass(frozen=True)
class CollectionValue:
    total_cents: int
    per_game: dict[str, int]


@dataclass(frozen=True)
class DailyValue:
    """One day of a value timeline; value is None on days with no prices."""

    day: date
    value: Decimal | None


def cents_to_price(cents: int) -> Decimal:
    """Convert cents to currency units, rounded half away from zero."""
    return (Decimal(cents) / 100).quantize(_CENT, rounding=ROUND_HALF_UP)


def window_start(today: date, days: int) -> date:
    """First day of a trailing window of `days` days ending on `today`."""
    span = days - 1
    if span >= (today - date.min).days:
        return date.min
    return today - timedelta(days=span)


def _utc_day(as_of: datetime) -> date:
    if as_of.tzinfo is not None:
        as_of = as_of.astimezone(UTC)
    return as_of.date()


def daily_points(history: Sequence[ValueHistoryDB]) -> list[PricePoint]:
    """
    Collapse a series to one point per UTC day, latest as_of_utc winning.

    Input must be ordered oldest first.
    """
    by_day: dict[date, int] = {}
    for row in history:
        by_day[_utc_day(row.as_of_utc)] = row.price_cents
    return [PricePoint(day, cents_to_price(cents)) for day, cents in sorted(by_day.items())]


async def price_history(
    session: AsyncSession,
    printing_id: int,
    days: int | None = None,
    today: date | None = None,
) -> list[PricePoint]:
    """
    Daily prices for a printing over the trailing window.

    The window covers `days` calendar days ending today (UTC). A
    missing or non-positive `days` falls back to the configured default.

    Raises:
        BadRequestError: printing_id <= 0
        NotFoundError: unknown printing
    """
    if printing_id <= 0:
        raise BadRequestError("Card printing id must be positive.")
    if not await printing_exists(session, printing_id):
        raise NotFoundError(f"Card printing {printing_id} was not found.")

    if days is None or days <= 0:
        days = settings.price_history_days
    today = today or datetime.now(UTC).date()
    start = datetime.combine(window_start(today, days), time.min, tzinfo=UTC)

    history = await get_value_series(session, printing_id, since=start)
    return daily_points(history)


async def printing_series(session: AsyncSession, printing_id: int) -> list[ValueHistoryDB]:
    """Every recorded value point for a printing, oldest first."""
    if not await printing_exists(session, printing_id):
        raise NotFoundError(f"Card printing with id {printing_id} was not found.")
    return await get_value_series(session, printing_id)


async def refresh_prices(
    session: AsyncSession, game: str | None, items: Sequence[PriceUpdate]
) -> tuple[int, int]:
    """
    Record a price point for each printing of `game`.

    Unknown printings and printings of other games are skipped.

    Returns:
        Tuple of (inserted, ignored).
    """
    if game is None or not game.strip():
        raise ValidationFailedError(
            {"game": ["The 'game' query parameter is required."]},
            detail="The refresh request must specify a game.",
        )
    if not items:
        raise ValidationFailedError(
            {"items": ["At least one item must be provided."]},
            detail="The refresh request must include at least one item.",
        )

    game = game.strip()
    printings = await get_printings_with_cards(session, {i.printing_id for i in items})
    valid = {pid for pid, p in printings.items() if p.card.game == game}

    now = datetime.now(UTC)
    inserted = 0
    for item in items:
        if item.printing_id not in valid:
            continue
        source = item.source.strip() if item.source and item.source.strip() else "manual"
        await add_value_point(session, item.printing_id, item.price_cents, now, source=source)
        inserted += 1

    ignored = len(items) - inserted
    logger.info("Price refresh for %s: %d recorded, %d ignored", game, inserted, ignored)
    return inserted, ignored


async def collection_value(session: AsyncSession, user_id: int) -> CollectionValue:
    """Latest price times owned quantity, in total and per game."""
    result = await session.execute(
        select(CardDB.game, UserCardDB.card_printing_id, UserCardDB.quantity_owned)
        .select_from(UserCardDB)
        .join(UserCardDB.printing)
        .join(CardPrintingDB.card)
        .where(UserCardDB.user_id == user_id, UserCardDB.quantity_owned > 0)
    )
    rows = result.all()
    prices = await latest_prices(session, [pid for _, pid, _ in rows])

    total = 0
    per_game: dict[str, int] = {}
    for game, printing_id, quantity in rows:
        price = prices.get(printing_id)
        if price is None:
            continue
        amount = price * quantity
        total += amount
        per_game[game] = per_game.get(game, 0) + amount
    return CollectionValue(total_cents=total, per_game=per_game)


async def deck_value(session: AsyncSession, deck: DeckDB) -> int:
    """Latest price times quantity in deck, in cents."""
    cards = [dc for dc in await get_deck_cards(session, deck.id) if dc.quantity_in_deck > 0]
    prices = await latest_prices(session, [dc.card_printing_id for dc in cards])
    return sum(
        prices[dc.card_printing_id] * dc.quantity_in_deck
        for dc in cards
        if dc.card_printing_id in prices
    )


def _not_proxy(style: InstrumentedAttribute[str]) -> ColumnElement[bool]:
    return func.lower(style).not_like("%proxy%")


def build_timeline(
    requested_start: date, today: date, values: dict[date, Decimal]
) -> list[DailyValue]:
    """
    One entry per day from the first priced day (or requested_start, if
    later) through today. Days without a value carry None.
    """
    if not values or requested_start > today:
        return []

    day = max(min(values), requested_start)
    timeline = []
    while day <= today:
        value = values.get(day)
        if value is not None:
            value = value.quantize(_CENT, rounding=ROUND_HALF_UP)
        timeline.append(DailyValue(day, value))
        day += timedelta(days=1)
    return timeline


async def _daily_cents(
    session: AsyncSession, printing_ids: Sequence[int], since: date
) -> dict[int, dict[date, int]]:
    """Latest price per printing per UTC day since a date."""
    rows = await get_values_since(
        session, printing_ids, datetime.combine(since, time.min, tzinfo=UTC)
    )
    per_printing: dict[int, dict[date, int]] = {}
    for row in rows:
        per_printing.setdefault(row.scope_id, {})[_utc_day(row.as_of_utc)] = row.price_cents
    return per_printing


async def _holdings_timeline(
    session: AsyncSession, quantities: dict[int, int], days: int | None, today: date | None
) -> list[DailyValue]:
    """Daily sum of price times quantity over the given printings."""
    if days is None or days <= 0:
        days = settings.value_history_days
    today = today or datetime.now(UTC).date()
    start = window_start(today, days)
    if not quantities:
        return []

    totals: dict[date, Decimal] = {}
    for printing_id, by_day in (await _daily_cents(session, list(quantities), start)).items():
        for day, cents in by_day.items():
            amount = Decimal(cents * quantities[printing_id]) / 100
            totals[day] = totals.get(day, Decimal(0)) + amount
    return build_timeline(start, today, totals)


async def card_sparkline(
    session: AsyncSession,
    card_id: int,
    days: int | None = None,
    today: date | None = None,
) -> list[DailyValue]:
    """
    Daily average price across a card's non-proxy printings.

    Raises:
        BadRequestError: card_id <= 0
        NotFoundError: unknown card
    """
    if card_id <= 0:
        raise BadRequestError("Card id must be positive.")
    if await session.get(CardDB, card_id) is None:
        raise NotFoundError(f"Card {card_id} was not found.")

    if days is None or days <= 0:
        days = settings.price_history_days
    today = today or datetime.now(UTC).date()
    start = window_start(today, days)

    result = await session.execute(
        select(CardPrintingDB.id).where(
            CardPrintingDB.card_id == card_id, _not_proxy(CardPrintingDB.style)
        )
    )
    printing_ids = list(result.scalars().all())
    if not printing_ids:
        return []

    prices: dict[date, list[int]] = {}
    for by_day in (await _daily_cents(session, printing_ids, start)).values():
        for day, cents in by_day.items():
            prices.setdefault(day, []).append(cents)
    averages = {day: Decimal(sum(c)) / len(c) / 100 for day, c in prices.items()}
    return build_timeline(start, today, averages)


async def collection_value_history(
    session: AsyncSession,
    user_id: int,
    days: int | None = None,
    today: date | None = None,
) -> list[DailyValue]:
    """Daily value of the user's owned, non-proxy printings."""
    result = await session.execute(
        select(UserCardDB.card_printing_id, UserCardDB.quantity_owned)
        .select_from(UserCardDB)
        .join(UserCardDB.printing)
        .where(
            UserCardDB.user_id == user_id,
            UserCardDB.quantity_owned > 0,
            _not_proxy(CardPrintingDB.style),
        )
    )
    quantities = {printing_id: quantity for printing_id, quantity in result.all()}
    return await _holdings_timeline(session, quantities, days, today)


async def deck_value_history(
    session: AsyncSession,
    deck: DeckDB,
    days: int | None = None,
    today: date | None = None,
) -> list[DailyValue]:
    """Daily value of the copies a deck assigns, proxies excluded."""
    result = await session.execute(
        select(DeckCardDB.card_printing_id, DeckCardDB.quantity_in_deck)
        .select_from(DeckCardDB)
        .join(DeckCardDB.printing)
        .where(
            DeckCardDB.deck_id == deck.id,
            DeckCardDB.quantity_in_deck > 0,
            _not_proxy(CardPrintingDB.style),
        )
    )
    quantities = {printing_id: quantity for printing_id, quantity in result.all()}
    return await _holdings_timeline(session, quantities, days, today)
