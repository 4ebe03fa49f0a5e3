"""
Database CRUD operations.

Provides async functions for reading and writing users, the card
catalog, per-user quantities, decks and value history. Every function
takes the session explicitly and flushes rather than commits; the
request boundary owns the transaction.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute, selectinload

from cardtracker.models.db import (
    CardDB,
    CardPrintingDB,
    DeckCardDB,
    DeckDB,
    UserCardDB,
    UserDB,
    ValueHistoryDB,
    ValueScope,
)


async def _paginate(
    session: AsyncSession, query: Select[Any], page: int, page_size: int
) -> tuple[list[Any], int]:
    total = await session.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
    result = await session.execute(query.offset((page - 1) * page_size).limit(page_size))
    return list(result.scalars().all()), int(total or 0)


# --- User Operations ---


async def get_user(session: AsyncSession, user_id: int) -> UserDB | None:
    """Get a user by id. Returns None if not found."""
    return await session.get(UserDB, user_id)


async def list_users(session: AsyncSession) -> list[UserDB]:
    """All users ordered by username."""
    result = await session.execute(select(UserDB).order_by(UserDB.username, UserDB.id))
    return list(result.scalars().all())


async def create_user(
    session: AsyncSession,
    username: str,
    display_name: str | None = None,
    is_admin: bool = False,
) -> UserDB:
    """Create a new user. Display name defaults to the username."""
    user = UserDB(username=username, display_name=display_name or username, is_admin=is_admin)
    session.add(user)
    await session.flush()
    return user


async def get_user_with_holdings(session: AsyncSession, user_id: int) -> UserDB | None:
    """
    Get a user with holdings and decks loaded eagerly.

    A delete can then cascade without lazy loads.
    """
    result = await session.execute(
        select(UserDB)
        .where(UserDB.id == user_id)
        .options(
            selectinload(UserDB.user_cards),
            selectinload(UserDB.decks).selectinload(DeckDB.cards),
        )
    )
    return result.scalar_one_or_none()


def admin_ids_query(lock: bool = False) -> Select[Any]:
    """Ids of administrators in id order, optionally FOR UPDATE."""
    query = select(UserDB.id).where(UserDB.is_admin.is_(True)).order_by(UserDB.id)
    if lock:
        query = query.with_for_update()
    return query


async def lock_admins(session: AsyncSession) -> list[int]:
    """
    Lock every administrator row for the rest of the transaction.

    Rows are locked in id order. Callers that may remove an
    administrator take this lock before reading or locking any other
    user row.
    """
    result = await session.execute(admin_ids_query(lock=True))
    return list(result.scalars().all())


async def count_admins(session: AsyncSession, lock: bool = False) -> int:
    """
    Count administrators.

    With lock=True the admin rows are locked first (see lock_admins).
    Aggregates cannot be locked, hence selecting ids and counting them.
    """
    if lock:
        return len(await lock_admins(session))
    result = await session.execute(admin_ids_query())
    return len(result.scalars().all())


# --- Catalog Operations ---


async def get_card(session: AsyncSession, card_id: int) -> CardDB | None:
    """Get a card with its printings."""
    result = await session.execute(
        select(CardDB).where(CardDB.id == card_id).options(selectinload(CardDB.printings))
    )
    return result.scalar_one_or_none()


async def create_card(
    session: AsyncSession,
    game: str,
    name: str,
    card_type: str,
    description: str | None = None,
) -> CardDB:
    card = CardDB(game=game, name=name, card_type=card_type, description=description)
    session.add(card)
    await session.flush()
    return card


async def get_printing(session: AsyncSession, printing_id: int) -> CardPrintingDB | None:
    """Get a printing with its card."""
    result = await session.execute(
        select(CardPrintingDB)
        .where(CardPrintingDB.id == printing_id)
        .options(selectinload(CardPrintingDB.card))
    )
    return result.scalar_one_or_none()


async def printing_exists(session: AsyncSession, printing_id: int) -> bool:
    found = await session.scalar(select(CardPrintingDB.id).where(CardPrintingDB.id == printing_id))
    return found is not None


async def existing_printing_ids(session: AsyncSession, printing_ids: Iterable[int]) -> set[int]:
    """Subset of the given ids that exist in the catalog."""
    ids = set(printing_ids)
    if not ids:
        return set()
    result = await session.execute(select(CardPrintingDB.id).where(CardPrintingDB.id.in_(ids)))
    return set(result.scalars().all())


async def search_printings(
    session: AsyncSession,
    *,
    game: str | None = None,
    set_name: str | None = None,
    rarity: str | None = None,
    name: str | None = None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[CardPrintingDB], int]:
    """
    Paged printing search.

    game/set/rarity match exactly; name is a case-insensitive substring.
    """
    query = (
        select(CardPrintingDB)
        .join(CardPrintingDB.card)
        .options(selectinload(CardPrintingDB.card))
    )
    query = _filter_printings(query, game, set_name, rarity, name)
    query = query.order_by(CardDB.name, CardPrintingDB.set_name, CardPrintingDB.number, CardPrintingDB.id)
    return await _paginate(session, query, page, page_size)


def _filter_printings(
    query: Select[Any],
    game: str | None,
    set_name: str | None,
    rarity: str | None,
    name: str | None,
) -> Select[Any]:
    if game and game.strip():
        query = query.where(CardDB.game == game.strip())
    if set_name and set_name.strip():
        query = query.where(CardPrintingDB.set_name == set_name.strip())
    if rarity and rarity.strip():
        query = query.where(CardPrintingDB.rarity == rarity.strip())
    if name and name.strip():
        query = query.where(func.lower(CardDB.name).contains(name.strip().lower()))
    return query


async def printing_games(session: AsyncSession) -> list[str]:
    """Games that have at least one printing, sorted."""
    result = await session.execute(
        select(CardDB.game).join(CardDB.printings).distinct().order_by(CardDB.game)
    )
    return list(result.scalars().all())


async def printing_facet_values(
    session: AsyncSession, column: InstrumentedAttribute[str], games: Sequence[str] = ()
) -> list[str]:
    """
    Distinct non-blank values of a printing column, sorted.

    With games, only printings of those games are considered.
    """
    query = select(column).join(CardPrintingDB.card).where(func.trim(column) != "")
    if games:
        query = query.where(CardDB.game.in_(games))
    result = await session.execute(query.distinct().order_by(column))
    return list(result.scalars().all())


async def upsert_printing(
    session: AsyncSession,
    *,
    card_id: int,
    set_name: str,
    number: str,
    rarity: str,
    style: str,
    image_url: str | None = None,
    printing_id: int | None = None,
) -> tuple[CardPrintingDB, bool]:
    """
    Insert or update a printing.

    When printing_id is given the existing row is updated; otherwise a
    printing with the same card/set/number/style is reused if present.

    Returns:
        Tuple of (printing, created).
    """
    existing: CardPrintingDB | None = None
    if printing_id is not None:
        existing = await session.get(CardPrintingDB, printing_id)
    else:
        existing = await session.scalar(
            select(CardPrintingDB).where(
                CardPrintingDB.card_id == card_id,
                CardPrintingDB.set_name == set_name,
                CardPrintingDB.number == number,
                CardPrintingDB.style == style,
            )
        )

    if existing:
        existing.card_id = card_id
        existing.set_name = set_name
        existing.number = number
        existing.rarity = rarity
        existing.style = style
        existing.image_url = image_url
        await session.flush()
        return existing, False

    printing = CardPrintingDB(
        card_id=card_id,
        set_name=set_name,
        number=number,
        rarity=rarity,
        style=style,
        image_url=image_url,
    )
    session.add(printing)
    await session.flush()
    return printing, True


# --- User Card Operations ---


async def get_user_card(
    session: AsyncSession, user_id: int, printing_id: int, for_update: bool = False
) -> UserCardDB | None:
    """Get the quantities row for (user, printing), optionally row-locked."""
    query = select(UserCardDB).where(
        UserCardDB.user_id == user_id,
        UserCardDB.card_printing_id == printing_id,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_user_cards_by_printing(
    session: AsyncSession,
    user_id: int,
    printing_ids: Iterable[int],
    for_update: bool = False,
) -> dict[int, UserCardDB]:
    """Quantities rows for a user keyed by printing id."""
    ids = set(printing_ids)
    if not ids:
        return {}
    query = select(UserCardDB).where(
        UserCardDB.user_id == user_id,
        UserCardDB.card_printing_id.in_(ids),
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return {row.card_printing_id: row for row in result.scalars().all()}


async def list_user_cards(
    session: AsyncSession,
    user_id: int,
    *,
    wanted_only: bool = False,
    game: str | None = None,
    set_name: str | None = None,
    rarity: str | None = None,
    name: str | None = None,
    card_printing_id: int | None = None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[UserCardDB], int]:
    """
    Paged holdings of a user, with printing and card loaded.

    All-zero rows are skipped. With wanted_only, only rows with a
    positive wanted quantity are returned (the wishlist view).
    """
    query = (
        select(UserCardDB)
        .join(UserCardDB.printing)
        .join(CardPrintingDB.card)
        .where(UserCardDB.user_id == user_id)
        .options(selectinload(UserCardDB.printing).selectinload(CardPrintingDB.card))
    )
    if wanted_only:
        query = query.where(UserCardDB.quantity_wanted > 0)
    else:
        query = query.where(
            (UserCardDB.quantity_owned > 0)
            | (UserCardDB.quantity_wanted > 0)
            | (UserCardDB.quantity_proxy_owned > 0)
        )
    if card_printing_id is not None:
        query = query.where(UserCardDB.card_printing_id == card_printing_id)
    query = _filter_printings(query, game, set_name, rarity, name)
    query = query.order_by(CardDB.name, CardPrintingDB.set_name, CardPrintingDB.number, UserCardDB.id)
    return await _paginate(session, query, page, page_size)


# --- Deck Operations ---


async def get_deck(session: AsyncSession, deck_id: int, with_cards: bool = False) -> DeckDB | None:
    query = select(DeckDB).where(DeckDB.id == deck_id)
    if with_cards:
        query = query.options(selectinload(DeckDB.cards))
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def list_decks(session: AsyncSession, user_id: int, game: str | None = None) -> list[DeckDB]:
    query = select(DeckDB).where(DeckDB.user_id == user_id)
    if game and game.strip():
        query = query.where(DeckDB.game == game.strip())
    result = await session.execute(query.order_by(DeckDB.name, DeckDB.id))
    return list(result.scalars().all())


async def deck_name_taken(
    session: AsyncSession, user_id: int, name: str, exclude_deck_id: int | None = None
) -> bool:
    """Whether the user has a deck with this name, ignoring case."""
    query = select(DeckDB.id).where(
        DeckDB.user_id == user_id, func.lower(DeckDB.name) == name.lower()
    )
    if exclude_deck_id is not None:
        query = query.where(DeckDB.id != exclude_deck_id)
    found = await session.scalar(query.limit(1))
    return found is not None


async def create_deck(
    session: AsyncSession,
    user_id: int,
    game: str,
    name: str,
    description: str | None = None,
) -> DeckDB:
    deck = DeckDB(user_id=user_id, game=game, name=name, description=description)
    session.add(deck)
    await session.flush()
    return deck


async def get_deck_cards(
    session: AsyncSession,
    deck_id: int,
    for_update: bool = False,
    with_printings: bool = False,
) -> list[DeckCardDB]:
    query = select(DeckCardDB).where(DeckCardDB.deck_id == deck_id).order_by(DeckCardDB.id)
    if with_printings:
        query = query.options(selectinload(DeckCardDB.printing).selectinload(CardPrintingDB.card))
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_printings_with_cards(
    session: AsyncSession, printing_ids: Iterable[int]
) -> dict[int, CardPrintingDB]:
    ids = set(printing_ids)
    if not ids:
        return {}
    result = await session.execute(
        select(CardPrintingDB)
        .where(CardPrintingDB.id.in_(ids))
        .options(selectinload(CardPrintingDB.card))
    )
    return {p.id: p for p in result.scalars().all()}


# --- Value History Operations ---


async def add_value_point(
    session: AsyncSession,
    scope_id: int,
    price_cents: int,
    as_of_utc: datetime,
    scope: ValueScope = ValueScope.CARD_PRINTING,
    source: str = "manual",
) -> ValueHistoryDB:
    point = ValueHistoryDB(
        scope_type=int(scope),
        scope_id=scope_id,
        price_cents=price_cents,
        as_of_utc=as_of_utc,
        source=source,
    )
    session.add(point)
    await session.flush()
    return point


async def get_value_series(
    session: AsyncSession,
    scope_id: int,
    scope: ValueScope = ValueScope.CARD_PRINTING,
    since: datetime | None = None,
) -> list[ValueHistoryDB]:
    """Points for one scope, oldest first."""
    query = select(ValueHistoryDB).where(
        ValueHistoryDB.scope_type == int(scope),
        ValueHistoryDB.scope_id == scope_id,
    )
    if since is not None:
        query = query.where(ValueHistoryDB.as_of_utc >= since)
    result = await session.execute(query.order_by(ValueHistoryDB.as_of_utc, ValueHistoryDB.id))
    return list(result.scalars().all())


async def get_values_since(
    session: AsyncSession,
    scope_ids: Iterable[int],
    since: datetime,
    scope: ValueScope = ValueScope.CARD_PRINTING,
) -> list[ValueHistoryDB]:
    """Points for several scopes since a moment, oldest first."""
    ids = set(scope_ids)
    if not ids:
        return []
    result = await session.execute(
        select(ValueHistoryDB)
        .where(
            ValueHistoryDB.scope_type == int(scope),
            ValueHistoryDB.scope_id.in_(ids),
            ValueHistoryDB.as_of_utc >= since,
        )
        .order_by(ValueHistoryDB.as_of_utc, ValueHistoryDB.id)
    )
    return list(result.scalars().all())


async def latest_prices(
    session: AsyncSession,
    scope_ids: Sequence[int] | None = None,
    scope: ValueScope = ValueScope.CARD_PRINTING,
) -> dict[int, int]:
    """
    Most recent price in cents per scope id.

    Ties on as_of_utc resolve to the highest row id.
    """
    query = select(ValueHistoryDB).where(ValueHistoryDB.scope_type == int(scope))
    if scope_ids is not None:
        if not scope_ids:
            return {}
        query = query.where(ValueHistoryDB.scope_id.in_(set(scope_ids)))
    result = await session.execute(query.order_by(ValueHistoryDB.as_of_utc, ValueHistoryDB.id))

    latest: dict[int, int] = {}
    for point in result.scalars().all():
        latest[point.scope_id] = point.price_cents
    return latest
