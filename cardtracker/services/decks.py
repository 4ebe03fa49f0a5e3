"""
Deck contents and availability.

Deck card counters use the same saturating arithmetic as the
collection. Unlike collection rows, a deck row whose counters all
reach zero is removed.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.db.operations import (
    create_deck,
    deck_name_taken,
    get_deck,
    get_deck_cards,
    get_printings_with_cards,
    get_user_cards_by_printing,
)
from cardtracker.models.db import DeckCardDB, DeckDB
from cardtracker.models.failure import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from cardtracker.models.quantities import DeckCardAvailability
from cardtracker.services.availability import calculate_availability
from cardtracker.services.quantity_guard import clamp_delta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeckCardDelta:
    printing_id: int
    delta_in_deck: int = 0
    delta_idea: int = 0
    delta_acquire: int = 0
    delta_proxy: int = 0


async def get_deck_for_caller(
    session: AsyncSession,
    deck_id: int,
    caller_id: int,
    caller_is_admin: bool,
    with_cards: bool = False,
) -> DeckDB:
    """Load a deck the caller owns (or any deck, for admins)."""
    deck = await get_deck(session, deck_id, with_cards=with_cards)
    if deck is None:
        raise NotFoundError(f"Deck {deck_id} was not found.")
    if deck.user_id != caller_id and not caller_is_admin:
        raise ForbiddenError("You do not own this deck.")
    return deck


async def apply_deck_deltas(
    session: AsyncSession, deck: DeckDB, deltas: Sequence[DeckCardDelta]
) -> list[DeckCardDB]:
    """
    Apply counter deltas to a deck's cards, all-or-nothing.

    Every printing must exist and belong to the deck's game.

    Returns:
        The deck's remaining cards after the change.
    """
    if not deltas:
        return await get_deck_cards(session, deck.id)

    ids = {d.printing_id for d in deltas}
    printings = await get_printings_with_cards(session, ids)
    if len(printings) != len(ids):
        raise NotFoundError("One or more card printings were not found.")
    if any(p.card.game.casefold() != deck.game.casefold() for p in printings.values()):
        raise BadRequestError("One or more card games do not match deck game.")

    rows = {row.card_printing_id: row for row in await get_deck_cards(session, deck.id, for_update=True)}
    for delta in deltas:
        row = rows.get(delta.printing_id)
        if row is None:
            row = DeckCardDB(
                deck_id=deck.id,
                card_printing_id=delta.printing_id,
                quantity_in_deck=0,
                quantity_idea=0,
                quantity_acquire=0,
                quantity_proxy=0,
            )
            session.add(row)
            rows[delta.printing_id] = row

        row.quantity_in_deck = clamp_delta(row.quantity_in_deck, delta.delta_in_deck)
        row.quantity_idea = clamp_delta(row.quantity_idea, delta.delta_idea)
        row.quantity_acquire = clamp_delta(row.quantity_acquire, delta.delta_acquire)
        row.quantity_proxy = clamp_delta(row.quantity_proxy, delta.delta_proxy)

    for printing_id, row in list(rows.items()):
        if row.is_empty:
            if row in session.new:
                session.expunge(row)
            else:
                await session.delete(row)
            del rows[printing_id]

    await session.flush()
    logger.debug("Applied %d deck deltas to deck %d", len(deltas), deck.id)
    return sorted(rows.values(), key=lambda r: r.card_printing_id)


async def deck_availability(
    session: AsyncSession, deck: DeckDB, include_proxies: bool
) -> list[DeckCardAvailability]:
    """Owned/proxy copies of the deck owner versus what the deck assigns."""
    deck_cards = await get_deck_cards(session, deck.id)
    if not deck_cards:
        return []

    holdings = await get_user_cards_by_printing(
        session, deck.user_id, [dc.card_printing_id for dc in deck_cards]
    )

    result = []
    for dc in deck_cards:
        held = holdings.get(dc.card_printing_id)
        owned = held.quantity_owned if held else 0
        proxy = held.quantity_proxy_owned if held else 0
        available, available_with_proxies = calculate_availability(
            owned, proxy, dc.quantity_in_deck
        )
        result.append(
            DeckCardAvailability(
                printing_id=dc.card_printing_id,
                owned=owned,
                proxy=proxy,
                assigned=dc.quantity_in_deck,
                available=available,
                available_with_proxies=available_with_proxies if include_proxies else available,
            )
        )
    return result


async def create_deck_for_user(
    session: AsyncSession,
    user_id: int,
    game: str,
    name: str,
    description: str | None = None,
) -> DeckDB:
    """Create a deck; names are unique per user."""
    game, name = game.strip(), name.strip()
    if await deck_name_taken(session, user_id, name):
        raise ConflictError(f"A deck named '{name}' already exists.", title="Duplicate deck name")
    deck = await create_deck(session, user_id, game, name, description)
    logger.info("Created deck %d (%s) for user %d", deck.id, name, user_id)
    return deck


async def update_deck(
    session: AsyncSession,
    deck: DeckDB,
    game: str,
    name: str,
    description: str | None = None,
) -> DeckDB:
    """
    Replace a deck's game, name and description.

    Names stay unique per owner, ignoring case. A deck that already
    holds cards keeps its game.
    """
    game, name = game.strip(), name.strip()
    if await deck_name_taken(session, deck.user_id, name, exclude_deck_id=deck.id):
        raise ConflictError(f"A deck named '{name}' already exists.", title="Duplicate deck name")
    if game.casefold() != deck.game.casefold() and await get_deck_cards(session, deck.id):
        raise BadRequestError("The game of a deck with cards cannot be changed.")

    deck.game = game
    deck.name = name
    deck.description = description
    await session.flush()
    logger.info("Updated deck %d (%s)", deck.id, name)
    return deck


async def delete_deck(session: AsyncSession, deck: DeckDB) -> None:
    await session.delete(deck)
    await session.flush()
