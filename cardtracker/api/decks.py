"""
Deck API endpoints.

Decks belong to a user; only the owner or an administrator may read
or change one.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query, Response, status
from pydantic import Field

from cardtracker.api.deps import CurrentUser, PathId, SessionDep
from cardtracker.api.schemas import CamelModel, RowId
from cardtracker.db import get_deck_cards, list_decks
from cardtracker.models.db import DeckCardDB, DeckDB
from cardtracker.models.quantities import DeckCardAvailability
from cardtracker.services import (
    DeckCardDelta,
    apply_deck_deltas,
    create_deck_for_user,
    deck_availability,
    delete_deck,
    get_deck_for_caller,
    update_deck,
)
from cardtracker.services.validation import (
    raise_for_errors,
    validate_create_deck,
    validate_printing_ids,
)

router = APIRouter(prefix="/api/decks", tags=["decks"])


class DeckResponse(CamelModel):
    id: int
    user_id: int
    game: str
    name: str
    description: str | None = None
    created_utc: datetime


class CreateDeckRequest(CamelModel):
    game: str | None = Field(default=None, max_length=100)
    name: str | None = Field(default=None, max_length=255)
    description: str | None = None


class UpdateDeckRequest(CreateDeckRequest):
    """Replacement game, name and description for a deck."""


class DeckCardDeltaRequest(CamelModel):
    card_printing_id: RowId = 0
    delta_in_deck: int = 0
    delta_idea: int = 0
    delta_acquire: int = 0
    delta_proxy: int = 0


class DeckCardItemResponse(CamelModel):
    card_printing_id: int
    quantity_in_deck: int
    quantity_idea: int
    quantity_acquire: int
    quantity_proxy: int
    card_id: int
    card_name: str
    game: str
    set: str
    number: str
    rarity: str
    style: str
    image_url: str | None = None


class DeckAvailabilityItemResponse(CamelModel):
    card_printing_id: int
    owned: int
    proxy: int
    assigned: int
    available: int
    available_with_proxy: int


def deck_to_response(deck: DeckDB) -> DeckResponse:
    return DeckResponse(
        id=deck.id,
        user_id=deck.user_id,
        game=deck.game,
        name=deck.name,
        description=deck.description,
        created_utc=deck.created_utc,
    )


def deck_card_to_response(row: DeckCardDB) -> DeckCardItemResponse:
    """Map a deck row; row.printing and its card must be loaded."""
    printing = row.printing
    return DeckCardItemResponse(
        card_printing_id=row.card_printing_id,
        quantity_in_deck=row.quantity_in_deck,
        quantity_idea=row.quantity_idea,
        quantity_acquire=row.quantity_acquire,
        quantity_proxy=row.quantity_proxy,
        card_id=printing.card_id,
        card_name=printing.card.name,
        game=printing.card.game,
        set=printing.set_name,
        number=printing.number,
        rarity=printing.rarity,
        style=printing.style,
        image_url=printing.image_url,
    )


def availability_to_response(item: DeckCardAvailability) -> DeckAvailabilityItemResponse:
    return DeckAvailabilityItemResponse(
        card_printing_id=item.printing_id,
        owned=item.owned,
        proxy=item.proxy,
        assigned=item.assigned,
        available=item.available,
        available_with_proxy=item.available_with_proxies,
    )


@router.get("", response_model=list[DeckResponse])
async def get_decks(
    user: CurrentUser,
    session: SessionDep,
    game: str | None = None,
) -> list[DeckResponse]:
    """List the caller's decks, optionally for one game."""
    return [deck_to_response(d) for d in await list_decks(session, user.id, game)]


@router.post("", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck_route(
    request: CreateDeckRequest,
    response: Response,
    user: CurrentUser,
    session: SessionDep,
) -> DeckResponse:
    """Create a deck for the caller. Duplicate names return 409."""
    raise_for_errors(validate_create_deck(request.game, request.name))
    deck = await create_deck_for_user(
        session,
        user.id,
        request.game or "",
        request.name or "",
        request.description,
    )
    response.headers["Location"] = f"/api/decks/{deck.id}"
    return deck_to_response(deck)


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_deck_route(deck_id: PathId, user: CurrentUser, session: SessionDep) -> DeckResponse:
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin)
    return deck_to_response(deck)


@router.put("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_deck_route(
    deck_id: PathId,
    request: UpdateDeckRequest,
    user: CurrentUser,
    session: SessionDep,
) -> Response:
    """
    Replace a deck's game, name and description.

    Duplicate names return 409; a deck holding cards cannot change game.
    """
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin)
    raise_for_errors(validate_create_deck(request.game, request.name))
    await update_deck(
        session,
        deck,
        request.game or "",
        request.name or "",
        request.description,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck_route(deck_id: PathId, user: CurrentUser, session: SessionDep) -> Response:
    """Delete a deck and its card rows."""
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin, with_cards=True)
    await delete_deck(session, deck)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{deck_id}/cards", response_model=list[DeckCardItemResponse])
async def get_deck_cards_route(
    deck_id: PathId, user: CurrentUser, session: SessionDep
) -> list[DeckCardItemResponse]:
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin)
    rows = await get_deck_cards(session, deck.id, with_printings=True)
    return [deck_card_to_response(r) for r in rows]


@router.post("/{deck_id}/cards/delta", response_model=list[DeckCardItemResponse])
async def apply_deck_card_deltas(
    deck_id: PathId,
    request: list[DeckCardDeltaRequest],
    user: CurrentUser,
    session: SessionDep,
) -> list[DeckCardItemResponse]:
    """
    Apply signed deltas to deck counters.

    Counters saturate at zero; rows that reach zero everywhere are
    removed. Printings must belong to the deck's game.
    """
    raise_for_errors(validate_printing_ids("cardPrintingId", [d.card_printing_id for d in request]))
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin)
    await apply_deck_deltas(
        session,
        deck,
        [
            DeckCardDelta(
                printing_id=d.card_printing_id,
                delta_in_deck=d.delta_in_deck,
                delta_idea=d.delta_idea,
                delta_acquire=d.delta_acquire,
                delta_proxy=d.delta_proxy,
            )
            for d in request
        ],
    )
    rows = await get_deck_cards(session, deck.id, with_printings=True)
    return [deck_card_to_response(r) for r in rows]


@router.get("/{deck_id}/availability", response_model=list[DeckAvailabilityItemResponse])
async def get_deck_availability(
    deck_id: PathId,
    user: CurrentUser,
    session: SessionDep,
    include_proxies: Annotated[bool, Query(alias="includeProxies")] = False,
) -> list[DeckAvailabilityItemResponse]:
    """
    Compare the owner's copies with what the deck assigns.

    Without includeProxies, availableWithProxy equals available.
    """
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin)
    items = await deck_availability(session, deck, include_proxies)
    return [availability_to_response(i) for i in items]
