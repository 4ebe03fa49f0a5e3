"""
Value endpoints.

Admins record price points; any user can read a printing's series
and value their own collection or decks at the latest prices.
"""

from datetime import datetime

from fastapi import APIRouter, Response, status
from pydantic import Field

from cardtracker.api.deps import AdminUser, CurrentUser, PathId, SessionDep
from cardtracker.api.schemas import CamelModel, RowId
from cardtracker.services import (
    PriceUpdate,
    collection_value,
    deck_value,
    get_deck_for_caller,
    printing_series,
    refresh_prices,
)
from cardtracker.services.validation import raise_for_errors, validate_printing_ids

router = APIRouter(prefix="/api/value", tags=["value"])


class RefreshItemRequest(CamelModel):
    card_printing_id: RowId = 0
    price_cents: int = Field(default=0, ge=0, le=2**63 - 1)
    source: str | None = Field(default=None, max_length=100)


class SeriesPointResponse(CamelModel):
    as_of_utc: datetime
    price_cents: int
    source: str


class SeriesResponse(CamelModel):
    card_printing_id: int
    points: list[SeriesPointResponse]


class GameSliceResponse(CamelModel):
    game: str
    cents: int


class CollectionSummaryResponse(CamelModel):
    total_cents: int
    by_game: list[GameSliceResponse]


class DeckValueResponse(CamelModel):
    deck_id: int
    total_cents: int


@router.post("/refresh", status_code=status.HTTP_204_NO_CONTENT)
async def refresh(
    items: list[RefreshItemRequest],
    _admin: AdminUser,
    session: SessionDep,
    game: str | None = None,
) -> Response:
    """
    Record the current price of each printing (admin only).

    Printings that are unknown or belong to another game are skipped.
    """
    raise_for_errors(validate_printing_ids("cardPrintingId", [i.card_printing_id for i in items]))
    await refresh_prices(
        session,
        game,
        [PriceUpdate(i.card_printing_id, i.price_cents, i.source) for i in items],
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/cardprinting/{printing_id}", response_model=SeriesResponse)
async def get_printing_series(
    printing_id: PathId, _user: CurrentUser, session: SessionDep
) -> SeriesResponse:
    """Every recorded value point for a printing, oldest first."""
    history = await printing_series(session, printing_id)
    return SeriesResponse(
        card_printing_id=printing_id,
        points=[
            SeriesPointResponse(as_of_utc=h.as_of_utc, price_cents=h.price_cents, source=h.source)
            for h in history
        ],
    )


@router.get("/collection/summary", response_model=CollectionSummaryResponse)
async def get_collection_summary(user: CurrentUser, session: SessionDep) -> CollectionSummaryResponse:
    """Owned copies valued at their latest price, overall and per game."""
    value = await collection_value(session, user.id)
    return CollectionSummaryResponse(
        total_cents=value.total_cents,
        by_game=[
            GameSliceResponse(game=game, cents=cents)
            for game, cents in sorted(value.per_game.items())
        ],
    )


@router.get("/deck/{deck_id}", response_model=DeckValueResponse)
async def get_deck_value(deck_id: PathId, user: CurrentUser, session: SessionDep) -> DeckValueResponse:
    """The deck's in-deck copies valued at their latest price."""
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin)
    return DeckValueResponse(deck_id=deck.id, total_cents=await deck_value(session, deck))
