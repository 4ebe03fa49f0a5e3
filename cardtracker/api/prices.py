"""
Price history and value timeline endpoints.

Price history returns one point per UTC day over a trailing window,
the latest recorded price of each day winning. Timelines run daily
from the first priced day to today, with null on days without prices.
"""

from fastapi import APIRouter

from cardtracker.api.deps import CurrentUser, PathId, SessionDep
from cardtracker.api.schemas import CamelModel
from cardtracker.services import (
    DailyValue,
    PricePoint,
    card_sparkline,
    collection_value_history,
    deck_value_history,
    get_deck_for_caller,
    price_history,
)

router = APIRouter(prefix="/api/prices", tags=["prices"])
timeline_router = APIRouter(prefix="/api", tags=["prices"])


class PricePointResponse(CamelModel):
    d: str
    p: float


class PriceHistoryResponse(CamelModel):
    points: list[PricePointResponse]


class DailyValueResponse(CamelModel):
    d: str
    v: float | None


def point_to_response(point: PricePoint) -> PricePointResponse:
    return PricePointResponse(d=point.day.isoformat(), p=float(point.price))


def timeline_to_response(timeline: list[DailyValue]) -> list[DailyValueResponse]:
    return [
        DailyValueResponse(
            d=entry.day.isoformat(),
            v=float(entry.value) if entry.value is not None else None,
        )
        for entry in timeline
    ]


@router.get("/{printing_id}/history", response_model=PriceHistoryResponse)
async def get_price_history(
    printing_id: PathId,
    _user: CurrentUser,
    session: SessionDep,
    days: int | None = None,
) -> PriceHistoryResponse:
    """
    Daily prices for a printing.

    A missing or non-positive `days` falls back to the configured window.
    """
    points = await price_history(session, printing_id, days)
    return PriceHistoryResponse(points=[point_to_response(p) for p in points])


@timeline_router.get("/cards/{card_id}/sparkline", response_model=list[DailyValueResponse])
async def get_card_sparkline(
    card_id: PathId,
    _user: CurrentUser,
    session: SessionDep,
    days: int | None = None,
) -> list[DailyValueResponse]:
    """Average daily price over a card's non-proxy printings."""
    return timeline_to_response(await card_sparkline(session, card_id, days))


@timeline_router.get("/collection/value/history", response_model=list[DailyValueResponse])
async def get_collection_value_history(
    user: CurrentUser,
    session: SessionDep,
    days: int | None = None,
) -> list[DailyValueResponse]:
    """Daily value of the caller's owned copies, proxies excluded."""
    return timeline_to_response(await collection_value_history(session, user.id, days))


@timeline_router.get("/decks/{deck_id}/value/history", response_model=list[DailyValueResponse])
async def get_deck_value_history(
    deck_id: PathId,
    user: CurrentUser,
    session: SessionDep,
    days: int | None = None,
) -> list[DailyValueResponse]:
    """Daily value of a deck's assigned copies, proxies excluded."""
    deck = await get_deck_for_caller(session, deck_id, user.id, user.is_admin)
    return timeline_to_response(await deck_value_history(session, deck, days))
