"""
Card catalog endpoints.

Reading the catalog needs no caller identity; creating cards and
printings is admin-only.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status
from pydantic import Field

from cardtracker.api.deps import (
    AdminUser,
    PageNumber,
    PathId,
    SessionDep,
    page_size_or_default,
    split_csv,
)
from cardtracker.api.schemas import CamelModel, PrintingResponse, RowId, printing_to_response
from cardtracker.db import (
    create_card,
    get_card,
    get_printing,
    printing_facet_values,
    printing_games,
    search_printings,
    upsert_printing,
)
from cardtracker.models.db import CardDB, CardPrintingDB
from cardtracker.models.failure import NotFoundError
from cardtracker.services.validation import (
    raise_for_errors,
    require_not_blank,
    validate_printing,
)

router = APIRouter(prefix="/api", tags=["cards"])


class PrintingPage(CamelModel):
    items: list[PrintingResponse]
    page: int
    page_size: int
    total: int


class CardPrintingSummary(CamelModel):
    id: int
    set: str
    number: str
    rarity: str
    style: str
    image_url: str | None = None


class CardDetailResponse(CamelModel):
    id: int
    name: str
    game: str
    card_type: str
    description: str | None = None
    printings: list[CardPrintingSummary]


class SetFacetsResponse(CamelModel):
    game: str | None = None
    sets: list[str]


class RarityFacetsResponse(CamelModel):
    game: str | None = None
    rarities: list[str]


class CreateCardRequest(CamelModel):
    game: str | None = Field(default=None, max_length=100)
    name: str | None = Field(default=None, max_length=255)
    card_type: str | None = Field(default=None, max_length=100)
    description: str | None = None


class UpsertPrintingRequest(CamelModel):
    """Create a printing, or update one when `id` is given."""

    id: RowId | None = None
    card_id: RowId = 0
    set: str | None = Field(default=None, max_length=255)
    number: str | None = Field(default=None, max_length=50)
    rarity: str | None = Field(default=None, max_length=50)
    style: str | None = Field(default=None, max_length=100)
    image_url: str | None = None


def card_to_response(card: CardDB) -> CardDetailResponse:
    return CardDetailResponse(
        id=card.id,
        name=card.name,
        game=card.game,
        card_type=card.card_type,
        description=card.description,
        printings=[
            CardPrintingSummary(
                id=p.id,
                set=p.set_name,
                number=p.number,
                rarity=p.rarity,
                style=p.style,
                image_url=p.image_url,
            )
            for p in sorted(card.printings, key=lambda p: (p.set_name, p.number, p.id))
        ],
    )


@router.get("/cards/printings", response_model=PrintingPage)
async def list_printings(
    session: SessionDep,
    game: str | None = None,
    set: str | None = None,
    rarity: str | None = None,
    name: str | None = None,
    page: PageNumber = 1,
    page_size: Annotated[int | None, Query(alias="pageSize")] = None,
) -> PrintingPage:
    """
    Search printings.

    game, set and rarity match exactly; name matches any part of the
    card name, ignoring case.
    """
    size = page_size_or_default(page_size)
    printings, total = await search_printings(
        session,
        game=game,
        set_name=set,
        rarity=rarity,
        name=name,
        page=page,
        page_size=size,
    )
    return PrintingPage(
        items=[printing_to_response(p) for p in printings],
        page=page,
        page_size=size,
        total=total,
    )


@router.get("/card/{card_id}", response_model=CardDetailResponse)
async def get_card_detail(card_id: PathId, session: SessionDep) -> CardDetailResponse:
    """Return a card with all of its printings."""
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError(f"Card {card_id} was not found.")
    return card_to_response(card)


@router.post("/card", response_model=CardDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_card_route(
    request: CreateCardRequest,
    response: Response,
    _admin: AdminUser,
    session: SessionDep,
) -> CardDetailResponse:
    """Add a card to the catalog (admin only)."""
    raise_for_errors(
        [
            *require_not_blank("game", request.game, "Game is required."),
            *require_not_blank("name", request.name, "Name is required."),
            *require_not_blank("cardType", request.card_type, "Card type is required."),
        ]
    )
    card = await create_card(
        session,
        game=(request.game or "").strip(),
        name=(request.name or "").strip(),
        card_type=(request.card_type or "").strip(),
        description=request.description,
    )
    response.headers["Location"] = f"/api/card/{card.id}"
    return CardDetailResponse(
        id=card.id,
        name=card.name,
        game=card.game,
        card_type=card.card_type,
        description=card.description,
        printings=[],
    )


@router.post("/card/printing", response_model=PrintingResponse)
async def upsert_printing_route(
    request: UpsertPrintingRequest,
    response: Response,
    _admin: AdminUser,
    session: SessionDep,
) -> PrintingResponse:
    """
    Create or update a printing (admin only).

    Returns 201 when a new printing was created, 200 on update.
    """
    raise_for_errors(validate_printing(request.card_id, request.set, request.number, request.rarity))

    card = await get_card(session, request.card_id)
    if card is None:
        raise NotFoundError(f"Card {request.card_id} was not found.")
    if request.id is not None and await get_printing(session, request.id) is None:
        raise NotFoundError(f"Card printing {request.id} was not found.")

    printing, created = await upsert_printing(
        session,
        card_id=request.card_id,
        set_name=(request.set or "").strip(),
        number=(request.number or "").strip(),
        rarity=(request.rarity or "").strip(),
        style=(request.style or "").strip() or "Standard",
        image_url=request.image_url,
        printing_id=request.id,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED

    return PrintingResponse(
        id=printing.id,
        card_id=card.id,
        card_name=card.name,
        game=card.game,
        set=printing.set_name,
        number=printing.number,
        rarity=printing.rarity,
        style=printing.style,
        image_url=printing.image_url,
    )


@router.get("/cards/facets/games", response_model=list[str])
async def get_game_facets(session: SessionDep) -> list[str]:
    """Games that have printings in the catalog."""
    return await printing_games(session)


@router.get(
    "/cards/facets/sets", response_model=SetFacetsResponse, response_model_exclude_none=True
)
async def get_set_facets(session: SessionDep, game: str | None = None) -> SetFacetsResponse:
    """
    Distinct set names, optionally limited to a comma-separated list of games.

    `game` is echoed back only when exactly one game was given.
    """
    games = split_csv(game)
    sets = await printing_facet_values(session, CardPrintingDB.set_name, games)
    return SetFacetsResponse(game=games[0] if len(games) == 1 else None, sets=sets)


@router.get(
    "/cards/facets/rarities",
    response_model=RarityFacetsResponse,
    response_model_exclude_none=True,
)
async def get_rarity_facets(session: SessionDep, game: str | None = None) -> RarityFacetsResponse:
    """Distinct rarities, with the same game filter as the set facets."""
    games = split_csv(game)
    rarities = await printing_facet_values(session, CardPrintingDB.rarity, games)
    return RarityFacetsResponse(game=games[0] if len(games) == 1 else None, rarities=rarities)
