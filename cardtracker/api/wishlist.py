"""
Wishlist API endpoints.

The wishlist is the set of the caller's rows with a positive wanted
quantity. Moving copies to the collection floors wanted at zero and
always adds the full quantity to owned (or proxy) copies.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from cardtracker.api.deps import CurrentUser, PageNumber, PathId, SessionDep, page_size_or_default
from cardtracker.api.schemas import (
    CamelModel,
    QuantitiesResponse,
    RowId,
    UserCardPage,
    quantities_to_response,
    user_card_to_response,
)
from cardtracker.db import list_user_cards
from cardtracker.models.quantities import MoveResult
from cardtracker.services import (
    bulk_set_wanted,
    move_to_collection,
    quick_add_wanted,
    remove_from_wishlist,
    set_wanted,
)
from cardtracker.services.validation import (
    FieldError,
    raise_for_errors,
    validate_move_to_collection,
    validate_quick_add,
    validate_wishlist_upsert,
)

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


class WishlistUpsertRequest(CamelModel):
    card_printing_id: RowId = 0
    quantity_wanted: int = 0


class QuickAddRequest(CamelModel):
    printing_id: RowId = 0
    quantity: int = 0


class QuickAddWantedResponse(CamelModel):
    printing_id: int
    quantity_wanted: int


class MoveToCollectionRequest(CamelModel):
    card_printing_id: RowId = 0
    quantity: int = 0
    use_proxy: bool = False


class MoveToCollectionResponse(CamelModel):
    printing_id: int
    wanted_after: int
    owned_after: int
    proxy_after: int
    availability: int
    availability_with_proxies: int


def move_result_to_response(result: MoveResult) -> MoveToCollectionResponse:
    return MoveToCollectionResponse(
        printing_id=result.printing_id,
        wanted_after=result.wanted_after,
        owned_after=result.owned_after,
        proxy_after=result.proxy_after,
        availability=result.availability,
        availability_with_proxies=result.availability_with_proxies,
    )


@router.get("", response_model=UserCardPage)
async def get_wishlist(
    user: CurrentUser,
    session: SessionDep,
    game: str | None = None,
    set: str | None = None,
    rarity: str | None = None,
    name: str | None = None,
    page: PageNumber = 1,
    page_size: Annotated[int | None, Query(alias="pageSize")] = None,
) -> UserCardPage:
    """List the caller's rows with quantityWanted > 0."""
    size = page_size_or_default(page_size)
    rows, total = await list_user_cards(
        session,
        user.id,
        wanted_only=True,
        game=game,
        set_name=set,
        rarity=rarity,
        name=name,
        page=page,
        page_size=size,
    )
    return UserCardPage(
        items=[user_card_to_response(r) for r in rows],
        page=page,
        page_size=size,
        total=total,
    )


@router.post("", response_model=QuantitiesResponse)
async def upsert_wishlist_item(
    request: WishlistUpsertRequest,
    user: CurrentUser,
    session: SessionDep,
) -> QuantitiesResponse:
    """Set the wanted quantity for one printing."""
    raise_for_errors(validate_wishlist_upsert(request.card_printing_id, request.quantity_wanted))
    row = await set_wanted(session, user.id, request.card_printing_id, request.quantity_wanted)
    return quantities_to_response(row)


@router.put("", response_model=list[QuantitiesResponse])
async def bulk_set_wishlist(
    request: list[WishlistUpsertRequest],
    user: CurrentUser,
    session: SessionDep,
) -> list[QuantitiesResponse]:
    """Set wanted quantities for many printings, all-or-nothing."""
    errors: list[FieldError] = []
    for item in request:
        errors += validate_wishlist_upsert(item.card_printing_id, item.quantity_wanted)
    raise_for_errors(errors)

    rows = await bulk_set_wanted(
        session, user.id, [(i.card_printing_id, i.quantity_wanted) for i in request]
    )
    return [quantities_to_response(r) for r in rows]


@router.post("/items", response_model=QuickAddWantedResponse)
async def quick_add_wishlist_item(
    request: QuickAddRequest,
    user: CurrentUser,
    session: SessionDep,
) -> QuickAddWantedResponse:
    """Add wanted copies of one printing."""
    raise_for_errors(validate_quick_add(request.printing_id, request.quantity))
    printing_id, quantity_wanted = await quick_add_wanted(
        session, user.id, request.printing_id, request.quantity
    )
    return QuickAddWantedResponse(printing_id=printing_id, quantity_wanted=quantity_wanted)


@router.post("/move-to-collection", response_model=MoveToCollectionResponse)
async def move_wishlist_to_collection(
    request: MoveToCollectionRequest,
    user: CurrentUser,
    session: SessionDep,
) -> MoveToCollectionResponse:
    """
    Move wanted copies into the collection.

    With useProxy the copies land in proxy-owned instead of owned.
    """
    raise_for_errors(validate_move_to_collection(request.card_printing_id, request.quantity))
    result = await move_to_collection(
        session,
        user.id,
        request.card_printing_id,
        request.quantity,
        use_proxy=request.use_proxy,
    )
    return move_result_to_response(result)


@router.delete("/{printing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_wishlist_item(printing_id: PathId, user: CurrentUser, session: SessionDep) -> Response:
    """Zero the wanted quantity for one printing."""
    await remove_from_wishlist(session, user.id, printing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
