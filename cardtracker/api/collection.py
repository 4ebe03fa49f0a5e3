"""
Collection API endpoints.

Read and adjust the caller's owned, wanted and proxy quantities.
All adjustments saturate into [0, INT32_MAX]; batch requests are
applied all-or-nothing.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from cardtracker.api.deps import CurrentUser, PageNumber, PathId, SessionDep, page_size_or_default
from cardtracker.api.schemas import (
    INT32_MAX,
    INT32_MIN,
    CamelModel,
    QuantitiesResponse,
    RowId,
    UserCardPage,
    quantities_to_response,
    user_card_to_response,
)
from cardtracker.db import list_user_cards
from cardtracker.services import (
    QuantityDelta,
    apply_deltas,
    bulk_apply,
    quick_add,
    remove_from_collection,
    set_absolute,
)
from cardtracker.services.validation import (
    raise_for_errors,
    require_positive,
    validate_printing_ids,
    validate_quick_add,
    validate_set_quantities,
)

router = APIRouter(prefix="/api/collection", tags=["collection"])


class SetQuantitiesRequest(CamelModel):
    quantity_owned: int = 0
    quantity_wanted: int = 0
    quantity_proxy_owned: int = 0


class DeltaRequest(CamelModel):
    card_printing_id: RowId = 0
    delta_owned: int = 0
    delta_wanted: int = 0
    delta_proxy_owned: int = 0


class QuickAddRequest(CamelModel):
    printing_id: RowId = 0
    quantity: int = 0


class QuickAddResponse(CamelModel):
    printing_id: int
    quantity_owned: int


class BulkItem(CamelModel):
    printing_id: RowId = 0
    owned_delta: int = 0
    proxy_delta: int = 0


class BulkRequest(CamelModel):
    items: list[BulkItem] = []


@router.get("", response_model=UserCardPage)
async def get_collection(
    user: CurrentUser,
    session: SessionDep,
    game: str | None = None,
    set: str | None = None,
    rarity: str | None = None,
    name: str | None = None,
    card_printing_id: Annotated[
        int | None, Query(alias="cardPrintingId", ge=INT32_MIN, le=INT32_MAX)
    ] = None,
    page: PageNumber = 1,
    page_size: Annotated[int | None, Query(alias="pageSize")] = None,
) -> UserCardPage:
    """
    List the caller's holdings.

    Rows whose counters are all zero are omitted.
    """
    size = page_size_or_default(page_size)
    rows, total = await list_user_cards(
        session,
        user.id,
        game=game,
        set_name=set,
        rarity=rarity,
        name=name,
        card_printing_id=card_printing_id,
        page=page,
        page_size=size,
    )
    return UserCardPage(
        items=[user_card_to_response(r) for r in rows],
        page=page,
        page_size=size,
        total=total,
    )


@router.put("/{printing_id}", response_model=QuantitiesResponse)
async def set_quantities(
    printing_id: PathId,
    request: SetQuantitiesRequest,
    user: CurrentUser,
    session: SessionDep,
) -> QuantitiesResponse:
    """Overwrite all three counters for one printing."""
    raise_for_errors(
        [
            *require_positive("cardPrintingId", printing_id, label="CardPrintingId"),
            *validate_set_quantities(
                request.quantity_owned, request.quantity_wanted, request.quantity_proxy_owned
            ),
        ]
    )
    row = await set_absolute(
        session,
        user.id,
        printing_id,
        request.quantity_owned,
        request.quantity_wanted,
        request.quantity_proxy_owned,
    )
    return quantities_to_response(row)


@router.post("/delta", response_model=list[QuantitiesResponse])
async def apply_collection_deltas(
    request: list[DeltaRequest],
    user: CurrentUser,
    session: SessionDep,
) -> list[QuantitiesResponse]:
    """
    Apply signed deltas to owned, wanted and proxy counters.

    One unknown printing rejects the whole batch.
    """
    raise_for_errors(validate_printing_ids("cardPrintingId", [d.card_printing_id for d in request]))
    rows = await apply_deltas(
        session,
        user.id,
        [
            QuantityDelta(
                printing_id=d.card_printing_id,
                delta_owned=d.delta_owned,
                delta_wanted=d.delta_wanted,
                delta_proxy_owned=d.delta_proxy_owned,
            )
            for d in request
        ],
    )
    return [quantities_to_response(r) for r in rows]


@router.post("/items", response_model=QuickAddResponse)
async def quick_add_item(
    request: QuickAddRequest,
    user: CurrentUser,
    session: SessionDep,
) -> QuickAddResponse:
    """Add owned copies of one printing."""
    raise_for_errors(validate_quick_add(request.printing_id, request.quantity))
    printing_id, quantity_owned = await quick_add(
        session, user.id, request.printing_id, request.quantity
    )
    return QuickAddResponse(printing_id=printing_id, quantity_owned=quantity_owned)


@router.patch("/bulk", response_model=list[QuantitiesResponse])
async def bulk_update(
    request: BulkRequest,
    user: CurrentUser,
    session: SessionDep,
) -> list[QuantitiesResponse]:
    """Apply owned/proxy deltas for many printings at once."""
    raise_for_errors(validate_printing_ids("items", [i.printing_id for i in request.items]))
    rows = await bulk_apply(
        session,
        user.id,
        [(i.printing_id, i.owned_delta, i.proxy_delta) for i in request.items],
    )
    return [quantities_to_response(r) for r in rows]


@router.delete("/{printing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_item(printing_id: PathId, user: CurrentUser, session: SessionDep) -> Response:
    """Delete the caller's row for one printing."""
    await remove_from_collection(session, user.id, printing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
