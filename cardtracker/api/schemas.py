"""
Shared request/response models.

JSON bodies use camelCase keys; Python attributes stay snake_case.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cardtracker.models.db import CardPrintingDB, UserCardDB

# Row ids and counters are 32-bit integer columns
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

RowId = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PrintingResponse(CamelModel):
    """A printing with the card it belongs to."""

    id: int
    card_id: int
    card_name: str
    game: str
    set: str
    number: str
    rarity: str
    style: str
    image_url: str | None = None


class QuantitiesResponse(CamelModel):
    """Counters of one holdings row."""

    card_printing_id: int
    quantity_owned: int
    quantity_wanted: int
    quantity_proxy_owned: int


class UserCardItemResponse(QuantitiesResponse):
    """A holdings row with its printing and card."""

    card_id: int
    card_name: str
    game: str
    set: str
    number: str
    rarity: str
    style: str
    image_url: str | None = None


class UserCardPage(CamelModel):
    items: list[UserCardItemResponse]
    page: int
    page_size: int
    total: int


def printing_to_response(printing: CardPrintingDB) -> PrintingResponse:
    return PrintingResponse(
        id=printing.id,
        card_id=printing.card_id,
        card_name=printing.card.name,
        game=printing.card.game,
        set=printing.set_name,
        number=printing.number,
        rarity=printing.rarity,
        style=printing.style,
        image_url=printing.image_url,
    )


def quantities_to_response(row: UserCardDB) -> QuantitiesResponse:
    return QuantitiesResponse(
        card_printing_id=row.card_printing_id,
        quantity_owned=row.quantity_owned,
        quantity_wanted=row.quantity_wanted,
        quantity_proxy_owned=row.quantity_proxy_owned,
    )


def user_card_to_response(row: UserCardDB) -> UserCardItemResponse:
    """Map a holdings row; row.printing and its card must be loaded."""
    printing = row.printing
    return UserCardItemResponse(
        card_printing_id=row.card_printing_id,
        quantity_owned=row.quantity_owned,
        quantity_wanted=row.quantity_wanted,
        quantity_proxy_owned=row.quantity_proxy_owned,
        card_id=printing.card_id,
        card_name=printing.card.name,
        game=printing.card.game,
        set=printing.set_name,
        number=printing.number,
        rarity=printing.rarity,
        style=printing.style,
        image_url=printing.image_url,
    )
