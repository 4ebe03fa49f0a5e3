"""
Request validation rules.

Pydantic only checks JSON shape and types at the HTTP boundary.
Business rules on values (positive ids, non-negative quantities,
non-blank names) live here as plain functions returning a list of
field errors, so handlers can collect everything before failing.

Field names are reported as the client spells them (camelCase).
"""

from collections.abc import Iterable
from dataclasses import dataclass

from cardtracker.models.failure import ValidationFailedError


@dataclass(frozen=True)
class FieldError:
    """One failed rule for one request field."""

    field: str
    message: str


def require_positive(field: str, value: int, label: str | None = None) -> list[FieldError]:
    if value <= 0:
        return [FieldError(field, f"{label or field} must be positive.")]
    return []


def require_non_negative(field: str, value: int) -> list[FieldError]:
    if value < 0:
        return [FieldError(field, "Quantity must be non-negative.")]
    return []


def require_not_blank(field: str, value: str | None, message: str) -> list[FieldError]:
    if value is None or not value.strip():
        return [FieldError(field, message)]
    return []


def validate_set_quantities(
    quantity_owned: int, quantity_wanted: int, quantity_proxy_owned: int
) -> list[FieldError]:
    """Absolute quantities must all be >= 0."""
    return [
        *require_non_negative("quantityOwned", quantity_owned),
        *require_non_negative("quantityWanted", quantity_wanted),
        *require_non_negative("quantityProxyOwned", quantity_proxy_owned),
    ]


def validate_printing_ids(field: str, printing_ids: Iterable[int]) -> list[FieldError]:
    """Each id in a batch must be positive; one error covers the whole batch."""
    if any(pid <= 0 for pid in printing_ids):
        return [FieldError(field, "CardPrintingId must be positive.")]
    return []


def validate_quick_add(printing_id: int, quantity: int) -> list[FieldError]:
    return [
        *require_positive("printingId", printing_id),
        *require_positive("quantity", quantity, label="Quantity"),
    ]


def validate_wishlist_upsert(card_printing_id: int, quantity_wanted: int) -> list[FieldError]:
    return [
        *require_positive("cardPrintingId", card_printing_id, label="CardPrintingId"),
        *require_non_negative("quantityWanted", quantity_wanted),
    ]


def validate_move_to_collection(card_printing_id: int, quantity: int) -> list[FieldError]:
    return [
        *require_positive("cardPrintingId", card_printing_id, label="CardPrintingId"),
        *require_positive("quantity", quantity, label="Quantity"),
    ]


def validate_create_deck(game: str | None, name: str | None) -> list[FieldError]:
    return [
        *require_not_blank("game", game, "Game is required."),
        *require_not_blank("name", name, "Name is required."),
    ]


def validate_printing(
    card_id: int, set_name: str | None, number: str | None, rarity: str | None
) -> list[FieldError]:
    return [
        *require_positive("cardId", card_id, label="CardId"),
        *require_not_blank("set", set_name, "Set is required."),
        *require_not_blank("number", number, "Number is required."),
        *require_not_blank("rarity", rarity, "Rarity is required."),
    ]


def raise_for_errors(errors: list[FieldError]) -> None:
    """
    Raise ValidationFailedError if any rule failed.

    Messages for the same field are grouped in submission order.
    """
    if not errors:
        return

    grouped: dict[str, list[str]] = {}
    for error in errors:
        grouped.setdefault(error.field, []).append(error.message)
    raise ValidationFailedError(grouped)
