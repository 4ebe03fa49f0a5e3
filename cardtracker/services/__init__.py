"""
CardTracker services.

Business logic for collections, wishlists, decks, users and prices.
"""

from cardtracker.services.adjustments import (
    QuantityDelta,
    apply_delta,
    apply_deltas,
    bulk_apply,
    bulk_set_wanted,
    ensure_another_admin_remains,
    move_to_collection,
    quick_add,
    quick_add_wanted,
    remove_from_collection,
    remove_from_wishlist,
    set_absolute,
    set_wanted,
)
from cardtracker.services.availability import calculate_availability
from cardtracker.services.decks import (
    DeckCardDelta,
    apply_deck_deltas,
    create_deck_for_user,
    deck_availability,
    delete_deck,
    get_deck_for_caller,
    update_deck,
)
from cardtracker.services.quantity_guard import (
    MAXIMUM_QUANTITY,
    MINIMUM_QUANTITY,
    clamp,
    clamp_delta,
)
from cardtracker.services.users import delete_user, update_user
from cardtracker.services.validation import FieldError, raise_for_errors
from cardtracker.services.values import (
    CollectionValue,
    DailyValue,
    PricePoint,
    PriceUpdate,
    build_timeline,
    card_sparkline,
    cents_to_price,
    collection_value,
    collection_value_history,
    daily_points,
    deck_value,
    deck_value_history,
    price_history,
    printing_series,
    refresh_prices,
    window_start,
)

__all__ = [
    "MAXIMUM_QUANTITY",
    "MINIMUM_QUANTITY",
    "CollectionValue",
    "DailyValue",
    "DeckCardDelta",
    "FieldError",
    "PricePoint",
    "PriceUpdate",
    "QuantityDelta",
    "apply_deck_deltas",
    "apply_delta",
    "apply_deltas",
    "bulk_apply",
    "bulk_set_wanted",
    "build_timeline",
    "calculate_availability",
    "card_sparkline",
    "cents_to_price",
    "clamp",
    "clamp_delta",
    "collection_value",
    "collection_value_history",
    "create_deck_for_user",
    "daily_points",
    "deck_availability",
    "deck_value",
    "deck_value_history",
    "delete_deck",
    "delete_user",
    "ensure_another_admin_remains",
    "get_deck_for_caller",
    "move_to_collection",
    "price_history",
    "printing_series",
    "quick_add",
    "quick_add_wanted",
    "raise_for_errors",
    "refresh_prices",
    "remove_from_collection",
    "remove_from_wishlist",
    "set_absolute",
    "set_wanted",
    "update_deck",
    "update_user",
    "window_start",
]
