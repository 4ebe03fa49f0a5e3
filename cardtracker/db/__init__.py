from cardtracker.db.database import get_session, init_db
from cardtracker.db.operations import (
    add_value_point,
    count_admins,
    create_card,
    create_deck,
    create_user,
    deck_name_taken,
    existing_printing_ids,
    get_card,
    get_deck,
    get_deck_cards,
    get_printing,
    get_printings_with_cards,
    get_user,
    get_user_card,
    get_user_cards_by_printing,
    get_user_with_holdings,
    get_value_series,
    get_values_since,
    latest_prices,
    list_decks,
    list_user_cards,
    list_users,
    lock_admins,
    printing_exists,
    printing_facet_values,
    printing_games,
    search_printings,
    upsert_printing,
)
from cardtracker.db.seed import seed_database

__all__ = [
    "add_value_point",
    "count_admins",
    "create_card",
    "create_deck",
    "create_user",
    "deck_name_taken",
    "existing_printing_ids",
    "get_card",
    "get_deck",
    "get_deck_cards",
    "get_printing",
    "get_printings_with_cards",
    "get_session",
    "get_user",
    "get_user_card",
    "get_user_cards_by_printing",
    "get_user_with_holdings",
    "get_value_series",
    "get_values_since",
    "init_db",
    "latest_prices",
    "list_decks",
    "list_user_cards",
    "list_users",
    "lock_admins",
    "printing_exists",
    "printing_facet_values",
    "printing_games",
    "search_printings",
    "seed_database",
    "upsert_printing",
]
