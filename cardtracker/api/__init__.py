from cardtracker.api.admin_users import router as admin_users_router
from cardtracker.api.cards import router as cards_router
from cardtracker.api.collection import router as collection_router
from cardtracker.api.decks import router as decks_router
from cardtracker.api.health import router as health_router
from cardtracker.api.prices import router as prices_router
from cardtracker.api.prices import timeline_router
from cardtracker.api.users import router as users_router
from cardtracker.api.values import router as values_router
from cardtracker.api.wishlist import router as wishlist_router

__all__ = [
    "admin_users_router",
    "cards_router",
    "collection_router",
    "decks_router",
    "health_router",
    "prices_router",
    "timeline_router",
    "users_router",
    "values_router",
    "wishlist_router",
]
