from dataclasses import dataclass


@dataclass(frozen=True)
class MoveResult:
    """Counters after moving wanted copies into the collection."""

    printing_id: int
    wanted_after: int
    owned_after: int
    proxy_after: int
    availability: int
    availability_with_proxies: int


@dataclass(frozen=True)
class DeckCardAvailability:
    """How many copies of a printing remain free once a deck claims its share."""

    printing_id: int
    owned: int
    proxy: int
    assigned: int
    available: int
    available_with_proxies: int
