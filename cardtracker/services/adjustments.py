"""
Collection and wishlist quantity adjustments.

Each operation is a single read-modify-write against the user's
quantities rows, executed inside the caller's transaction:

1. Check that every referenced printing exists (NotFound otherwise,
   before anything is written).
2. Load the rows FOR UPDATE, or synthesize zero rows for new keys.
3. Recompute every touched counter through the quantity guard.
4. Flush all counters of a row together.

A synthesized row whose counters are all still zero is never
inserted. Existing rows that drop to zero are kept, and listings
treat them as "no holdings".

Batches are all-or-nothing: one unknown printing fails the whole
batch and nothing is flushed.

This module also owns the last-administrator guard, which protects
the one piece of global state the quantity endpoints share with
admin user management.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.db.operations import (
    count_admins,
    existing_printing_ids,
    get_user_card,
    get_user_cards_by_printing,
)
from cardtracker.models.db import UserCardDB
from cardtracker.models.failure import LastAdministratorError, NotFoundError
from cardtracker.models.quantities import MoveResult
from cardtracker.services.availability import calculate_availability
from cardtracker.services.quantity_guard import clamp, clamp_delta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuantityDelta:
    """Signed change to apply to one printing's counters."""

    printing_id: int
    delta_owned: int = 0
    delta_wanted: int = 0
    delta_proxy_owned: int = 0


def _printing_not_found(printing_id: int) -> NotFoundError:
    return NotFoundError(f"Card printing {printing_id} was not found.")


def _user_card_not_found(user_id: int, printing_id: int) -> NotFoundError:
    return NotFoundError(
        f"User card for user {user_id} and card printing {printing_id} was not found."
    )


async def _require_printings(session: AsyncSession, printing_ids: Iterable[int]) -> None:
    ids = set(printing_ids)
    missing = sorted(ids - await existing_printing_ids(session, ids))
    if missing:
        logger.warning("Rejected adjustment for unknown printings %s", missing)
        raise _printing_not_found(missing[0])


async def _load_rows(
    session: AsyncSession, user_id: int, printing_ids: Iterable[int]
) -> tuple[dict[int, UserCardDB], set[int]]:
    """
    Rows for every requested printing, keyed by printing id.

    Missing rows are synthesized with zero counters and NOT added to
    the session; their ids are returned so _persist can decide.
    """
    ids = set(printing_ids)
    rows = await get_user_cards_by_printing(session, user_id, ids, for_update=True)
    new_ids: set[int] = set()
    for printing_id in ids - rows.keys():
        rows[printing_id] = UserCardDB(
            user_id=user_id,
            card_printing_id=printing_id,
            quantity_owned=0,
            quantity_wanted=0,
            quantity_proxy_owned=0,
        )
        new_ids.add(printing_id)
    return rows, new_ids


async def _persist(session: AsyncSession, rows: dict[int, UserCardDB], new_ids: set[int]) -> None:
    for printing_id in new_ids:
        row = rows[printing_id]
        if not row.is_empty:
            session.add(row)
    await session.flush()


# --- Delta operations ---


async def apply_deltas(
    session: AsyncSession, user_id: int, deltas: Sequence[QuantityDelta]
) -> list[UserCardDB]:
    """
    Apply a batch of signed deltas, all-or-nothing.

    Repeated printings in one batch accumulate on the same row.

    Returns:
        The resulting row for each delta, in request order.
    """
    if not deltas:
        return []

    ids = {d.printing_id for d in deltas}
    await _require_printings(session, ids)
    rows, new_ids = await _load_rows(session, user_id, ids)

    results: list[UserCardDB] = []
    for delta in deltas:
        row = rows[delta.printing_id]
        row.quantity_owned = clamp_delta(row.quantity_owned, delta.delta_owned)
        row.quantity_wanted = clamp_delta(row.quantity_wanted, delta.delta_wanted)
        row.quantity_proxy_owned = clamp_delta(row.quantity_proxy_owned, delta.delta_proxy_owned)
        results.append(row)

    await _persist(session, rows, new_ids)
    logger.debug("Applied %d deltas for user %d", len(deltas), user_id)
    return results


async def apply_delta(
    session: AsyncSession,
    user_id: int,
    printing_id: int,
    delta_owned: int = 0,
    delta_wanted: int = 0,
    delta_proxy_owned: int = 0,
) -> UserCardDB:
    """Apply one signed delta to (user, printing)."""
    delta = QuantityDelta(printing_id, delta_owned, delta_wanted, delta_proxy_owned)
    (row,) = await apply_deltas(session, user_id, [delta])
    return row


async def bulk_apply(
    session: AsyncSession, user_id: int, items: Sequence[tuple[int, int, int]]
) -> list[UserCardDB]:
    """
    Apply (printing_id, owned_delta, proxy_delta) items as one batch.

    Wanted quantities are untouched. All-or-nothing like apply_deltas.
    """
    deltas = [
        QuantityDelta(printing_id, delta_owned=owned, delta_proxy_owned=proxy)
        for printing_id, owned, proxy in items
    ]
    return await apply_deltas(session, user_id, deltas)


async def quick_add(
    session: AsyncSession, user_id: int, printing_id: int, quantity: int
) -> tuple[int, int]:
    """Add owned copies. Returns (printing_id, quantity_owned)."""
    row = await apply_delta(session, user_id, printing_id, delta_owned=quantity)
    return printing_id, row.quantity_owned


async def quick_add_wanted(
    session: AsyncSession, user_id: int, printing_id: int, quantity: int
) -> tuple[int, int]:
    """Add wanted copies. Returns (printing_id, quantity_wanted)."""
    row = await apply_delta(session, user_id, printing_id, delta_wanted=quantity)
    return printing_id, row.quantity_wanted


# --- Absolute operations ---


async def set_absolute(
    session: AsyncSession,
    user_id: int,
    printing_id: int,
    quantity_owned: int,
    quantity_wanted: int,
    quantity_proxy_owned: int,
) -> UserCardDB:
    """
    Overwrite all three counters of (user, printing).

    Inputs are validated non-negative upstream; clamp only caps them.
    """
    await _require_printings(session, [printing_id])
    rows, new_ids = await _load_rows(session, user_id, [printing_id])

    row = rows[printing_id]
    row.quantity_owned = clamp(quantity_owned)
    row.quantity_wanted = clamp(quantity_wanted)
    row.quantity_proxy_owned = clamp(quantity_proxy_owned)

    await _persist(session, rows, new_ids)
    return row


async def bulk_set_wanted(
    session: AsyncSession, user_id: int, items: Sequence[tuple[int, int]]
) -> list[UserCardDB]:
    """Overwrite wanted quantities for (printing_id, quantity_wanted) items, all-or-nothing."""
    if not items:
        return []

    ids = {printing_id for printing_id, _ in items}
    await _require_printings(session, ids)
    rows, new_ids = await _load_rows(session, user_id, ids)

    results = []
    for printing_id, quantity_wanted in items:
        row = rows[printing_id]
        row.quantity_wanted = clamp(quantity_wanted)
        results.append(row)

    await _persist(session, rows, new_ids)
    return results


async def set_wanted(
    session: AsyncSession, user_id: int, printing_id: int, quantity_wanted: int
) -> UserCardDB:
    (row,) = await bulk_set_wanted(session, user_id, [(printing_id, quantity_wanted)])
    return row


# --- Wishlist → collection ---


async def move_to_collection(
    session: AsyncSession,
    user_id: int,
    printing_id: int,
    quantity: int,
    use_proxy: bool = False,
) -> MoveResult:
    """
    Move wanted copies into owned (or proxy-owned) copies.

    Wanted floors at zero when quantity exceeds it; the full quantity
    is still added to the collection. This never fails for lack of
    wanted copies.
    """
    await _require_printings(session, [printing_id])
    rows, new_ids = await _load_rows(session, user_id, [printing_id])

    row = rows[printing_id]
    row.quantity_wanted = clamp_delta(row.quantity_wanted, -quantity)
    if use_proxy:
        row.quantity_proxy_owned = clamp_delta(row.quantity_proxy_owned, quantity)
    else:
        row.quantity_owned = clamp_delta(row.quantity_owned, quantity)

    await _persist(session, rows, new_ids)

    availability, availability_with_proxies = calculate_availability(
        row.quantity_owned, row.quantity_proxy_owned
    )
    logger.debug(
        "Moved %d of printing %d to collection for user %d (proxy=%s)",
        quantity,
        printing_id,
        user_id,
        use_proxy,
    )
    return MoveResult(
        printing_id=printing_id,
        wanted_after=row.quantity_wanted,
        owned_after=row.quantity_owned,
        proxy_after=row.quantity_proxy_owned,
        availability=availability,
        availability_with_proxies=availability_with_proxies,
    )


# --- Removal ---


async def remove_from_collection(session: AsyncSession, user_id: int, printing_id: int) -> None:
    """Delete the holdings row for (user, printing)."""
    row = await get_user_card(session, user_id, printing_id, for_update=True)
    if row is None:
        raise _user_card_not_found(user_id, printing_id)
    await session.delete(row)
    await session.flush()


async def remove_from_wishlist(session: AsyncSession, user_id: int, printing_id: int) -> None:
    """Zero the wanted quantity; drop the row if nothing else is held."""
    row = await get_user_card(session, user_id, printing_id, for_update=True)
    if row is None:
        raise _user_card_not_found(user_id, printing_id)

    row.quantity_wanted = 0
    if row.is_empty:
        await session.delete(row)
    await session.flush()


# --- Administrator guard ---


async def ensure_another_admin_remains(session: AsyncSession, removing_admin: bool) -> None:
    """
    Refuse to remove the last administrator.

    Must run inside the same transaction as the delete/demotion it
    protects. The admin rows are locked while counting, so a second
    concurrent removal blocks until this transaction finishes and then
    sees the reduced count.

    Raises:
        LastAdministratorError: if removing_admin and at most one admin exists.
    """
    if not removing_admin:
        return

    admin_count = await count_admins(session, lock=True)
    if admin_count <= 1:
        logger.warning("Refused to remove the last administrator")
        raise LastAdministratorError()
