"""
Idempotent database seeding.

Called explicitly during initialization with the session to use.
Running it against an already seeded database is a no-op.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.models.db import CardDB, CardPrintingDB, UserDB

logger = logging.getLogger(__name__)

SEED_USERS: list[tuple[str, str, bool]] = [
    ("Jason", "Xercius", True),
    ("Grayson", "Astroracer", False),
    ("Perrin", "DinoRoar", False),
]

# (game, name, card_type, [(set, number, rarity, style), ...])
SEED_CARDS: list[tuple[str, str, str, list[tuple[str, str, str, str]]]] = [
    (
        "Star Wars Unlimited",
        "Disabling Fang Fighter",
        "Unit",
        [
            ("Spark of Rebellion", "162", "Common", "Standard"),
            ("Spark of Rebellion", "162", "Common", "Standard Foil"),
            ("Spark of Rebellion", "425", "Common", "Hyperspace"),
            ("Shadows of the Galaxy", "166", "Common", "Standard"),
        ],
    ),
    (
        "Star Wars Unlimited",
        "Darth Maul, Revenge At Last",
        "Unit",
        [
            ("Twilight of the Republic", "135", "Legendary", "Standard"),
            ("Twilight of the Republic", "403", "Legendary", "Hyperspace"),
        ],
    ),
    (
        "Star Wars Unlimited",
        "Battle Fury",
        "Upgrade",
        [("Legends of the Force", "141", "Common", "Standard")],
    ),
    ("Pokemon TCG", "Pikachu", "Pokemon", [("Mega Evolution", "58", "Common", "Standard")]),
    (
        "Magic: The Gathering",
        "Parallel Lives",
        "Enchantment",
        [("Marvel Eternal-Legal", "36", "Mythic", "Borderless")],
    ),
    (
        "Magic: The Gathering",
        "Lightning Bolt",
        "Instant",
        [
            ("Limited Edition Alpha", "161", "Common", "Standard"),
            ("Limited Edition Beta", "162", "Common", "Proxy"),
        ],
    ),
]


async def seed_database(session: AsyncSession) -> bool:
    """
    Populate users and a starter catalog if the database is empty.

    Returns:
        True if data was inserted, False if the database was already seeded.
    """
    existing = await session.scalar(select(func.count()).select_from(CardDB))
    if existing:
        logger.info("Database already seeded (%d cards); skipping", existing)
        return False

    for username, display_name, is_admin in SEED_USERS:
        session.add(UserDB(username=username, display_name=display_name, is_admin=is_admin))

    printing_count = 0
    for game, name, card_type, printings in SEED_CARDS:
        card = CardDB(game=game, name=name, card_type=card_type)
        for set_name, number, rarity, style in printings:
            card.printings.append(
                CardPrintingDB(set_name=set_name, number=number, rarity=rarity, style=style)
            )
            printing_count += 1
        session.add(card)

    await session.flush()
    logger.info(
        "Seeded %d users, %d cards, %d printings",
        len(SEED_USERS),
        len(SEED_CARDS),
        printing_count,
    )
    return True
