"""
SQLAlchemy ORM models for persistent storage.

Quantities are plain integers kept within [0, INT32_MAX] by the
quantity guard; the database itself does not enforce the range.
"""

from datetime import UTC, datetime
from enum import IntEnum

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserDB(Base):
    """
    An application user.

    Administrators are users with is_admin set; at least one must exist.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), index=True)
    display_name: Mapped[str] = mapped_column(String(255))
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    created_utc: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    user_cards: Mapped[list["UserCardDB"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    decks: Mapped[list["DeckDB"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, username={self.username}, admin={self.is_admin})>"


class CardDB(Base):
    """An abstract card, independent of any particular printing."""

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    game: Mapped[str] = mapped_column(String(100), index=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    card_type: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    details_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    printings: Mapped[list["CardPrintingDB"]] = relationship(
        back_populates="card", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name}, game={self.game})>"


class CardPrintingDB(Base):
    """
    A specific edition of a card.

    Set, number, rarity and style together distinguish printings
    of the same card.
    """

    __tablename__ = "card_printings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    set_name: Mapped[str] = mapped_column("set", String(255), index=True)
    number: Mapped[str] = mapped_column(String(50))
    rarity: Mapped[str] = mapped_column(String(50))
    style: Mapped[str] = mapped_column(String(100), default="Standard")
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    card: Mapped["CardDB"] = relationship(back_populates="printings")

    def __repr__(self) -> str:
        return f"<CardPrintingDB(id={self.id}, set={self.set_name}, number={self.number})>"


class UserCardDB(Base):
    """
    Quantities a user holds of one printing.

    One row per (user, printing). A row with all counters at zero
    means "no holdings" and is hidden from listings.
    """

    __tablename__ = "user_cards"
    __table_args__ = (
        UniqueConstraint("user_id", "card_printing_id", name="uq_user_card_printing"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    card_printing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("card_printings.id", ondelete="RESTRICT"), index=True
    )
    quantity_owned: Mapped[int] = mapped_column(Integer, default=0)
    quantity_wanted: Mapped[int] = mapped_column(Integer, default=0)
    quantity_proxy_owned: Mapped[int] = mapped_column(Integer, default=0)

    user: Mapped["UserDB"] = relationship(back_populates="user_cards")
    printing: Mapped["CardPrintingDB"] = relationship()

    @property
    def is_empty(self) -> bool:
        return (
            self.quantity_owned == 0
            and self.quantity_wanted == 0
            and self.quantity_proxy_owned == 0
        )

    def __repr__(self) -> str:
        return (
            f"<UserCardDB(user={self.user_id}, printing={self.card_printing_id}, "
            f"owned={self.quantity_owned}, wanted={self.quantity_wanted}, "
            f"proxy={self.quantity_proxy_owned})>"
        )


class DeckDB(Base):
    """A user's deck for a single game. Names are unique per user."""

    __tablename__ = "decks"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_deck_user_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    game: Mapped[str] = mapped_column(String(100))
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_utc: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    user: Mapped["UserDB"] = relationship(back_populates="decks")
    cards: Mapped[list["DeckCardDB"]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name}, game={self.game})>"


class DeckCardDB(Base):
    """Quantities of one printing assigned to a deck."""

    __tablename__ = "deck_cards"
    __table_args__ = (
        UniqueConstraint("deck_id", "card_printing_id", name="uq_deck_card_printing"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("decks.id", ondelete="CASCADE"), index=True
    )
    card_printing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("card_printings.id", ondelete="RESTRICT"), index=True
    )
    quantity_in_deck: Mapped[int] = mapped_column(Integer, default=0)
    quantity_idea: Mapped[int] = mapped_column(Integer, default=0)
    quantity_acquire: Mapped[int] = mapped_column(Integer, default=0)
    quantity_proxy: Mapped[int] = mapped_column(Integer, default=0)

    deck: Mapped["DeckDB"] = relationship(back_populates="cards")
    printing: Mapped["CardPrintingDB"] = relationship()

    @property
    def is_empty(self) -> bool:
        return (
            self.quantity_in_deck == 0
            and self.quantity_idea == 0
            and self.quantity_acquire == 0
            and self.quantity_proxy == 0
        )


class ValueScope(IntEnum):
    """What a value history point is measuring."""

    CARD_PRINTING = 1
    DECK = 2
    COLLECTION = 3


class ValueHistoryDB(Base):
    """
    A recorded price point.

    Prices are stored in integer cents. Several points may share a
    calendar day; readers pick the latest by as_of_utc.
    """

    __tablename__ = "value_history"
    __table_args__ = (Index("ix_value_scope_asof", "scope_type", "scope_id", "as_of_utc"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    scope_type: Mapped[int] = mapped_column(Integer, default=ValueScope.CARD_PRINTING)
    scope_id: Mapped[int] = mapped_column(Integer)
    price_cents: Mapped[int] = mapped_column(BigInteger)
    as_of_utc: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    source: Mapped[str] = mapped_column(String(100), default="manual")

    def __repr__(self) -> str:
        return (
            f"<ValueHistoryDB(scope={self.scope_type}:{self.scope_id}, "
            f"cents={self.price_cents}, at={self.as_of_utc})>"
        )
