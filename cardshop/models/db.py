"""
SQLAlchemy ORM models for persistent storage.

Tables map one-to-one onto the shop entities: users, cards, per-condition
inventory rows, orders and their line items.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class CardCondition(str, Enum):
    """Grading label of a physical card, best first."""

    MINT = "MINT"
    NEAR_MINT = "NEAR_MINT"
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    LIGHT_PLAYED = "LIGHT_PLAYED"
    PLAYED = "PLAYED"
    POOR = "POOR"


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserDB(Base):
    """
    A shop account.

    The id is issued by the external auth provider; rows are created the
    first time a caller places an order.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role"), default=UserRole.CUSTOMER
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    orders: Mapped[list["OrderDB"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, role={self.role})>"


class CardDB(Base):
    """
    A catalog card, independent of physical condition.

    Stock and pricing live on the card's inventory rows.
    """

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    image_url: Mapped[str] = mapped_column(Text)
    rarity: Mapped[str] = mapped_column(String(50))
    set: Mapped[str] = mapped_column(String(100), index=True)
    card_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    inventory_items: Mapped[list["CardInventoryDB"]] = relationship(
        back_populates="card", order_by="CardInventoryDB.id"
    )

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name}, set={self.set})>"


class CardInventoryDB(Base):
    """
    A priced stock line for one (card, condition) pair.
    """

    __tablename__ = "card_inventory"
    __table_args__ = (
        UniqueConstraint("card_id", "condition", name="uq_card_condition"),
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_inventory_price_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("cards.id", ondelete="RESTRICT"), index=True
    )
    condition: Mapped[CardCondition] = mapped_column(SAEnum(CardCondition, name="card_condition"))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    card: Mapped["CardDB"] = relationship(back_populates="inventory_items")

    def __repr__(self) -> str:
        return f"<CardInventoryDB(card={self.card_id}, {self.condition}, qty={self.quantity})>"


class OrderDB(Base):
    """
    A placed order. Immutable once created.
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), ForeignKey("users.id"), index=True)
    order_number: Mapped[str] = mapped_column(String(64), unique=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["UserDB"] = relationship(back_populates="orders")
    order_items: Mapped[list["OrderItemDB"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", order_by="OrderItemDB.id"
    )

    def __repr__(self) -> str:
        return f"<OrderDB(number={self.order_number}, total={self.total_amount})>"


class OrderItemDB(Base):
    """
    An order line. The price is captured at purchase time and does not
    follow later inventory price changes.
    """

    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_order_item_quantity_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True
    )
    card_inventory_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("card_inventory.id", ondelete="RESTRICT"), index=True
    )
    quantity: Mapped[int] = mapped_column(Integer)
    price_at_purchase: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    order: Mapped["OrderDB"] = relationship(back_populates="order_items")
    card_inventory: Mapped["CardInventoryDB"] = relationship()

    def __repr__(self) -> str:
        return f"<OrderItemDB(inventory={self.card_inventory_id}, qty={self.quantity})>"
