"""
Database CRUD operations.

Provides async functions for reading the catalog, managing cards and
inventory rows, and reading users and orders. Business rules (ownership,
stock checks, delete guards) live in the services; these functions only
talk to the database.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cardshop.models.catalog import CardFilter
from cardshop.models.db import (
    CardCondition,
    CardDB,
    CardInventoryDB,
    OrderDB,
    OrderItemDB,
    UserDB,
)
from cardshop.models.order import Caller

# Loader options for an order with every line's inventory row and card
_ORDER_DETAIL = (
    selectinload(OrderDB.order_items)
    .selectinload(OrderItemDB.card_inventory)
    .selectinload(CardInventoryDB.card)
)

# --- Catalog Operations ---


async def get_card(session: AsyncSession, card_id: str) -> CardDB | None:
    """
    Get a card with all its inventory rows.

    Returns None if no card has this id.
    """
    result = await session.execute(
        select(CardDB)
        .where(CardDB.id == card_id)
        .options(selectinload(CardDB.inventory_items))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_inventory_for_card(session: AsyncSession, card_id: str) -> list[CardInventoryDB]:
    """Get a card's inventory rows, cheapest first."""
    result = await session.execute(
        select(CardInventoryDB)
        .where(CardInventoryDB.card_id == card_id)
        .options(selectinload(CardInventoryDB.card))
        .order_by(CardInventoryDB.price.asc(), CardInventoryDB.id.asc())
    )
    return list(result.scalars().all())


async def find_cards(session: AsyncSession, card_filter: CardFilter | None = None) -> list[CardDB]:
    """
    Get every card matching a filter, with inventory rows attached.

    Inventory-level predicates are applied jointly to a single row
    (EXISTS over the card's rows), not independently per predicate.
    Results are ordered by card id; callers sort further.
    """
    stmt = select(CardDB).options(selectinload(CardDB.inventory_items)).order_by(CardDB.id)

    if card_filter is not None:
        if card_filter.name:
            stmt = stmt.where(CardDB.name.icontains(card_filter.name, autoescape=True))
        if card_filter.set:
            stmt = stmt.where(func.lower(CardDB.set) == card_filter.set.lower())
        if card_filter.rarity:
            stmt = stmt.where(CardDB.rarity.icontains(card_filter.rarity, autoescape=True))

        if card_filter.has_inventory_predicate():
            row_conditions = []
            if card_filter.condition is not None:
                row_conditions.append(CardInventoryDB.condition == card_filter.condition)
            if card_filter.min_price is not None:
                row_conditions.append(CardInventoryDB.price >= card_filter.min_price)
            if card_filter.max_price is not None:
                row_conditions.append(CardInventoryDB.price <= card_filter.max_price)
            if card_filter.in_stock:
                row_conditions.append(CardInventoryDB.quantity > 0)
            criterion = and_(*row_conditions) if row_conditions else None
            stmt = stmt.where(CardDB.inventory_items.any(criterion))

    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_card(session: AsyncSession, **fields: Any) -> CardDB:
    """
    Create a new card.

    Raises IntegrityError if the id is taken.
    """
    card = CardDB(**fields)
    session.add(card)
    await session.flush()
    await session.refresh(card, ["inventory_items"])
    return card


async def update_card(session: AsyncSession, card_id: str, **fields: Any) -> CardDB | None:
    """
    Update the given fields of a card.

    Returns None if the card does not exist.
    """
    card = await get_card(session, card_id)
    if card is None:
        return None

    for name, value in fields.items():
        setattr(card, name, value)
    await session.flush()
    return await get_card(session, card_id)


async def count_inventory_rows(session: AsyncSession, card_id: str) -> int:
    result = await session.execute(
        select(func.count(CardInventoryDB.id)).where(CardInventoryDB.card_id == card_id)
    )
    return int(result.scalar_one())


async def delete_card(session: AsyncSession, card_id: str) -> bool:
    """
    Delete a card.

    Returns True if deleted, False if not found.
    """
    card = await session.get(CardDB, card_id)
    if card is None:
        return False

    await session.delete(card)
    await session.flush()
    return True


async def get_inventory_row(
    session: AsyncSession, card_id: str, condition: CardCondition
) -> CardInventoryDB | None:
    """Get the inventory row for a (card, condition) pair."""
    result = await session.execute(
        select(CardInventoryDB).where(
            CardInventoryDB.card_id == card_id,
            CardInventoryDB.condition == condition,
        )
    )
    return result.scalar_one_or_none()


async def upsert_inventory(
    session: AsyncSession,
    card_id: str,
    condition: CardCondition,
    price: Decimal,
    quantity: int,
) -> CardInventoryDB:
    """
    Insert or update the inventory row for a (card, condition) pair.

    If the row exists, its price and quantity are replaced.
    Otherwise a new row is created.
    """
    existing = await get_inventory_row(session, card_id, condition)

    if existing:
        existing.price = price
        existing.quantity = quantity
        await session.flush()
        await session.refresh(existing, ["card"])
        return existing

    row = CardInventoryDB(card_id=card_id, condition=condition, price=price, quantity=quantity)
    session.add(row)
    await session.flush()
    await session.refresh(row, ["card"])
    return row


async def count_order_items_for_inventory(session: AsyncSession, inventory_id: int) -> int:
    result = await session.execute(
        select(func.count(OrderItemDB.id)).where(OrderItemDB.card_inventory_id == inventory_id)
    )
    return int(result.scalar_one())


async def delete_inventory(session: AsyncSession, inventory_id: int) -> bool:
    """
    Delete an inventory row.

    Returns True if deleted, False if not found.
    """
    row = await session.get(CardInventoryDB, inventory_id)
    if row is None:
        return False

    await session.delete(row)
    await session.flush()
    return True


# --- Stock Operations ---


async def get_inventory_rows(
    session: AsyncSession, inventory_ids: Iterable[int]
) -> dict[int, CardInventoryDB]:
    """Get inventory rows by id, each with its card. Missing ids are absent."""
    ids = list(inventory_ids)
    if not ids:
        return {}

    result = await session.execute(
        select(CardInventoryDB)
        .where(CardInventoryDB.id.in_(ids))
        .options(selectinload(CardInventoryDB.card))
        .execution_options(populate_existing=True)
    )
    return {row.id: row for row in result.scalars().all()}


async def decrement_inventory(session: AsyncSession, inventory_id: int, quantity: int) -> bool:
    """
    Take `quantity` units from an inventory row if it still has them.

    The stock check and the write are one conditional UPDATE, so two
    writers can never both take the last unit.

    Returns True if the row was decremented, False if stock was short.
    """
    result = await session.execute(
        update(CardInventoryDB)
        .where(
            CardInventoryDB.id == inventory_id,
            CardInventoryDB.quantity >= quantity,
        )
        .values(quantity=CardInventoryDB.quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    # rowcount is available on UPDATE results; type stubs incomplete for async
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


# --- User Operations ---


async def get_user(session: AsyncSession, user_id: str) -> UserDB | None:
    return await session.get(UserDB, user_id)


async def get_or_create_user(session: AsyncSession, caller: Caller) -> tuple[UserDB, bool]:
    """
    Get the caller's user row, creating it on first use.

    Returns:
        Tuple of (user, created) where created is True if new.
    """
    user = await get_user(session, caller.user_id)
    if user:
        return user, False

    user = UserDB(id=caller.user_id, email=caller.email, name=caller.name, role=caller.role)
    session.add(user)
    await session.flush()
    return user, True


async def list_users(session: AsyncSession, limit: int = 20, offset: int = 0) -> list[UserDB]:
    """Get users, newest first."""
    result = await session.execute(
        select(UserDB)
        .order_by(UserDB.created_at.desc(), UserDB.id.asc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


# --- Order Operations ---


async def get_order(session: AsyncSession, order_id: int) -> OrderDB | None:
    """Get an order with its lines, inventory rows and cards."""
    result = await session.execute(
        select(OrderDB)
        .where(OrderDB.id == order_id)
        .options(_ORDER_DETAIL)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_orders_for_user(
    session: AsyncSession, user_id: str, limit: int = 20, offset: int = 0
) -> list[OrderDB]:
    """Get a user's orders, newest first."""
    result = await session.execute(
        select(OrderDB)
        .where(OrderDB.user_id == user_id)
        .options(_ORDER_DETAIL)
        .order_by(OrderDB.created_at.desc(), OrderDB.id.desc())
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def list_orders(session: AsyncSession, limit: int = 20, offset: int = 0) -> list[OrderDB]:
    """Get all orders, newest first."""
    result = await session.execute(
        select(OrderDB)
        .options(_ORDER_DETAIL)
        .order_by(OrderDB.created_at.desc(), OrderDB.id.desc())
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
