"""
Catalog management.

Admin operations on cards and inventory rows. The caller's role is checked
at the API boundary; this module enforces the data rules:

- at most one inventory row per (card, condition)
- a card with inventory rows cannot be deleted
- an inventory row referenced by an order line cannot be deleted
"""

import logging
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.db.operations import (
    count_inventory_rows,
    count_order_items_for_inventory,
    create_card,
    delete_card,
    delete_inventory,
    get_card,
    update_card,
    upsert_inventory,
)
from cardshop.models.db import CardCondition, CardDB, CardInventoryDB
from cardshop.models.failure import (
    ConflictOnDeleteError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


async def add_card(session: AsyncSession, fields: dict[str, Any]) -> CardDB:
    """
    Create a catalog card.

    A random id is assigned when none is given.

    Raises:
        ValidationFailedError: If a card with the given id already exists
    """
    card_id = fields.get("id") or uuid.uuid4().hex
    if await get_card(session, card_id) is not None:
        raise ValidationFailedError("Card already exists", detail=f"Card id {card_id} is taken")

    card = await create_card(session, **{**fields, "id": card_id})
    logger.info("CARD_CREATED", extra={"card_id": card.id})
    return card


async def edit_card(session: AsyncSession, card_id: str, fields: dict[str, Any]) -> CardDB:
    """Apply a partial update to a card."""
    card = await update_card(session, card_id, **fields)
    if card is None:
        raise NotFoundError("Card", card_id)
    logger.info("CARD_UPDATED", extra={"card_id": card_id, "fields": sorted(fields)})
    return card


async def remove_card(session: AsyncSession, card_id: str) -> None:
    """
    Delete a card that has no inventory rows.

    Raises:
        NotFoundError: If the card does not exist
        ConflictOnDeleteError: If the card still has inventory rows
    """
    if await get_card(session, card_id) is None:
        raise NotFoundError("Card", card_id)

    if await count_inventory_rows(session, card_id) > 0:
        raise ConflictOnDeleteError("Cannot delete card with existing inventory")

    await delete_card(session, card_id)
    logger.info("CARD_DELETED", extra={"card_id": card_id})


async def set_inventory(
    session: AsyncSession,
    card_id: str,
    condition: CardCondition,
    price: Decimal,
    quantity: int,
) -> CardInventoryDB:
    """
    Create or replace the stock line for a (card, condition) pair.

    Raises:
        NotFoundError: If the card does not exist
        ValidationFailedError: If price or quantity is negative
    """
    if price < 0 or quantity < 0:
        raise ValidationFailedError(
            "Invalid inventory values", detail="price and quantity must not be negative"
        )
    if await get_card(session, card_id) is None:
        raise NotFoundError("Card", card_id)

    row = await upsert_inventory(session, card_id, condition, price, quantity)
    logger.info(
        "INVENTORY_SET",
        extra={
            "card_id": card_id,
            "condition": condition.value,
            "price": str(price),
            "quantity": quantity,
        },
    )
    return row


async def remove_inventory(session: AsyncSession, inventory_id: int) -> None:
    """
    Delete an inventory row that no order refers to.

    Raises:
        NotFoundError: If the row does not exist
        ConflictOnDeleteError: If any order line references the row
    """
    if await count_order_items_for_inventory(session, inventory_id) > 0:
        raise ConflictOnDeleteError("Cannot delete inventory item that has been ordered")

    if not await delete_inventory(session, inventory_id):
        raise NotFoundError("Card inventory", inventory_id)
    logger.info("INVENTORY_DELETED", extra={"inventory_id": inventory_id})
