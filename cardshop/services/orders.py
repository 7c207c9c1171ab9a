"""
Order placement.

Turns a list of (inventory row, quantity) lines into an order and takes the
stock, all or nothing.

Stock is checked twice. The first check reads the rows and rejects a short
line with a named InsufficientStockError. The second check is part of the
write: each row is decremented with a conditional UPDATE that only applies
while the row still holds the requested quantity. If another order took the
stock in between, the UPDATE touches no row and the whole transaction is
rolled back with TransactionFailedError. Stock can never go negative.

Order numbers are `ORD-<epoch ms>-<5 base36 chars>`. The orders table holds
a unique constraint on the number; on a collision the placement is retried
with a fresh number.
"""

import logging
import secrets
import string
import time
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.config import settings
from cardshop.db.operations import (
    decrement_inventory,
    get_inventory_rows,
    get_or_create_user,
    get_order,
    get_orders_for_user,
)
from cardshop.models.db import OrderDB, OrderItemDB
from cardshop.models.failure import (
    InsufficientStockError,
    KnownError,
    NotAuthenticatedError,
    NotFoundError,
    TransactionFailedError,
    ValidationFailedError,
)
from cardshop.models.order import Caller, OrderLine, merge_order_lines

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_uppercase
_CENTS = Decimal("0.01")


def generate_order_number(now_ms: int | None = None) -> str:
    """Build a human-readable order number from a timestamp and a random suffix."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"ORD-{now_ms}-{suffix}"


def _is_order_number_conflict(error: IntegrityError) -> bool:
    return "order_number" in str(error.orig)


async def _write_order(
    session: AsyncSession,
    caller: Caller,
    lines: list[OrderLine],
    order_number: str,
) -> OrderDB:
    rows = await get_inventory_rows(session, (line.inventory_id for line in lines))

    for line in lines:
        if line.inventory_id not in rows:
            raise NotFoundError("Card inventory", line.inventory_id)

    for line in lines:
        row = rows[line.inventory_id]
        if row.quantity < line.quantity:
            raise InsufficientStockError(
                card_name=row.card.name,
                condition=row.condition.value,
                requested=line.quantity,
                available=row.quantity,
            )

    # Prices are frozen at validation time
    items = [
        OrderItemDB(
            card_inventory_id=line.inventory_id,
            quantity=line.quantity,
            price_at_purchase=rows[line.inventory_id].price,
        )
        for line in lines
    ]
    total = sum((item.price_at_purchase * item.quantity for item in items), Decimal("0.00"))

    await get_or_create_user(session, caller)

    order = OrderDB(
        user_id=caller.user_id,
        order_number=order_number,
        total_amount=total.quantize(_CENTS, rounding=ROUND_HALF_UP),
        order_items=items,
    )
    session.add(order)
    await session.flush()

    for line in lines:
        if not await decrement_inventory(session, line.inventory_id, line.quantity):
            logger.warning(
                "STOCK_RECHECK_FAILED",
                extra={
                    "inventory_id": line.inventory_id,
                    "requested": line.quantity,
                    "order_number": order_number,
                },
            )
            raise TransactionFailedError()

    created = await get_order(session, order.id)
    if created is None:
        msg = f"Order {order_number} not readable after insert"
        raise RuntimeError(msg)
    return created


async def place_order(
    session: AsyncSession,
    caller: Caller | None,
    lines: Sequence[OrderLine],
) -> OrderDB:
    """
    Place an order for the caller.

    Lines naming the same inventory row are merged. On success the order,
    its lines and the stock decrements are committed together. On any
    failure, including one raised by the commit itself, the session is
    rolled back.

    Raises:
        NotAuthenticatedError: If there is no caller
        ValidationFailedError: If there are no lines or a quantity is below 1
        NotFoundError: If an inventory id does not exist
        InsufficientStockError: If a row holds less than requested
        TransactionFailedError: If the write or its commit could not be
            applied atomically
    """
    if caller is None:
        raise NotAuthenticatedError()
    if not lines:
        raise ValidationFailedError("An order needs at least one item")
    for line in lines:
        if line.quantity < 1:
            raise ValidationFailedError(
                "Invalid quantity",
                detail=f"Quantity for inventory {line.inventory_id} must be at least 1",
            )

    merged = merge_order_lines(list(lines))
    attempts = settings.order_number_attempts

    for attempt in range(1, attempts + 1):
        order_number = generate_order_number()
        try:
            order = await _write_order(session, caller, merged, order_number)
            await session.commit()
        except KnownError as e:
            await session.rollback()
            logger.info(
                "ORDER_REJECTED",
                extra={"user_id": caller.user_id, "kind": e.kind.value, "reason": e.message},
            )
            raise
        except IntegrityError as e:
            await session.rollback()
            if _is_order_number_conflict(e) and attempt < attempts:
                logger.warning(
                    "ORDER_NUMBER_CONFLICT",
                    extra={"order_number": order_number, "attempt": attempt},
                )
                continue
            logger.error("ORDER_TRANSACTION_FAILED", extra={"user_id": caller.user_id})
            raise TransactionFailedError() from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("ORDER_TRANSACTION_FAILED", extra={"user_id": caller.user_id})
            raise TransactionFailedError() from e

        logger.info(
            "ORDER_PLACED",
            extra={
                "order_number": order.order_number,
                "user_id": caller.user_id,
                "lines": len(merged),
                "total": str(order.total_amount),
            },
        )
        return order

    raise TransactionFailedError()


async def list_orders_for_caller(
    session: AsyncSession,
    caller: Caller | None,
    limit: int = 20,
    offset: int = 0,
) -> list[OrderDB]:
    """Get the caller's orders, newest first."""
    if caller is None:
        raise NotAuthenticatedError()
    return await get_orders_for_user(session, caller.user_id, limit=limit, offset=offset)


async def get_order_for_caller(
    session: AsyncSession,
    caller: Caller | None,
    order_id: int,
) -> OrderDB | None:
    """
    Get one of the caller's orders.

    Returns None when the order does not exist or belongs to someone else.
    """
    if caller is None:
        raise NotAuthenticatedError()

    order = await get_order(session, order_id)
    if order is None or order.user_id != caller.user_id:
        return None
    return order
