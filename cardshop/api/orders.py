"""
Order API endpoints.

Place orders and read the caller's own order history.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.api.auth import require_caller
from cardshop.api.cards import InventoryResponse, inventory_to_response
from cardshop.config import settings
from cardshop.db.database import get_session
from cardshop.models.db import OrderDB, OrderItemDB
from cardshop.models.failure import NotFoundError
from cardshop.models.order import Caller, OrderLine
from cardshop.services.orders import (
    get_order_for_caller,
    list_orders_for_caller,
    place_order,
)

router = APIRouter(prefix="/orders", tags=["orders"])


class OrderItemRequest(BaseModel):
    card_inventory_id: int
    quantity: int = Field(..., ge=1)


class CreateOrderRequest(BaseModel):
    """Request model for placing an order."""

    items: list[OrderItemRequest] = Field(
        ...,
        min_length=1,
        description="Inventory rows and quantities to buy",
        examples=[[{"card_inventory_id": 12, "quantity": 2}]],
    )


class OrderItemResponse(BaseModel):
    id: int
    card_inventory_id: int
    quantity: int
    price_at_purchase: float
    card_name: str
    card_inventory: InventoryResponse


class OrderResponse(BaseModel):
    """Response model for an order with its lines."""

    id: int
    order_number: str
    user_id: str
    total_amount: float
    created_at: datetime
    order_items: list[OrderItemResponse] = Field(default_factory=list)


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    count: int


def _item_to_response(item: OrderItemDB) -> OrderItemResponse:
    return OrderItemResponse(
        id=item.id,
        card_inventory_id=item.card_inventory_id,
        quantity=item.quantity,
        price_at_purchase=float(item.price_at_purchase),
        card_name=item.card_inventory.card.name,
        card_inventory=inventory_to_response(item.card_inventory),
    )


def order_to_response(order: OrderDB) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        total_amount=float(order.total_amount),
        created_at=order.created_at,
        order_items=[_item_to_response(item) for item in order.order_items],
    )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: CreateOrderRequest,
    caller: Annotated[Caller, Depends(require_caller)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OrderResponse:
    """
    Place an order.

    Either the whole order is created and every line's stock is taken, or
    nothing changes. Prices are taken from the inventory at placement time,
    not from the client's cart.
    """
    lines = [
        OrderLine(inventory_id=item.card_inventory_id, quantity=item.quantity)
        for item in request.items
    ]
    order = await place_order(session, caller, lines)
    return order_to_response(order)


@router.get("", response_model=OrderListResponse)
async def list_my_orders(
    caller: Annotated[Caller, Depends(require_caller)],
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.default_page_size,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> OrderListResponse:
    """Get the caller's orders, newest first."""
    orders = await list_orders_for_caller(session, caller, limit=limit, offset=offset)
    return OrderListResponse(orders=[order_to_response(o) for o in orders], count=len(orders))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_my_order(
    order_id: int,
    caller: Annotated[Caller, Depends(require_caller)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OrderResponse:
    """
    Get one of the caller's orders.

    Another user's order is reported as not found.
    """
    order = await get_order_for_caller(session, caller, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return order_to_response(order)
