"""
Admin API endpoints.

Catalog and inventory management plus shop-wide listings. Every route
requires the ADMIN role.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.api.auth import require_admin
from cardshop.api.cards import (
    CardResponse,
    InventoryResponse,
    card_to_response,
    inventory_to_response,
)
from cardshop.api.orders import OrderListResponse, order_to_response
from cardshop.config import settings
from cardshop.db import list_orders, list_users
from cardshop.db.database import get_session
from cardshop.models.db import CardCondition, UserRole
from cardshop.models.failure import ValidationFailedError
from cardshop.services.catalog_admin import (
    add_card,
    edit_card,
    remove_card,
    remove_inventory,
    set_inventory,
)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

# Card fields that may be cleared with an explicit null
_NULLABLE_CARD_FIELDS = frozenset({"card_number", "description"})


class CreateCardRequest(BaseModel):
    """Request model for adding a card to the catalog."""

    id: str | None = Field(default=None, description="Card id; generated when omitted")
    name: str = Field(..., min_length=1)
    image_url: str
    rarity: str
    set: str
    card_number: str | None = Field(default=None, examples=["4/102"])
    description: str | None = None


class UpdateCardRequest(BaseModel):
    """Request model for a partial card update. Omitted fields are left alone."""

    name: str | None = Field(default=None, min_length=1)
    image_url: str | None = None
    rarity: str | None = None
    set: str | None = None
    card_number: str | None = None
    description: str | None = None


class UpdateInventoryRequest(BaseModel):
    """Request model for setting the stock line of one condition."""

    condition: CardCondition
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., ge=0)


class DeleteResponse(BaseModel):
    id: str
    deleted: bool


class UserResponse(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    role: UserRole
    created_at: datetime


class UserListResponse(BaseModel):
    users: list[UserResponse]
    count: int


@router.post("/cards", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card_endpoint(
    request: CreateCardRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Add a card to the catalog."""
    card = await add_card(session, request.model_dump(exclude_none=True))
    return card_to_response(card)


@router.patch("/cards/{card_id}", response_model=CardResponse)
async def update_card_endpoint(
    card_id: str,
    request: UpdateCardRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Update some fields of a card."""
    fields = {
        name: value
        for name, value in request.model_dump(exclude_unset=True).items()
        if value is not None or name in _NULLABLE_CARD_FIELDS
    }
    if not fields:
        raise ValidationFailedError("No fields to update")

    card = await edit_card(session, card_id, fields)
    return card_to_response(card)


@router.delete("/cards/{card_id}", response_model=DeleteResponse)
async def delete_card_endpoint(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """
    Delete a card.

    Refused while the card still has inventory rows.
    """
    await remove_card(session, card_id)
    return DeleteResponse(id=card_id, deleted=True)


@router.put("/cards/{card_id}/inventory", response_model=InventoryResponse)
async def update_inventory_endpoint(
    card_id: str,
    request: UpdateInventoryRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> InventoryResponse:
    """
    Set price and quantity for one condition of a card.

    Creates the row if the card has no stock line for that condition yet.
    """
    row = await set_inventory(
        session,
        card_id,
        condition=request.condition,
        price=request.price,
        quantity=request.quantity,
    )
    return inventory_to_response(row)


@router.delete("/inventory/{inventory_id}", response_model=DeleteResponse)
async def delete_inventory_endpoint(
    inventory_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """
    Delete an inventory row.

    Refused once any order refers to the row.
    """
    await remove_inventory(session, inventory_id)
    return DeleteResponse(id=str(inventory_id), deleted=True)


@router.get("/orders", response_model=OrderListResponse)
async def list_all_orders(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.default_page_size,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> OrderListResponse:
    """Get every order in the shop, newest first."""
    orders = await list_orders(session, limit=limit, offset=offset)
    return OrderListResponse(orders=[order_to_response(o) for o in orders], count=len(orders))


@router.get("/users", response_model=UserListResponse)
async def list_all_users(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.default_page_size,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> UserListResponse:
    """Get every registered user, newest first."""
    users = await list_users(session, limit=limit, offset=offset)
    return UserListResponse(
        users=[
            UserResponse(
                id=u.id,
                email=u.email,
                name=u.name,
                role=u.role,
                created_at=u.created_at,
            )
            for u in users
        ],
        count=len(users),
    )
