from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.api.auth import require_caller
from cardshop.api.orders import OrderResponse, order_to_response
from cardshop.config import settings
from cardshop.db import get_orders_for_user, get_user
from cardshop.db.database import get_session
from cardshop.models.db import UserRole
from cardshop.models.order import Caller

router = APIRouter(tags=["account"])


class MeResponse(BaseModel):
    """
    The caller's account.

    `registered` is False until the caller places a first order.
    """

    id: str
    email: str | None = None
    name: str | None = None
    role: UserRole
    registered: bool
    created_at: datetime | None = None
    orders: list[OrderResponse] = Field(default_factory=list)


@router.get("/me", response_model=MeResponse)
async def me(
    caller: Annotated[Caller, Depends(require_caller)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MeResponse:
    """Get the caller's account and order history."""
    user = await get_user(session, caller.user_id)
    if user is None:
        return MeResponse(
            id=caller.user_id,
            email=caller.email,
            name=caller.name,
            role=caller.role,
            registered=False,
        )

    orders = await get_orders_for_user(session, user.id, limit=settings.max_page_size)
    return MeResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        registered=True,
        created_at=user.created_at,
        orders=[order_to_response(o) for o in orders],
    )
