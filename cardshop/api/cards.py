"""
Catalog API endpoints.

Browse and search the card catalog with per-condition inventory.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.config import settings
from cardshop.db import get_card, get_inventory_for_card
from cardshop.db.database import get_session
from cardshop.models.catalog import CardFilter, CardSort, SortField, SortOrder
from cardshop.models.db import CardCondition, CardDB, CardInventoryDB
from cardshop.models.failure import NotFoundError
from cardshop.services.catalog import query_cards

router = APIRouter(prefix="/cards", tags=["cards"])


class InventoryResponse(BaseModel):
    """Response model for one (card, condition) stock line."""

    id: int
    card_id: str
    condition: CardCondition
    price: float
    quantity: int


class CardResponse(BaseModel):
    """Response model for a catalog card with its inventory."""

    id: str
    name: str
    image_url: str
    rarity: str
    set: str
    card_number: str | None = None
    description: str | None = None
    inventory_items: list[InventoryResponse] = Field(default_factory=list)


class CardListResponse(BaseModel):
    """Response model for a page of the catalog."""

    cards: list[CardResponse]
    count: int
    limit: int
    offset: int


class InventoryListResponse(BaseModel):
    card_id: str
    inventory: list[InventoryResponse]


def inventory_to_response(row: CardInventoryDB) -> InventoryResponse:
    return InventoryResponse(
        id=row.id,
        card_id=row.card_id,
        condition=row.condition,
        price=float(row.price),
        quantity=row.quantity,
    )


def card_to_response(card: CardDB) -> CardResponse:
    return CardResponse(
        id=card.id,
        name=card.name,
        image_url=card.image_url,
        rarity=card.rarity,
        set=card.set,
        card_number=card.card_number,
        description=card.description,
        inventory_items=[inventory_to_response(row) for row in card.inventory_items],
    )


@router.get("", response_model=CardListResponse)
async def list_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    name: Annotated[str | None, Query(description="Case-insensitive name substring")] = None,
    set: Annotated[str | None, Query(description="Set label, e.g. 'Base Set'")] = None,
    rarity: Annotated[str | None, Query(description="Case-insensitive rarity substring")] = None,
    min_price: Annotated[Decimal | None, Query(ge=0)] = None,
    max_price: Annotated[Decimal | None, Query(ge=0)] = None,
    condition: CardCondition | None = None,
    in_stock: bool | None = None,
    sort_field: SortField | None = None,
    sort_order: SortOrder = SortOrder.ASC,
    limit: Annotated[int, Query(ge=1, le=settings.max_page_size)] = settings.default_page_size,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CardListResponse:
    """
    Get a page of the catalog.

    A card matches when its name, set and rarity match and, if any of
    min_price, max_price, condition or in_stock is given, at least one of
    its inventory rows satisfies all of them together.

    Without sort_field, cards are ordered by set release order and card
    number.
    """
    card_filter = CardFilter(
        name=name,
        set=set,
        rarity=rarity,
        min_price=min_price,
        max_price=max_price,
        condition=condition,
        in_stock=in_stock,
    )
    sort = CardSort(field=sort_field, order=sort_order) if sort_field is not None else None

    cards = await query_cards(session, card_filter, sort, limit=limit, offset=offset)

    return CardListResponse(
        cards=[card_to_response(card) for card in cards],
        count=len(cards),
        limit=limit,
        offset=offset,
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_single_card(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Get one card with all its inventory rows."""
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError("Card", card_id)
    return card_to_response(card)


@router.get("/{card_id}/inventory", response_model=InventoryListResponse)
async def get_card_inventory(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> InventoryListResponse:
    """Get a card's inventory rows, cheapest first."""
    rows = await get_inventory_for_card(session, card_id)
    return InventoryListResponse(
        card_id=card_id,
        inventory=[inventory_to_response(row) for row in rows],
    )
