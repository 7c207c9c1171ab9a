"""
Catalog query service.

Resolves a filtered, sorted, paginated page of cards with their inventory
rows attached.

Filtering happens in the database. Sorting happens in memory over the whole
filtered set because two of the keys (set release order, numeric card
number prefix, cheapest row price) are not plain column orderings. The page
is sliced only after the full sort.

Ordering is total: every comparator ends with the default ordering (set
release order, then card number) and finally the card id. DESC is the exact
reverse of ASC.
"""

import locale
import re
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cardshop.config import SET_ORDER, settings
from cardshop.db.operations import find_cards
from cardshop.models.catalog import CardFilter, CardSort, SortField, SortOrder
from cardshop.models.db import CardDB
from cardshop.models.failure import ValidationFailedError

_CARD_NUMBER_PREFIX = re.compile(r"^\s*(\d+)")

_NO_PRICE = Decimal("Infinity")


def card_number_prefix(card_number: str | None) -> int:
    """
    Leading integer of a card number such as "4/102".

    Missing or non-numeric card numbers count as 0.
    """
    if not card_number:
        return 0
    match = _CARD_NUMBER_PREFIX.match(card_number)
    return int(match.group(1)) if match else 0


def set_rank(set_name: str) -> int:
    """Position of a set in release order. Unknown sets rank after all known ones."""
    try:
        return SET_ORDER.index(set_name)
    except ValueError:
        return len(SET_ORDER)


def lowest_price(card: CardDB) -> Decimal:
    """Cheapest inventory price of a card, or +infinity without inventory."""
    if not card.inventory_items:
        return _NO_PRICE
    return min(row.price for row in card.inventory_items)


def _default_key(card: CardDB) -> tuple[int, int]:
    return (set_rank(card.set), card_number_prefix(card.card_number))


_PRIMARY_KEYS: dict[SortField, Callable[[CardDB], Any]] = {
    SortField.NAME: lambda card: locale.strxfrm(card.name),
    SortField.RARITY: lambda card: locale.strxfrm(card.rarity),
    SortField.CARD_NUMBER: lambda card: card_number_prefix(card.card_number),
    SortField.PRICE: lowest_price,
    SortField.SET: lambda card: (set_rank(card.set), locale.strxfrm(card.set)),
}


def sort_cards(cards: list[CardDB], sort: CardSort | None = None) -> list[CardDB]:
    """
    Order cards for display.

    Without a sort, cards are grouped by set release order and then by card
    number. With a sort, the chosen key comes first and the default ordering
    breaks ties.
    """
    if sort is None:
        return sorted(cards, key=lambda card: (*_default_key(card), card.id))

    primary = _PRIMARY_KEYS[sort.field]
    ordered = sorted(cards, key=lambda card: (primary(card), *_default_key(card), card.id))
    if sort.order == SortOrder.DESC:
        ordered.reverse()
    return ordered


async def query_cards(
    session: AsyncSession,
    card_filter: CardFilter | None = None,
    sort: CardSort | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[CardDB]:
    """
    Get one page of the catalog.

    Args:
        session: Database session
        card_filter: Optional filter; None matches every card
        sort: Optional sort; None uses the default set/card-number order
        limit: Page size, defaults to settings.default_page_size
        offset: Number of cards to skip

    Returns:
        Cards with inventory rows loaded. An empty list when nothing matches.

    Raises:
        ValidationFailedError: If limit or offset is out of range
    """
    if limit is None:
        limit = settings.default_page_size
    if limit < 0 or limit > settings.max_page_size:
        raise ValidationFailedError(
            "Invalid page size",
            detail=f"limit must be between 0 and {settings.max_page_size}",
        )
    if offset < 0:
        raise ValidationFailedError("Invalid offset", detail="offset must not be negative")

    cards = await find_cards(session, card_filter)
    ordered = sort_cards(cards, sort)
    return ordered[offset : offset + limit]
