from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from cardshop.models.db import CardCondition


class SortField(str, Enum):
    """Catalog sort keys."""

    NAME = "NAME"
    CARD_NUMBER = "CARD_NUMBER"
    PRICE = "PRICE"
    RARITY = "RARITY"
    SET = "SET"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True, slots=True)
class CardFilter:
    """
    Catalog filter.

    Card-level fields (name, set, rarity) match the card itself. The
    inventory-level fields (min_price, max_price, condition, in_stock) must
    all hold for at least one single inventory row of the card.

    Attributes:
        name: Case-insensitive substring of the card name
        set: Set label, compared case-insensitively
        rarity: Case-insensitive substring of the rarity label
        min_price: Lowest acceptable row price (inclusive)
        max_price: Highest acceptable row price (inclusive)
        condition: Required row condition
        in_stock: When True, the row must have quantity > 0. When False,
            the card still needs at least one inventory row
    """

    name: str | None = None
    set: str | None = None
    rarity: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    condition: CardCondition | None = None
    in_stock: bool | None = None

    def has_inventory_predicate(self) -> bool:
        """True if any predicate must be satisfied by an inventory row."""
        return (
            self.min_price is not None
            or self.max_price is not None
            or self.condition is not None
            or self.in_stock is not None
        )


@dataclass(frozen=True, slots=True)
class CardSort:
    field: SortField
    order: SortOrder = SortOrder.ASC
