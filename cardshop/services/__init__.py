"""
Card shop services.

Business logic for the catalog, catalog management and order placement.
"""

from cardshop.services.catalog import (
    card_number_prefix,
    lowest_price,
    query_cards,
    set_rank,
    sort_cards,
)
from cardshop.services.catalog_admin import (
    add_card,
    edit_card,
    remove_card,
    remove_inventory,
    set_inventory,
)
from cardshop.services.orders import (
    generate_order_number,
    get_order_for_caller,
    list_orders_for_caller,
    place_order,
)

__all__ = [
    # Catalog
    "card_number_prefix",
    "lowest_price",
    "query_cards",
    "set_rank",
    "sort_cards",
    # Catalog management
    "add_card",
    "edit_card",
    "remove_card",
    "remove_inventory",
    "set_inventory",
    # Orders
    "generate_order_number",
    "get_order_for_caller",
    "list_orders_for_caller",
    "place_order",
]
