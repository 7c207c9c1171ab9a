from cardshop.db.database import get_session, init_db
from cardshop.db.operations import (
    count_inventory_rows,
    count_order_items_for_inventory,
    create_card,
    decrement_inventory,
    delete_card,
    delete_inventory,
    find_cards,
    get_card,
    get_inventory_for_card,
    get_inventory_row,
    get_inventory_rows,
    get_or_create_user,
    get_order,
    get_orders_for_user,
    get_user,
    list_orders,
    list_users,
    update_card,
    upsert_inventory,
)

__all__ = [
    "count_inventory_rows",
    "count_order_items_for_inventory",
    "create_card",
    "decrement_inventory",
    "delete_card",
    "delete_inventory",
    "find_cards",
    "get_card",
    "get_inventory_for_card",
    "get_inventory_row",
    "get_inventory_rows",
    "get_or_create_user",
    "get_order",
    "get_orders_for_user",
    "get_session",
    "get_user",
    "init_db",
    "list_orders",
    "list_users",
    "update_card",
    "upsert_inventory",
]
