from cardshop.api.admin import router as admin_router
from cardshop.api.cards import router as cards_router
from cardshop.api.health import router as health_router
from cardshop.api.me import router as me_router
from cardshop.api.orders import router as orders_router

__all__ = [
    "admin_router",
    "cards_router",
    "health_router",
    "me_router",
    "orders_router",
]
