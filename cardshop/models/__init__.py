from cardshop.models.cart import Cart, CartItem
from cardshop.models.catalog import CardFilter, CardSort, SortField, SortOrder
from cardshop.models.db import (
    Base,
    CardCondition,
    CardDB,
    CardInventoryDB,
    OrderDB,
    OrderItemDB,
    UserDB,
    UserRole,
)
from cardshop.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    ConflictOnDeleteError,
    FailureDetail,
    FailureKind,
    InsufficientStockError,
    KnownError,
    NotAuthenticatedError,
    NotAuthorizedError,
    NotFoundError,
    OutcomeType,
    RefusalError,
    TransactionFailedError,
    ValidationFailedError,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from cardshop.models.order import Caller, OrderLine, merge_order_lines

__all__ = [
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "ApiResponse",
    "Base",
    "Caller",
    "CardCondition",
    "CardDB",
    "CardFilter",
    "CardInventoryDB",
    "CardSort",
    "Cart",
    "CartItem",
    "ConflictOnDeleteError",
    "FailureDetail",
    "FailureKind",
    "InsufficientStockError",
    "KnownError",
    "NotAuthenticatedError",
    "NotAuthorizedError",
    "NotFoundError",
    "OrderDB",
    "OrderItemDB",
    "OrderLine",
    "OutcomeType",
    "RefusalError",
    "SortField",
    "SortOrder",
    "TransactionFailedError",
    "UserDB",
    "UserRole",
    "ValidationFailedError",
    "create_known_failure",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
    "merge_order_lines",
]
