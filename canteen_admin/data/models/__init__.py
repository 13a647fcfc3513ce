from .data_filters import (
    DateFilter,
    StatusFilter,
    OrderListFilters,
)

from .orders import (
    DeliveryStatus,
    CustomerInfo,
    OrderItem,
    OrderRecord,
    normalize_status,
)
from .menu import MenuItem
from .query import (
    Predicate,
    SortSpec,
    PageCursor,
)

__all__ = [
    # Filter classes
    "DateFilter",
    "StatusFilter",
    "OrderListFilters",
    # Records
    "DeliveryStatus",
    "CustomerInfo",
    "OrderItem",
    "OrderRecord",
    "normalize_status",
    "MenuItem",
    # Query primitives
    "Predicate",
    "SortSpec",
    "PageCursor",
]
