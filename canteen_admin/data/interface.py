from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence

from .models import (
    MenuItem,
    OrderRecord,
    PageCursor,
    Predicate,
    SortSpec,
)


# ---- Order store protocol ----

class OrderStore(Protocol):
    """
    Backend-agnostic contract for the order collection.

    - Implementations MUST avoid result caching inside these methods.
      Each call should execute a fresh query against the underlying source.
    - Any failure of the underlying source is raised as StoreError.
    """

    def query_orders(
        self,
        predicates: Sequence[Predicate],
        order_by: SortSpec,
        limit: int,
        start_after: Optional[PageCursor] = None,
    ) -> List[OrderRecord]:
        """Return one ordered page of orders matching every predicate.

        When `start_after` is given, the page begins with the record that
        follows the cursor under the same sort.
        """
        ...

    def find_orders(self, field: str, value: Any) -> List[OrderRecord]:
        """Return all orders whose `field` equals `value`, in store order."""
        ...

    def update_order_fields(self, order_id: str, fields: Dict[str, Any]) -> None:
        """Overwrite the given fields of one order."""
        ...


# ---- Menu store protocol ----

class MenuStore(Protocol):
    """Contract for the menu collection."""

    def list_menu_items(self) -> List[MenuItem]:
        ...

    def get_menu_item(self, item_id: str) -> Optional[MenuItem]:
        ...

    def add_menu_item(self, name: str, price: float, image: str, is_available: bool = False) -> MenuItem:
        ...

    def update_menu_item(self, item_id: str, fields: Dict[str, Any]) -> None:
        ...

    def delete_menu_item(self, item_id: str) -> None:
        ...
