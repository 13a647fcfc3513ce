from __future__ import annotations

from typing import List

from ..data.interface import MenuStore
from ..data.models import MenuItem
from ..exceptions import NotFound, ValidationError
from ..logging import get_logger


def _validate(name: str, price: float, image: str) -> float:
    if not name or not name.strip() or not image:
        raise ValidationError()
    try:
        price = float(price)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid price: {price!r}") from None
    if price <= 0:
        raise ValidationError(f"Price must be positive, got {price}")
    return price


class MenuCatalog:
    """Menu curation on top of a MenuStore.

    Images are uploaded to the image host beforehand; only the resulting URL
    is stored here.
    """

    def __init__(self, store: MenuStore) -> None:
        self.store = store
        self.logger = get_logger(__name__)

    def list_items(self) -> List[MenuItem]:
        return self.store.list_menu_items()

    def get_item(self, item_id: str) -> MenuItem:
        item = self.store.get_menu_item(item_id)
        if item is None:
            raise NotFound(f"Menu item {item_id} not found")
        return item

    def add_item(self, name: str, price: float, image: str) -> MenuItem:
        """Create a new menu item. New items start out unavailable."""
        price = _validate(name, price, image)
        item = self.store.add_menu_item(name.strip(), price, image, is_available=False)
        self.logger.info(f"Added menu item {item.id} ({item.name})")
        return item

    def update_item(self, item_id: str, name: str, price: float, image: str, is_available: bool) -> MenuItem:
        price = _validate(name, price, image)
        self.get_item(item_id)
        self.store.update_menu_item(
            item_id,
            {"name": name.strip(), "price": price, "image": image, "is_available": bool(is_available)},
        )
        self.logger.info(f"Updated menu item {item_id}")
        return self.get_item(item_id)

    def toggle_availability(self, item_id: str) -> MenuItem:
        item = self.get_item(item_id)
        self.store.update_menu_item(item_id, {"is_available": not item.is_available})
        self.logger.debug(f"Menu item {item_id} available={not item.is_available}")
        return self.get_item(item_id)

    def delete_item(self, item_id: str) -> None:
        self.get_item(item_id)
        self.store.delete_menu_item(item_id)
        self.logger.info(f"Deleted menu item {item_id}")
