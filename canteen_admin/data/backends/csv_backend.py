from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..interface import MenuStore, OrderStore
from ..models import (
    CustomerInfo,
    DeliveryStatus,
    MenuItem,
    OrderItem,
    OrderRecord,
    PageCursor,
    Predicate,
    SortSpec,
    normalize_status,
)
from ...config import get_config
from ...exceptions import StoreError
from ...logging import get_logger

ORDERS_FILE = "orders.csv"
ORDER_ITEMS_FILE = "order_items.csv"
MENU_FILE = "menu.csv"

CUSTOMER_FIELDS = ["name", "email", "contact_number", "department", "address"]

ORDER_COLUMNS = [
    "id", "invoice_number", "date", "delivery_status",
    *[f"customer_{f}" for f in CUSTOMER_FIELDS],
    "subtotal", "tax", "total_amount", "delivered_at",
]
ORDER_ITEM_COLUMNS = ["order_id", "line_no", "name", "price", "quantity", "subtotal"]
MENU_COLUMNS = ["id", "name", "price", "image", "is_available"]

# Record fields that can be filtered, sorted or updated, mapped to CSV columns
_ORDER_FIELD_COLUMNS = {
    "id": "id",
    "invoice_number": "invoice_number",
    "date": "date",
    "delivery_status": "delivery_status",
    "delivered_at": "delivered_at",
    **{f"customer.{f}": f"customer_{f}" for f in CUSTOMER_FIELDS},
}
_UPDATABLE_ORDER_FIELDS = {"delivery_status", "delivered_at"}


def _resolve_data_dir(data_dir: str | Path) -> Path:
    path = Path(data_dir)
    if path.is_absolute():
        return path

    # Relative paths are anchored at the repository root (where pyproject.toml lives)
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent / path
    return current / path


def _column_value(value: Any) -> Any:
    """Convert a predicate/update value into what the frame stores."""
    if isinstance(value, DeliveryStatus):
        return value.value
    if isinstance(value, datetime):
        return pd.Timestamp(value)
    return value


def _text(value: Any) -> str:
    return "" if pd.isna(value) else str(value)


@dataclass
class _Tables:
    orders: pd.DataFrame
    order_items: pd.DataFrame
    menu: pd.DataFrame


class CsvOrderStore(OrderStore, MenuStore):
    """
    CSV-backed implementation of the order and menu collections.
    - Loads CSVs from `data_dir` once at construction.
    - Every query performs a fresh filter/sort/page pass over the loaded frames,
      mirroring a document-store query.
    - Mutations are applied to a copy of a frame, written to disk, and only then
      swapped in, so a failed write leaves the loaded data unchanged.
    """

    def __init__(self, data_dir: Optional[str | Path] = None) -> None:
        if data_dir is None:
            data_dir = get_config().data_dir

        self.data_dir = _resolve_data_dir(data_dir)
        self.logger = get_logger(__name__)
        self._tables = self._load_tables(self.data_dir)
        self.logger.debug(
            f"Loaded {len(self._tables.orders)} orders and {len(self._tables.menu)} menu items from {self.data_dir}"
        )

    # ---------- loading / writing helpers ----------

    @staticmethod
    def _load_tables(data_dir: Path) -> _Tables:
        if not data_dir.exists():
            raise FileNotFoundError(
                f"Data directory not found: {data_dir}\n"
                f"Please either:\n"
                f"  1. Generate sample data: python -m canteen_admin.seed_data\n"
                f"  2. Set DATA_DIR environment variable to point to your data directory\n"
                f"  3. Create a .env file with DATA_DIR=/path/to/your/data"
            )

        required_files = [ORDERS_FILE, ORDER_ITEMS_FILE]
        missing_files = [f for f in required_files if not (data_dir / f).exists()]

        if missing_files:
            raise FileNotFoundError(
                f"Required CSV files missing in {data_dir}:\n"
                f"  Missing: {', '.join(missing_files)}\n"
                f"  Expected files: {', '.join(required_files)}\n\n"
                f"Please either:\n"
                f"  1. Generate sample data: python -m canteen_admin.seed_data\n"
                f"  2. Ensure your data directory contains all required CSV files"
            )

        text_columns = {c: str for c in ORDER_COLUMNS if c.startswith("customer_")}
        try:
            orders = pd.read_csv(
                data_dir / ORDERS_FILE,
                dtype={"id": str, "invoice_number": str, "delivery_status": str, **text_columns},
                parse_dates=["date", "delivered_at"],
            )
            order_items = pd.read_csv(data_dir / ORDER_ITEMS_FILE, dtype={"order_id": str, "name": str})

            menu = pd.DataFrame(columns=MENU_COLUMNS)
            if (data_dir / MENU_FILE).exists():
                menu = pd.read_csv(data_dir / MENU_FILE, dtype={"id": str, "name": str, "image": str})
        except Exception as e:
            raise RuntimeError(
                f"Error reading CSV files from {data_dir}: {e}\n"
                f"Please check that the CSV files are valid and readable."
            ) from e

        for column in ORDER_COLUMNS:
            if column not in orders.columns:
                orders[column] = pd.NaT if column in ("date", "delivered_at") else ""
        orders["delivered_at"] = pd.to_datetime(orders["delivered_at"])

        # Normalize legacy status labels once, at the boundary
        orders["delivery_status"] = orders["delivery_status"].map(lambda s: normalize_status(None if pd.isna(s) else s).value)
        menu["is_available"] = menu["is_available"].fillna(False).astype(bool)

        return _Tables(orders=orders[ORDER_COLUMNS].copy(), order_items=order_items, menu=menu)

    def _commit_orders(self, orders: pd.DataFrame) -> None:
        try:
            orders.to_csv(self.data_dir / ORDERS_FILE, index=False)
        except OSError as e:
            raise StoreError(f"Could not write {ORDERS_FILE}: {e}") from e
        self._tables.orders = orders

    def _commit_menu(self, menu: pd.DataFrame) -> None:
        try:
            menu.to_csv(self.data_dir / MENU_FILE, index=False)
        except OSError as e:
            raise StoreError(f"Could not write {MENU_FILE}: {e}") from e
        self._tables.menu = menu

    @staticmethod
    def _column_for(field: str) -> str:
        try:
            return _ORDER_FIELD_COLUMNS[field]
        except KeyError:
            raise StoreError(f"Unsupported order field: {field}") from None

    def _to_record(self, row: pd.Series) -> OrderRecord:
        items = self._tables.order_items
        lines = items[items["order_id"] == row["id"]].sort_values("line_no")
        delivered_at = row["delivered_at"]
        return OrderRecord(
            id=row["id"],
            invoice_number=row["invoice_number"],
            date=pd.Timestamp(row["date"]).to_pydatetime(),
            delivery_status=row["delivery_status"],
            customer=CustomerInfo(**{f: _text(row[f"customer_{f}"]) for f in CUSTOMER_FIELDS}),
            items=[
                OrderItem(
                    name=line["name"],
                    price=float(line["price"]),
                    quantity=int(line["quantity"]),
                    subtotal=float(line["subtotal"]),
                )
                for _, line in lines.iterrows()
            ],
            subtotal=float(row["subtotal"]),
            tax=float(row["tax"]),
            total_amount=float(row["total_amount"]),
            delivered_at=None if pd.isna(delivered_at) else pd.Timestamp(delivered_at).to_pydatetime(),
        )

    # ---------- order store ----------

    def query_orders(
        self,
        predicates: Sequence[Predicate],
        order_by: SortSpec,
        limit: int,
        start_after: Optional[PageCursor] = None,
    ) -> List[OrderRecord]:
        df = self._tables.orders

        mask = pd.Series(True, index=df.index)
        for predicate in predicates:
            column = df[self._column_for(predicate.field)]
            value = _column_value(predicate.value)
            if predicate.op == "==":
                mask &= column == value
            else:
                mask &= column >= value
        df = df.loc[mask]

        # Ties on the sort key are broken by id in the same direction, so the
        # cursor below identifies a unique position.
        sort_col = self._column_for(order_by.field)
        asc = not order_by.descending
        df = df.sort_values([sort_col, "id"], ascending=[asc, asc])

        if start_after is not None:
            key = pd.Timestamp(start_after.last_sort_value)
            if order_by.descending:
                after = (df[sort_col] < key) | ((df[sort_col] == key) & (df["id"] < start_after.last_id))
            else:
                after = (df[sort_col] > key) | ((df[sort_col] == key) & (df["id"] > start_after.last_id))
            df = df.loc[after]

        df = df.head(int(limit))
        return [self._to_record(row) for _, row in df.iterrows()]

    def find_orders(self, field: str, value: Any) -> List[OrderRecord]:
        df = self._tables.orders
        df = df[df[self._column_for(field)] == _column_value(value)]
        return [self._to_record(row) for _, row in df.iterrows()]

    def update_order_fields(self, order_id: str, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - _UPDATABLE_ORDER_FIELDS
        if unknown:
            raise StoreError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        orders = self._tables.orders.copy()
        match = orders.index[orders["id"] == order_id]
        if match.empty:
            raise StoreError(f"No order with id {order_id}")

        for field, value in fields.items():
            orders.loc[match, self._column_for(field)] = _column_value(value)
        self._commit_orders(orders)
        self.logger.debug(f"Updated order {order_id}: {sorted(fields)}")

    # ---------- menu store ----------

    def _menu_item(self, row: pd.Series) -> MenuItem:
        return MenuItem(
            id=row["id"],
            name=row["name"],
            price=float(row["price"]),
            image=_text(row["image"]),
            is_available=bool(row["is_available"]),
        )

    def list_menu_items(self) -> List[MenuItem]:
        return [self._menu_item(row) for _, row in self._tables.menu.iterrows()]

    def get_menu_item(self, item_id: str) -> Optional[MenuItem]:
        menu = self._tables.menu
        rows = menu[menu["id"] == item_id]
        if rows.empty:
            return None
        return self._menu_item(rows.iloc[0])

    def add_menu_item(self, name: str, price: float, image: str, is_available: bool = False) -> MenuItem:
        item = MenuItem(id=uuid.uuid4().hex[:20], name=name, price=price, image=image, is_available=is_available)
        row = pd.DataFrame([item.model_dump()], columns=MENU_COLUMNS)
        menu = self._tables.menu
        self._commit_menu(row if menu.empty else pd.concat([menu, row], ignore_index=True))
        return item

    def update_menu_item(self, item_id: str, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - (set(MENU_COLUMNS) - {"id"})
        if unknown:
            raise StoreError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        menu = self._tables.menu.copy()
        match = menu.index[menu["id"] == item_id]
        if match.empty:
            raise StoreError(f"No menu item with id {item_id}")
        for field, value in fields.items():
            menu.loc[match, field] = value
        self._commit_menu(menu)

    def delete_menu_item(self, item_id: str) -> None:
        menu = self._tables.menu
        if not (menu["id"] == item_id).any():
            raise StoreError(f"No menu item with id {item_id}")
        self._commit_menu(menu[menu["id"] != item_id].reset_index(drop=True))
