from datetime import datetime, timedelta

import pandas as pd
import pytest

from canteen_admin.config import get_config, set_config_for_test
from canteen_admin.data.backends.csv_backend import (
    MENU_COLUMNS,
    MENU_FILE,
    ORDER_COLUMNS,
    ORDER_ITEM_COLUMNS,
    ORDER_ITEMS_FILE,
    ORDERS_FILE,
    CsvOrderStore,
)

NOW = datetime(2026, 10, 19, 15, 30, 0)

NAMES = ["Aarav Sharma", "Diya Iyer", "Ishaan Khan", "Meera Patel", "Kabir Das"]


def order_row(n, date, status="Not Delivered", invoice_number=None, name=None, email=None, delivered_at=None):
    name = name or NAMES[n % len(NAMES)]
    return {
        "id": f"o{n:02d}",
        "invoice_number": invoice_number or f"INV-{n:04d}",
        "date": date,
        "delivery_status": status,
        "customer_name": name,
        "customer_email": email or f"{name.split()[0].lower()}{n}@campus.edu",
        "customer_contact_number": f"98765{n:05d}",
        "customer_department": "Computer Science",
        "customer_address": "Hostel 1",
        "subtotal": 100.0,
        "tax": 0.05,
        "total_amount": 105.0,
        "delivered_at": delivered_at,
    }


def write_data(data_dir, orders, items=None, menu=None):
    data_dir.mkdir(parents=True, exist_ok=True)
    if items is None:
        items = [
            {"order_id": o["id"], "line_no": 1, "name": "Masala Dosa", "price": 50.0, "quantity": 2, "subtotal": 100.0}
            for o in orders
        ]
    pd.DataFrame(orders, columns=ORDER_COLUMNS).to_csv(data_dir / ORDERS_FILE, index=False)
    pd.DataFrame(items, columns=ORDER_ITEM_COLUMNS).to_csv(data_dir / ORDER_ITEMS_FILE, index=False)
    if menu is not None:
        pd.DataFrame(menu, columns=MENU_COLUMNS).to_csv(data_dir / MENU_FILE, index=False)
    return data_dir


def at(days_ago, hour):
    day = NOW - timedelta(days=days_ago)
    return day.replace(hour=hour, minute=0, second=0)


class RecordingStore:
    """Delegates to a real store, records every call and can be told to fail."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []
        self.fail_with = None
        self.before_query = None

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    def query_orders(self, predicates, order_by, limit, start_after=None):
        self.calls.append(("query_orders", tuple(predicates), start_after))
        self._maybe_fail()
        if self.before_query is not None:
            hook, self.before_query = self.before_query, None
            hook()
        return self.inner.query_orders(predicates, order_by, limit, start_after=start_after)

    def find_orders(self, field, value):
        self.calls.append(("find_orders", field, value))
        self._maybe_fail()
        return self.inner.find_orders(field, value)

    def update_order_fields(self, order_id, fields):
        self.calls.append(("update_order_fields", order_id, dict(fields)))
        self._maybe_fail()
        return self.inner.update_order_fields(order_id, fields)

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture(autouse=True)
def test_config(tmp_path):
    set_config_for_test(log_level="WARNING", data_dir=str(tmp_path / "data"))
    yield get_config()
    set_config_for_test()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def campus_orders():
    """15 orders: 3 delivered today, 4 pending today, the rest spread over 40 days."""
    return [
        order_row(1, at(0, 14), "Delivered", delivered_at=at(0, 14) + timedelta(minutes=20)),
        order_row(2, at(0, 11), "Delivered", delivered_at=at(0, 11) + timedelta(minutes=20)),
        order_row(3, at(0, 9), "Delivered", delivered_at=at(0, 9) + timedelta(minutes=20)),
        order_row(4, at(0, 13)),
        order_row(5, at(0, 12)),
        order_row(6, at(0, 10)),
        order_row(7, at(0, 8)),
        order_row(8, at(1, 12), "Delivered", delivered_at=at(1, 13)),
        order_row(9, at(1, 10), "Delivered", delivered_at=at(1, 11)),
        order_row(10, at(3, 12), "In Transit"),
        order_row(11, at(3, 11), "In Transit"),
        order_row(12, at(3, 10), "In Transit"),
        order_row(13, at(20, 12), "Cancelled"),
        order_row(14, at(40, 12), "Delivered", delivered_at=at(40, 13)),
        order_row(15, at(40, 10), "Delivered", delivered_at=at(40, 11)),
    ]


@pytest.fixture
def make_store(tmp_path):
    def _make(orders, items=None, menu=None):
        return CsvOrderStore(data_dir=write_data(tmp_path / "data", orders, items, menu))
    return _make


@pytest.fixture
def store(make_store, campus_orders):
    return make_store(campus_orders)


@pytest.fixture
def recording(store):
    return RecordingStore(store)
