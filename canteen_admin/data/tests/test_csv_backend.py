import pandas as pd
import pytest

from canteen_admin.conftest import NOW, at, order_row, write_data
from canteen_admin.data.backends.csv_backend import MENU_FILE, ORDERS_FILE, CsvOrderStore
from canteen_admin.data.models import DeliveryStatus, PageCursor, Predicate, SortSpec, normalize_status
from canteen_admin.data.util import get_order_store
from canteen_admin.exceptions import StoreError

NEWEST_FIRST = SortSpec(field="date", descending=True)


def ids(orders):
    return [o.id for o in orders]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Delivered", DeliveryStatus.DELIVERED),
        ("in transit", DeliveryStatus.IN_TRANSIT),
        ("Pending", DeliveryStatus.NOT_DELIVERED),
        ("Processing", DeliveryStatus.IN_TRANSIT),
        ("COMPLETED", DeliveryStatus.DELIVERED),
        ("failed", DeliveryStatus.CANCELLED),
        (None, DeliveryStatus.NOT_DELIVERED),
    ],
)
def test_normalize_status(raw, expected):
    assert normalize_status(raw) is expected


def test_normalize_unknown_status():
    with pytest.raises(ValueError):
        normalize_status("Lost in space")


def test_legacy_labels_are_normalized_on_load(make_store):
    store = make_store([
        order_row(1, at(0, 9), "Pending"),
        order_row(2, at(0, 10), "Processing"),
    ])
    statuses = {o.id: o.delivery_status for o in store.query_orders([], NEWEST_FIRST, 10)}
    assert statuses == {"o01": DeliveryStatus.NOT_DELIVERED, "o02": DeliveryStatus.IN_TRANSIT}

    pending = store.query_orders([Predicate(field="delivery_status", op="==", value=DeliveryStatus.NOT_DELIVERED)], NEWEST_FIRST, 10)
    assert ids(pending) == ["o01"]


def test_record_fields(store):
    order = store.find_orders("invoice_number", "INV-0001")[0]
    assert order.id == "o01"
    assert order.date == at(0, 14)
    assert order.customer.name == "Diya Iyer"
    assert order.customer.email == "diya1@campus.edu"
    assert order.customer.contact_number == "9876500001"
    assert order.tax == pytest.approx(0.05)
    assert [(i.name, i.quantity) for i in order.items] == [("Masala Dosa", 2)]


def test_undelivered_order_has_no_delivery_time(store):
    assert store.find_orders("id", "o04")[0].delivered_at is None


def test_query_filters_and_limit(store):
    predicates = [
        Predicate(field="delivery_status", op="==", value=DeliveryStatus.DELIVERED),
        Predicate(field="date", op=">=", value=at(1, 0)),
    ]
    assert ids(store.query_orders(predicates, NEWEST_FIRST, 10)) == ["o01", "o02", "o03", "o08", "o09"]
    assert ids(store.query_orders(predicates, NEWEST_FIRST, 2)) == ["o01", "o02"]


def test_ascending_sort(store):
    assert ids(store.query_orders([], SortSpec(field="date", descending=False), 3)) == ["o15", "o14", "o13"]


def test_cursor_resumes_after_record(store):
    first = store.query_orders([], NEWEST_FIRST, 4)
    last = first[-1]
    second = store.query_orders([], NEWEST_FIRST, 4, start_after=PageCursor(last_id=last.id, last_sort_value=last.date))

    assert ids(first) == ["o01", "o04", "o05", "o02"]
    assert ids(second) == ["o06", "o03", "o07", "o08"]


def test_cursor_handles_equal_timestamps(make_store):
    same = at(0, 12)
    store = make_store([order_row(n, same) for n in range(1, 6)])

    seen = []
    cursor = None
    while True:
        page = store.query_orders([], NEWEST_FIRST, 2, start_after=cursor)
        if not page:
            break
        seen.extend(ids(page))
        cursor = PageCursor(last_id=page[-1].id, last_sort_value=page[-1].date)

    assert seen == ["o05", "o04", "o03", "o02", "o01"]


def test_unknown_field_is_a_store_error(store):
    with pytest.raises(StoreError):
        store.find_orders("colour", "red")


def test_update_fields(store):
    store.update_order_fields("o04", {"delivery_status": DeliveryStatus.DELIVERED, "delivered_at": NOW})

    on_disk = pd.read_csv(store.data_dir / ORDERS_FILE, dtype={"id": str})
    row = on_disk[on_disk["id"] == "o04"].iloc[0]
    assert row["delivery_status"] == "Delivered"
    assert pd.Timestamp(row["delivered_at"]) == pd.Timestamp(NOW)


def test_update_rejects_read_only_fields(store):
    with pytest.raises(StoreError):
        store.update_order_fields("o04", {"invoice_number": "INV-HACK"})
    assert store.find_orders("id", "o04")[0].invoice_number == "INV-0004"


def test_update_unknown_order(store):
    with pytest.raises(StoreError):
        store.update_order_fields("missing", {"delivery_status": DeliveryStatus.DELIVERED})


def test_failed_order_write_leaves_store_unchanged(store):
    orders_csv = store.data_dir / ORDERS_FILE
    orders_csv.unlink()
    orders_csv.mkdir()

    with pytest.raises(StoreError):
        store.update_order_fields("o11", {"delivery_status": DeliveryStatus.DELIVERED, "delivered_at": NOW})

    order = store.find_orders("id", "o11")[0]
    assert order.delivery_status is DeliveryStatus.IN_TRANSIT
    assert order.delivered_at is None


def test_failed_menu_write_leaves_store_unchanged(make_store):
    store = make_store(
        [order_row(1, NOW)],
        menu=[{"id": "m1", "name": "Samosa", "price": 20.0, "image": "https://images.example.com/canteen/samosa.jpg", "is_available": True}],
    )
    menu_csv = store.data_dir / MENU_FILE
    menu_csv.unlink()
    menu_csv.mkdir()

    with pytest.raises(StoreError):
        store.update_menu_item("m1", {"is_available": False})
    with pytest.raises(StoreError):
        store.delete_menu_item("m1")
    with pytest.raises(StoreError):
        store.add_menu_item("Tea", 10.0, "https://images.example.com/canteen/tea.jpg")

    assert [(i.id, i.is_available) for i in store.list_menu_items()] == [("m1", True)]


def test_missing_data_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        CsvOrderStore(data_dir=tmp_path / "nowhere")


def test_missing_required_file(tmp_path):
    data_dir = write_data(tmp_path / "data", [order_row(1, NOW)])
    (data_dir / ORDERS_FILE).unlink()
    with pytest.raises(FileNotFoundError):
        CsvOrderStore(data_dir=data_dir)


def test_factory_uses_configured_data_dir(store):
    assert ids(get_order_store().query_orders([], NEWEST_FIRST, 1)) == ["o01"]


def test_factory_rejects_unknown_kind():
    with pytest.raises(ValueError):
        get_order_store("firestore")


def test_default_data_dir_comes_from_config(store):
    assert CsvOrderStore().data_dir == store.data_dir
