import pytest

from canteen_admin.conftest import NOW, order_row
from canteen_admin.data.backends.csv_backend import CsvOrderStore
from canteen_admin.exceptions import NotFound, ValidationError
from canteen_admin.menu.catalog import MenuCatalog

DOSA_IMAGE = "https://images.example.com/canteen/masala-dosa.jpg"


@pytest.fixture
def menu_store(make_store):
    return make_store(
        [order_row(1, NOW)],
        menu=[
            {"id": "m1", "name": "Masala Dosa", "price": 60.0, "image": DOSA_IMAGE, "is_available": True},
            {"id": "m2", "name": "Samosa", "price": 20.0, "image": "https://images.example.com/canteen/samosa.jpg", "is_available": False},
        ],
    )


@pytest.fixture
def catalog(menu_store):
    return MenuCatalog(menu_store)


def test_list_items(catalog):
    items = catalog.list_items()
    assert [(i.id, i.is_available) for i in items] == [("m1", True), ("m2", False)]


def test_menu_file_is_optional(make_store):
    assert MenuCatalog(make_store([order_row(1, NOW)])).list_items() == []


def test_add_item_starts_unavailable(catalog, menu_store):
    item = catalog.add_item("  Cold Coffee ", "55", "https://images.example.com/canteen/cold-coffee.jpg")

    assert item.name == "Cold Coffee"
    assert item.price == 55.0
    assert item.is_available is False
    reloaded = CsvOrderStore(data_dir=menu_store.data_dir)
    assert reloaded.get_menu_item(item.id) == item


@pytest.mark.parametrize(
    "name,price,image",
    [
        ("", 10, DOSA_IMAGE),
        ("Tea", 10, ""),
        ("Tea", 0, DOSA_IMAGE),
        ("Tea", -5, DOSA_IMAGE),
        ("Tea", "ten", DOSA_IMAGE),
    ],
)
def test_add_item_validation(catalog, name, price, image):
    with pytest.raises(ValidationError):
        catalog.add_item(name, price, image)
    assert len(catalog.list_items()) == 2


def test_update_item(catalog):
    item = catalog.update_item("m2", "Punjabi Samosa", 25, "https://images.example.com/canteen/samosa-2.jpg", True)

    assert item.name == "Punjabi Samosa"
    assert item.price == 25.0
    assert item.is_available is True


def test_toggle_availability(catalog):
    assert catalog.toggle_availability("m1").is_available is False
    assert catalog.toggle_availability("m1").is_available is True


def test_delete_item(catalog):
    catalog.delete_item("m2")
    assert [i.id for i in catalog.list_items()] == ["m1"]


@pytest.mark.parametrize("action", ["get", "toggle", "delete", "update"])
def test_unknown_item(catalog, action):
    calls = {
        "get": lambda: catalog.get_item("nope"),
        "toggle": lambda: catalog.toggle_availability("nope"),
        "delete": lambda: catalog.delete_item("nope"),
        "update": lambda: catalog.update_item("nope", "Tea", 10, DOSA_IMAGE, True),
    }
    with pytest.raises(NotFound):
        calls[action]()
