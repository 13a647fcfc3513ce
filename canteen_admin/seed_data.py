#!/usr/bin/env python3
"""
seed_data.py

Generates fake campus canteen data to CSVs under a local folder (default: sample_data).

Entities:
- menu, orders, order_items

Run:
  python -m canteen_admin.seed_data --orders 200 --days 45
"""

from __future__ import annotations
import argparse
import csv
import os
import random
import sys
from datetime import datetime, timedelta
from math import pi, sin
from typing import Dict, List, Optional, Tuple

from .config import get_config
from .data.backends.csv_backend import (
    MENU_COLUMNS,
    MENU_FILE,
    ORDER_COLUMNS,
    ORDER_ITEM_COLUMNS,
    ORDER_ITEMS_FILE,
    ORDERS_FILE,
)
from .data.models import DeliveryStatus
from .logging import get_logger

# -----------------------------
# Config & helper structures
# -----------------------------

MENU = {
    "Masala Dosa": 60.0,
    "Idli Vada": 45.0,
    "Veg Biryani": 110.0,
    "Chicken Biryani": 150.0,
    "Paneer Roll": 80.0,
    "Veg Sandwich": 50.0,
    "Cold Coffee": 55.0,
    "Masala Chai": 15.0,
    "Samosa": 20.0,
    "Fresh Lime Soda": 35.0,
}

FIRST_NAMES = ["Aarav", "Diya", "Ishaan", "Meera", "Kabir", "Ananya", "Rohan", "Sara", "Vihaan", "Nisha"]
LAST_NAMES = ["Sharma", "Iyer", "Khan", "Patel", "Das", "Reddy", "Menon", "Singh", "Joshi", "Rao"]
DEPARTMENTS = ["Computer Science", "Mechanical", "Electrical", "Civil", "Biotech", "Management"]
BLOCKS = ["Block A", "Block B", "Library", "Hostel 1", "Hostel 2", "Admin Building"]

TAX_RATE = 0.05

# Older orders are more likely to have reached a terminal status
STATUS_WEIGHTS_RECENT = {
    DeliveryStatus.NOT_DELIVERED: 0.5,
    DeliveryStatus.IN_TRANSIT: 0.3,
    DeliveryStatus.DELIVERED: 0.15,
    DeliveryStatus.CANCELLED: 0.05,
}
STATUS_WEIGHTS_OLD = {
    DeliveryStatus.NOT_DELIVERED: 0.05,
    DeliveryStatus.IN_TRANSIT: 0.05,
    DeliveryStatus.DELIVERED: 0.8,
    DeliveryStatus.CANCELLED: 0.1,
}


# -----------------------------
# Utility functions
# -----------------------------

def ensure_dir(path: str) -> None:
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)

def rand_doc_id() -> str:
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    return "".join(random.choices(alphabet, k=20))

def meal_hour_weight(hour: int) -> float:
    """
    Smooth lunch/evening-snack peaks: combine two sinusoids for ~13:00 and ~17:00.
    """
    peak1 = 0.5 * (1 + sin((hour - 7) / 24 * 2 * pi))
    peak2 = 0.5 * (1 + sin((hour - 11) / 24 * 2 * pi))
    return 0.2 + 0.6 * peak1 + 0.4 * peak2

def price_round(p: float) -> float:
    return round(max(p, 0.01), 2)


# -----------------------------
# Core generators
# -----------------------------

def gen_menu() -> List[Dict]:
    items = []
    for name, price in MENU.items():
        slug = name.lower().replace(" ", "-")
        items.append({
            "id": rand_doc_id(),
            "name": name,
            "price": price,
            "image": f"https://images.example.com/canteen/{slug}.jpg",
            "is_available": random.random() < 0.8,
        })
    return items

def gen_customer() -> Dict:
    first, last = random.choice(FIRST_NAMES), random.choice(LAST_NAMES)
    return {
        "customer_name": f"{first} {last}",
        "customer_email": f"{first.lower()}.{last.lower()}{random.randint(1, 99)}@campus.edu",
        "customer_contact_number": f"9{random.randint(100000000, 999999999)}",
        "customer_department": random.choice(DEPARTMENTS),
        "customer_address": random.choice(BLOCKS),
    }

def gen_order_ts(now: datetime, days: int) -> datetime:
    hours = list(range(8, 21))
    hour = random.choices(hours, weights=[meal_hour_weight(h) for h in hours])[0]
    day = now.date() - timedelta(days=random.randint(0, days - 1))
    ts = datetime(day.year, day.month, day.day, hour, random.randint(0, 59), random.randint(0, 59))
    # Orders "today" cannot be in the future
    return min(ts, now)

def gen_orders_and_items(menu: List[Dict], n_orders: int, days: int, now: datetime) -> Tuple[List[Dict], List[Dict]]:
    orders, items = [], []
    timestamps = sorted(gen_order_ts(now, days) for _ in range(n_orders))
    for seq, ts in enumerate(timestamps, start=1):
        order_id = rand_doc_id()
        age_days = (now - ts).days
        weights = STATUS_WEIGHTS_OLD if age_days > 2 else STATUS_WEIGHTS_RECENT
        status = random.choices(list(weights), weights=list(weights.values()))[0]

        lines = random.sample(menu, k=random.randint(1, 4))
        subtotal = 0.0
        for line_no, dish in enumerate(lines, start=1):
            qty = random.choices([1, 2, 3], weights=[0.7, 0.2, 0.1])[0]
            line_total = price_round(dish["price"] * qty)
            subtotal += line_total
            items.append({
                "order_id": order_id,
                "line_no": line_no,
                "name": dish["name"],
                "price": dish["price"],
                "quantity": qty,
                "subtotal": line_total,
            })

        subtotal = price_round(subtotal)
        delivered_at = ""
        if status is DeliveryStatus.DELIVERED:
            delivered_at = min(ts + timedelta(minutes=random.randint(10, 45)), now).isoformat(sep=" ")

        orders.append({
            "id": order_id,
            "invoice_number": f"INV-{ts:%Y%m%d}-{seq:04d}",
            "date": ts.isoformat(sep=" "),
            "delivery_status": status.value,
            **gen_customer(),
            "subtotal": subtotal,
            "tax": TAX_RATE,
            "total_amount": price_round(subtotal * (1 + TAX_RATE)),
            "delivered_at": delivered_at,
        })
    return orders, items

def write_csv(path: str, rows: List[Dict], headers: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=headers)
        w.writeheader()
        for r in rows:
            w.writerow(r)


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()
    logger = get_logger(__name__)

    parser = argparse.ArgumentParser(description="Generate fake canteen orders and menu to CSVs.")
    parser.add_argument("--orders", type=int, default=config.default_seed_orders, help="Number of orders to generate.")
    parser.add_argument("--days", type=int, default=config.default_seed_days, help="Number of days of order history.")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if CSVs already exist.")
    args = parser.parse_args(argv)

    if args.days < 1 or args.orders < 0:
        parser.error("--days must be >= 1 and --orders must be >= 0")

    random.seed(args.seed)

    outdir = args.output_dir
    ensure_dir(outdir)

    files = {
        "menu": os.path.join(outdir, MENU_FILE),
        "orders": os.path.join(outdir, ORDERS_FILE),
        "order_items": os.path.join(outdir, ORDER_ITEMS_FILE),
    }
    if args.no_overwrite:
        for p in files.values():
            if os.path.exists(p):
                print(f"Refusing to overwrite existing file: {p}", file=sys.stderr)
                return 2

    now = datetime.now().replace(microsecond=0)
    menu = gen_menu()
    orders, items = gen_orders_and_items(menu, args.orders, args.days, now)

    write_csv(files["menu"], menu, MENU_COLUMNS)
    write_csv(files["orders"], orders, ORDER_COLUMNS)
    write_csv(files["order_items"], items, ORDER_ITEM_COLUMNS)

    logger.info(f"Generated data in {outdir}: menu: {len(menu)} | orders: {len(orders)} | order_items: {len(items)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
