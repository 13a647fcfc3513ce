from __future__ import annotations

from typing import Literal

from .backends.csv_backend import CsvOrderStore
from .interface import OrderStore
from ..config import get_config


def get_order_store(kind: Literal["csv"] = "csv") -> OrderStore:
    if kind == "csv":
        # Reads from configured CSV folder
        config = get_config()
        return CsvOrderStore(data_dir=config.data_dir)
    raise ValueError(f"Unknown order store kind: {kind}")
