from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class DeliveryStatus(str, Enum):
    """Closed set of delivery lifecycle labels."""
    NOT_DELIVERED = "Not Delivered"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# Labels written by older call sites, mapped onto the canonical vocabulary.
_LEGACY_STATUS = {
    "pending": DeliveryStatus.NOT_DELIVERED,
    "processing": DeliveryStatus.IN_TRANSIT,
    "completed": DeliveryStatus.DELIVERED,
    "failed": DeliveryStatus.CANCELLED,
}


def normalize_status(value: str | DeliveryStatus | None) -> DeliveryStatus:
    """Map a raw status label onto DeliveryStatus.

    Matching is case-insensitive. A missing label is treated as
    "Not Delivered", which is what the checkout writes for new orders.

    Raises:
        ValueError: If the label is not part of either vocabulary.
    """
    if isinstance(value, DeliveryStatus):
        return value
    if value is None or not str(value).strip():
        return DeliveryStatus.NOT_DELIVERED
    key = str(value).strip().lower()
    for status in DeliveryStatus:
        if status.value.lower() == key:
            return status
    if key in _LEGACY_STATUS:
        return _LEGACY_STATUS[key]
    raise ValueError(f"Unknown delivery status: {value!r}")


class CustomerInfo(BaseModel):
    """Contact details captured at checkout."""
    name: str = Field(description="Customer full name")
    email: str = Field(default="", description="Customer email address")
    contact_number: str = Field(default="", description="Customer phone number")
    department: str = Field(default="", description="Campus department")
    address: str = Field(default="", description="Delivery location on campus")


class OrderItem(BaseModel):
    """Single line of an order."""
    name: str = Field(description="Menu item name")
    price: float = Field(description="Unit price")
    quantity: int = Field(description="Quantity ordered")
    subtotal: float = Field(description="price * quantity")


class OrderRecord(BaseModel):
    """An order as stored in the order collection."""
    id: str = Field(description="Store-assigned identifier")
    invoice_number: str = Field(description="Human-facing invoice number, used for lookup")
    date: datetime = Field(description="Order creation timestamp")
    delivery_status: DeliveryStatus = Field(default=DeliveryStatus.NOT_DELIVERED, description="Delivery lifecycle label")
    customer: CustomerInfo = Field(description="Customer contact details")
    items: List[OrderItem] = Field(default_factory=list, description="Ordered line items")
    subtotal: float = Field(default=0.0, description="Sum of line subtotals")
    tax: float = Field(default=0.0, description="Tax rate applied to the subtotal (0.05 = 5%)")
    total_amount: float = Field(default=0.0, description="Amount charged")
    delivered_at: Optional[datetime] = Field(default=None, description="Set once, when the order is delivered")

    @field_validator("delivery_status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return normalize_status(value)

    @property
    def is_delivered(self) -> bool:
        return self.delivery_status is DeliveryStatus.DELIVERED
