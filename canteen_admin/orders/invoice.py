from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ..data.models import DeliveryStatus, OrderRecord, normalize_status

StatusTone = Literal["success", "in_progress", "danger", "pending"]

STATUS_NOTES = {
    DeliveryStatus.NOT_DELIVERED: "Your order is being prepared.",
    DeliveryStatus.IN_TRANSIT: "Your order is on the way.",
    DeliveryStatus.DELIVERED: "Your order has been delivered.",
    DeliveryStatus.CANCELLED: "This order has been cancelled.",
}


class InvoiceSummary(BaseModel):
    """Figures shown on an invoice detail card."""
    invoice_number: str = Field(description="Invoice number")
    customer_name: str = Field(description="Customer full name")
    item_count: int = Field(description="Total quantity across all lines")
    subtotal: float = Field(description="Sum of line subtotals")
    tax_rate: float = Field(description="Tax rate applied to the subtotal")
    tax_amount: float = Field(description="subtotal * tax_rate")
    total_amount: float = Field(description="Amount charged")
    status: DeliveryStatus = Field(description="Delivery status")
    tone: StatusTone = Field(description="Display category of the status")
    note: str = Field(description="Customer-facing status note")


STATUS_TONES: dict[DeliveryStatus, StatusTone] = {
    DeliveryStatus.NOT_DELIVERED: "pending",
    DeliveryStatus.IN_TRANSIT: "in_progress",
    DeliveryStatus.DELIVERED: "success",
    DeliveryStatus.CANCELLED: "danger",
}


def status_tone(status: str | DeliveryStatus | None) -> StatusTone:
    """Classify a status label for display. Unknown labels are 'pending'."""
    try:
        return STATUS_TONES[normalize_status(status)]
    except ValueError:
        return "pending"


def tax_amount(order: OrderRecord) -> float:
    return round(order.subtotal * order.tax, 2) if order.tax else 0.0


def summarize_invoice(order: OrderRecord) -> InvoiceSummary:
    return InvoiceSummary(
        invoice_number=order.invoice_number,
        customer_name=order.customer.name,
        item_count=sum(item.quantity for item in order.items),
        subtotal=order.subtotal,
        tax_rate=order.tax,
        tax_amount=tax_amount(order),
        total_amount=order.total_amount,
        status=order.delivery_status,
        tone=status_tone(order.delivery_status),
        note=STATUS_NOTES[order.delivery_status],
    )
