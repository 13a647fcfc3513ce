"""
Invoice lookup and the one-way "mark as delivered" transition.

The found order is a private copy: marking it delivered does not touch any
row an OrderListing may hold for the same order.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..config import get_config
from ..data.interface import OrderStore
from ..data.models import DeliveryStatus, OrderRecord
from ..exceptions import (
    CanteenAdminError,
    DuplicateInvoice,
    FetchFailed,
    NotFound,
    PersistenceFailed,
    StoreError,
    TransitionRejected,
)
from ..logging import get_logger

DELIVERED_MESSAGE = "Order has been marked as delivered!"


class LookupState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"
    TRANSITIONING = "transitioning"


class OrderLookup:
    """Resolve one order by invoice number and confirm its delivery."""

    def __init__(
        self,
        store: OrderStore,
        strict: Optional[bool] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.strict = get_config().strict_invoice_lookup if strict is None else strict
        self.clock = clock
        self.logger = get_logger(__name__)

        self.state = LookupState.IDLE
        self.identifier = ""
        self.order: Optional[OrderRecord] = None
        self.error: Optional[CanteenAdminError] = None
        self.success_message: Optional[str] = None

    def lookup(self, identifier: str) -> LookupState:
        """Find the order whose invoice number equals `identifier`.

        Blank input is ignored. When several orders share the invoice number
        the first one in store order wins, unless strict mode is on.
        """
        invoice_number = (identifier or "").strip()
        if not invoice_number:
            return self.state

        self.identifier = invoice_number
        self.state = LookupState.SEARCHING
        self.error = None
        self.success_message = None

        try:
            matches = self.store.find_orders("invoice_number", invoice_number)
        except StoreError as e:
            self.logger.error(f"Failed to fetch invoice {invoice_number}: {e}")
            return self._fail(
                LookupState.ERROR,
                FetchFailed(f"Failed to fetch invoice data: {e.detail}", extra={"invoice_number": invoice_number}),
            )

        if not matches:
            self.logger.info(f"Invoice {invoice_number} not found")
            return self._fail(LookupState.NOT_FOUND, NotFound(extra={"invoice_number": invoice_number}))

        if len(matches) > 1:
            if self.strict:
                self.logger.error(f"{len(matches)} orders share invoice {invoice_number}")
                return self._fail(
                    LookupState.ERROR,
                    DuplicateInvoice(extra={"invoice_number": invoice_number, "order_ids": [m.id for m in matches]}),
                )
            self.logger.warning(f"{len(matches)} orders share invoice {invoice_number}, using {matches[0].id}")

        self.order = matches[0]
        self.state = LookupState.FOUND
        self.logger.debug(f"Found order {self.order.id} for invoice {invoice_number}")
        return self.state

    def _fail(self, state: LookupState, error: CanteenAdminError) -> LookupState:
        self.order = None
        self.error = error
        self.state = state
        return state

    @property
    def can_mark_delivered(self) -> bool:
        return self.state == LookupState.FOUND and self.order is not None and not self.order.is_delivered

    def _check_deliverable(self) -> OrderRecord:
        if self.state != LookupState.FOUND or self.order is None:
            raise TransitionRejected("No order selected")
        if self.order.is_delivered:
            raise TransitionRejected("Order is already delivered", extra={"order_id": self.order.id})
        return self.order

    def mark_delivered(self) -> bool:
        """Persist the Delivered status for the found order.

        Returns False without contacting the store when there is no found
        order or it is already delivered. On a failed write the in-memory
        order keeps its previous status and `error` is set.
        """
        try:
            order = self._check_deliverable()
        except TransitionRejected as e:
            self.logger.warning(f"Delivery transition refused: {e.detail}")
            return False

        delivered_at = self.clock()
        self.state = LookupState.TRANSITIONING
        self.error = None
        self.success_message = None

        try:
            self.store.update_order_fields(
                order.id,
                {"delivery_status": DeliveryStatus.DELIVERED, "delivered_at": delivered_at},
            )
        except StoreError as e:
            self.logger.error(f"Failed to update order {order.id}: {e}")
            self.error = PersistenceFailed(
                f"Failed to update order status: {e.detail}", extra={"order_id": order.id}
            )
            self.state = LookupState.FOUND
            return False

        self.order = order.model_copy(
            update={"delivery_status": DeliveryStatus.DELIVERED, "delivered_at": delivered_at}
        )
        self.success_message = DELIVERED_MESSAGE
        self.state = LookupState.FOUND
        self.logger.info(f"Order {order.id} ({order.invoice_number}) marked as delivered")
        return True

    def reset(self) -> LookupState:
        self.order = None
        self.error = None
        self.success_message = None
        self.identifier = ""
        self.state = LookupState.IDLE
        return self.state
