# =============================================================================
# Centralised exceptions for the admin console
# =============================================================================

from typing import Any, Dict, Optional


class CanteenAdminError(Exception):
    """
    Base exception for the admin console.

    Every custom error extends this class. `code` is stable and meant for
    callers; `detail` is the human readable message shown to the admin.
    """
    code: str = "INTERNAL_ERROR"
    detail: str = "Unexpected error"

    def __init__(self, detail: Optional[str] = None, extra: Dict[str, Any] = None):
        self.detail = detail or self.__class__.detail
        self.extra = extra or {}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for logging."""
        return {
            "code": self.code,
            "message": self.detail,
            **self.extra
        }


# =============================================================================
# STORE
# =============================================================================

class StoreError(CanteenAdminError):
    """The backing document store could not complete a request."""
    code = "STORE_ERROR"
    detail = "The order store could not complete the request"


# =============================================================================
# ORDER LISTING / LOOKUP
# =============================================================================

class FetchFailed(CanteenAdminError):
    """A read against the store failed. Safe to retry."""
    code = "FETCH_FAILED"
    detail = "Failed to load orders. Please try again."


class NotFound(CanteenAdminError):
    """No record matched the requested identifier."""
    code = "NOT_FOUND"
    detail = "Invoice not found"


class DuplicateInvoice(CanteenAdminError):
    """More than one order carries the same invoice number."""
    code = "DUPLICATE_INVOICE"
    detail = "More than one order matches this invoice number"


class TransitionRejected(CanteenAdminError):
    """The delivery transition precondition does not hold."""
    code = "TRANSITION_REJECTED"
    detail = "Order cannot be marked as delivered"


class PersistenceFailed(CanteenAdminError):
    """Writing the delivery transition to the store failed."""
    code = "PERSISTENCE_FAILED"
    detail = "Failed to update order status"


# =============================================================================
# MENU
# =============================================================================

class ValidationError(CanteenAdminError):
    """Invalid input for a menu item."""
    code = "VALIDATION_ERROR"
    detail = "Please fill all fields and upload an image"
