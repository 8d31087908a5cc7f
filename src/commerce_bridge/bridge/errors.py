"""Errors reported by the Commerce Bridge."""

from enum import Enum
from typing import Any


class BridgeErrorCode(str, Enum):
    """Error codes reported to the caller of a bridge operation."""

    PRODUCT_FETCH_ERROR = "product_fetch_error"
    PRODUCT_NOT_FOUND = "product_not_found"
    NOT_A_SUBSCRIPTION = "not_a_subscription"
    PURCHASE_PENDING = "purchase_pending"
    PURCHASE_CANCELLED = "purchase_cancelled"
    PURCHASE_FAILED = "purchase_failed"
    ELIGIBILITY_CHECK_FAILED = "eligibility_check_failed"
    UNSUPPORTED_PLATFORM_VERSION = "unsupported_platform_version"
    RESTORE_FAILED = "restore_failed"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    SYNC_FAILED = "sync_failed"
    STOREFRONT_UNAVAILABLE = "storefront_unavailable"


class BridgeError(Exception):
    """Error from a bridge operation.

    Attributes:
        code: Error code.
        message: Human-readable message.
        details: Extra context (product ID, failure map, ...).
        cause: Underlying error, when the failure wraps one.
    """

    def __init__(
        self,
        code: BridgeErrorCode,
        message: str,
        details: dict[Any, Any] | None = None,
        cause: BaseException | str | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the host API."""
        body: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }
        if self.cause is not None:
            body["cause"] = str(self.cause)
        return body

    def __repr__(self) -> str:
        return f"BridgeError({self.code.value!r}, {self.message!r})"


class UnknownStoreResultError(RuntimeError):
    """The store returned a result variant the bridge does not know.

    This is a programming defect, not a recoverable condition. It is never
    mapped onto a known outcome.
    """


def product_not_found(product_id: str) -> BridgeError:
    return BridgeError(
        BridgeErrorCode.PRODUCT_NOT_FOUND,
        "The store has failed to fetch this product.",
        details={"product_id": product_id},
    )


def not_a_subscription(product_id: str) -> BridgeError:
    return BridgeError(
        BridgeErrorCode.NOT_A_SUBSCRIPTION,
        "Product is not a subscription.",
        details={"product_id": product_id},
    )
