"""Normalization of store verification results."""

from commerce_bridge.bridge.errors import UnknownStoreResultError
from commerce_bridge.bridge.models import UnverifiedPurchase, VerifiedPurchase
from commerce_bridge.store.models import (
    UnverifiedTransaction,
    VerificationResult,
    VerifiedTransaction,
)


def normalize_verification(
    result: VerificationResult,
) -> VerifiedPurchase | UnverifiedPurchase:
    """Split a store verification result into a usable or rejected record.

    Args:
        result: Verification envelope returned by the store.

    Returns:
        VerifiedPurchase carrying the transaction and its receipt, or
        UnverifiedPurchase carrying the transaction ID, receipt and cause.

    Raises:
        UnknownStoreResultError: If the envelope is neither variant.
    """
    if isinstance(result, VerifiedTransaction):
        return VerifiedPurchase(
            transaction=result.transaction,
            receipt=result.jws_representation,
        )
    if isinstance(result, UnverifiedTransaction):
        return UnverifiedPurchase(
            transaction_id=result.transaction.id,
            receipt=result.jws_representation,
            cause=result.cause,
        )
    raise UnknownStoreResultError(
        f"Unknown verification result from the store: {type(result).__name__}"
    )
