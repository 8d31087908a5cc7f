"""FastAPI router exposing the bridge operations to the host application."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from commerce_bridge.bridge.errors import BridgeError, BridgeErrorCode
from commerce_bridge.bridge.models import (
    PurchaseOptions,
    PurchasePending,
    PurchaseSuccess,
    PurchaseUserCancelled,
    TransactionMessage,
)
from commerce_bridge.bridge.service import CommerceBridge, get_commerce_bridge
from commerce_bridge.store.client import StoreError
from commerce_bridge.store.models import Product

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commerce", tags=["Commerce"])

BridgeDep = Annotated[CommerceBridge, Depends(get_commerce_bridge)]

# HTTP status per bridge error code
ERROR_STATUS: dict[BridgeErrorCode, int] = {
    BridgeErrorCode.PRODUCT_FETCH_ERROR: status.HTTP_502_BAD_GATEWAY,
    BridgeErrorCode.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BridgeErrorCode.NOT_A_SUBSCRIPTION: status.HTTP_422_UNPROCESSABLE_CONTENT,
    BridgeErrorCode.PURCHASE_PENDING: status.HTTP_202_ACCEPTED,
    BridgeErrorCode.PURCHASE_CANCELLED: status.HTTP_409_CONFLICT,
    BridgeErrorCode.PURCHASE_FAILED: status.HTTP_422_UNPROCESSABLE_CONTENT,
    BridgeErrorCode.ELIGIBILITY_CHECK_FAILED: status.HTTP_502_BAD_GATEWAY,
    BridgeErrorCode.UNSUPPORTED_PLATFORM_VERSION: status.HTTP_501_NOT_IMPLEMENTED,
    BridgeErrorCode.RESTORE_FAILED: status.HTTP_409_CONFLICT,
    BridgeErrorCode.TRANSACTION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BridgeErrorCode.SYNC_FAILED: status.HTTP_502_BAD_GATEWAY,
    BridgeErrorCode.STOREFRONT_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class FetchProductsRequest(BaseModel):
    """Product lookup request."""

    identifiers: list[str] = Field(
        ..., min_length=1, description="Product identifiers (at least one)"
    )


class PurchaseRequest(BaseModel):
    """Purchase request."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", description="Product to purchase")
    options: PurchaseOptions | None = Field(None, description="Purchase options")


@contextmanager
def translate_errors() -> Iterator[None]:
    """Convert bridge and store errors into HTTP errors."""
    try:
        yield
    except BridgeError as e:
        logger.info("Bridge operation failed: %s (%s)", e.code.value, e.message)
        raise HTTPException(
            status_code=ERROR_STATUS.get(e.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail=e.to_dict(),
        ) from e
    except StoreError as e:
        logger.error("Store error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "store_error", "message": str(e), "details": e.details},
        ) from e


def outcome_error(outcome: PurchasePending | PurchaseUserCancelled) -> BridgeError:
    """Map a non-success purchase outcome onto its boundary error."""
    if isinstance(outcome, PurchasePending):
        return BridgeError(
            BridgeErrorCode.PURCHASE_PENDING,
            "This transaction is still pending but may complete in the future. "
            "If it completes, it will be delivered as a transaction update.",
            details={"product_id": outcome.product_id},
        )
    return BridgeError(
        BridgeErrorCode.PURCHASE_CANCELLED,
        "This transaction has been cancelled by the user.",
        details={"product_id": outcome.product_id},
    )


@router.get("/can-make-payments")
async def can_make_payments(bridge: BridgeDep) -> dict[str, bool]:
    """Whether the user can authorize payments."""
    return {"canMakePayments": bridge.can_make_payments()}


@router.post("/products")
async def fetch_products(
    request: FetchProductsRequest,
    bridge: BridgeDep,
) -> list[Product]:
    """Fetch product descriptors. Unknown identifiers are omitted."""
    with translate_errors():
        return await bridge.fetch_products(request.identifiers)


@router.post("/purchase")
async def purchase(request: PurchaseRequest, bridge: BridgeDep) -> PurchaseSuccess:
    """Purchase a product.

    Pending and user-cancelled purchases are reported as errors
    (purchase_pending, purchase_cancelled).
    """
    with translate_errors():
        outcome = await bridge.purchase(request.product_id, request.options)
        if not isinstance(outcome, PurchaseSuccess):
            raise outcome_error(outcome)
        return outcome


@router.get("/products/{product_id}/win-back-eligibility")
async def win_back_eligibility(
    product_id: str,
    bridge: BridgeDep,
    offer_id: Annotated[str, Query(alias="offerId")],
) -> dict[str, bool]:
    """Check win-back offer eligibility."""
    with translate_errors():
        eligible = await bridge.is_win_back_offer_eligible(product_id, offer_id)
    return {"eligible": eligible}


@router.get("/products/{product_id}/intro-offer-eligibility")
async def intro_offer_eligibility(product_id: str, bridge: BridgeDep) -> dict[str, bool]:
    """Check introductory offer eligibility."""
    with translate_errors():
        eligible = await bridge.is_introductory_offer_eligible(product_id)
    return {"eligible": eligible}


@router.get("/transactions")
async def list_transactions(bridge: BridgeDep) -> list[dict[str, Any]]:
    """List every verified transaction."""
    with translate_errors():
        transactions: list[TransactionMessage] = await bridge.list_all_transactions()
    return [t.model_dump(mode="json", by_alias=True) for t in transactions]


@router.post("/transactions/{transaction_id}/finish")
async def finish_transaction(transaction_id: int, bridge: BridgeDep) -> dict[str, str]:
    """Finish (acknowledge) a transaction."""
    with translate_errors():
        await bridge.finish_transaction(transaction_id)
    return {"status": "ok"}


@router.post("/restore")
async def restore_purchases(bridge: BridgeDep) -> dict[str, str]:
    """Restore purchases; restored transactions arrive as updates."""
    with translate_errors():
        await bridge.restore_purchases()
    return {"status": "ok"}


@router.get("/storefront/country-code")
async def storefront_country_code(bridge: BridgeDep) -> dict[str, str]:
    """Country code of the current storefront."""
    with translate_errors():
        country_code = await bridge.fetch_storefront_country_code()
    return {"countryCode": country_code}


@router.post("/sync")
async def sync_with_store(bridge: BridgeDep) -> dict[str, str]:
    """Sync with the store."""
    with translate_errors():
        await bridge.sync_with_store()
    return {"status": "ok"}


@router.post("/listener/start")
async def start_listening(bridge: BridgeDep) -> dict[str, str]:
    """Start (or restart) the transaction listener."""
    await bridge.start_listening()
    return {"state": bridge.listener.state.value}


@router.post("/listener/stop")
async def stop_listening(bridge: BridgeDep) -> dict[str, str]:
    """Stop the transaction listener."""
    await bridge.stop_listening()
    return {"state": bridge.listener.state.value}


@router.get("/status")
async def bridge_status(bridge: BridgeDep) -> dict[str, Any]:
    """Bridge status."""
    return bridge.get_status()
