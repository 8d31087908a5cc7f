"""Purchase orchestration."""

import logging
from uuid import UUID

from commerce_bridge.bridge.callbacks import TransactionUpdateDispatcher
from commerce_bridge.bridge.catalog import ProductCatalogFetcher
from commerce_bridge.bridge.errors import (
    BridgeError,
    BridgeErrorCode,
    UnknownStoreResultError,
    product_not_found,
)
from commerce_bridge.bridge.models import (
    PurchaseOptions,
    PurchaseOutcome,
    PurchasePending,
    PurchaseSuccess,
    PurchaseUserCancelled,
    UnverifiedPurchase,
)
from commerce_bridge.bridge.translator import translate_transaction
from commerce_bridge.bridge.verification import normalize_verification
from commerce_bridge.store.capabilities import Capability, CapabilityProvider
from commerce_bridge.store.client import StoreClient
from commerce_bridge.store.models import (
    AppAccountTokenOption,
    OfferSignature,
    Product,
    PromotionalOfferOption,
    PurchaseOption,
    StorePurchaseCancelled,
    StorePurchasePending,
    StorePurchaseSuccess,
    WinBackOfferOption,
)

logger = logging.getLogger(__name__)


def parse_account_token(value: str | None) -> UUID | None:
    """Parse an account binding token, None if it is not a valid UUID.

    Only the hyphenated 8-4-4-4-12 form is accepted (in either case);
    bare hex, braced and ``urn:uuid:`` spellings are rejected.
    """
    if not value:
        return None
    try:
        token = UUID(value)
    except ValueError:
        return None
    if str(token) != value.lower():
        return None
    return token


class PurchaseOrchestrator:
    """Resolve a product, compose purchase options and submit the purchase.

    This orchestrator:
    - Looks the product up fresh from the catalog
    - Drops options that are malformed or unsupported by the platform
    - Interprets the store's result and pushes verified transactions to
      the outbound channel before returning
    """

    def __init__(
        self,
        store: StoreClient,
        catalog: ProductCatalogFetcher,
        capabilities: CapabilityProvider,
        dispatcher: TransactionUpdateDispatcher,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._capabilities = capabilities
        self._dispatcher = dispatcher

    def build_options(
        self, product: Product, options: PurchaseOptions | None
    ) -> list[PurchaseOption]:
        """Build the option set honored for this product and platform.

        Args:
            product: Resolved product.
            options: Requested options.

        Returns:
            Options to submit with the purchase.
        """
        resolved: list[PurchaseOption] = []
        if options is None:
            return resolved

        token = parse_account_token(options.app_account_token)
        if token is not None:
            resolved.append(AppAccountTokenOption(token=token))
        elif options.app_account_token:
            logger.debug("Ignoring malformed app account token for %s", product.id)

        if options.promotional_offer is not None:
            if self._capabilities.supports(Capability.PROMOTIONAL_OFFERS):
                offer = options.promotional_offer
                resolved.append(
                    PromotionalOfferOption(
                        offer_id=offer.offer_id,
                        signature=OfferSignature(
                            key_id=offer.signature.key_id,
                            nonce=offer.signature.nonce,
                            timestamp=offer.signature.timestamp,
                            signature=offer.signature.signature,
                        ),
                    )
                )
            else:
                logger.debug("Promotional offers unsupported, ignoring offer")

        if options.win_back_offer_id is not None:
            win_back_offer = None
            if (
                self._capabilities.supports(Capability.WIN_BACK_OFFERS)
                and product.subscription is not None
            ):
                win_back_offer = next(
                    (
                        o
                        for o in product.subscription.win_back_offers
                        if o.id == options.win_back_offer_id
                    ),
                    None,
                )
            if win_back_offer is not None:
                resolved.append(WinBackOfferOption(offer=win_back_offer))
            else:
                logger.debug(
                    "Win-back offer %s not available for %s, ignoring",
                    options.win_back_offer_id,
                    product.id,
                )

        return resolved

    async def purchase(
        self,
        product_id: str,
        options: PurchaseOptions | None = None,
    ) -> PurchaseOutcome:
        """Purchase a product.

        Args:
            product_id: Product to purchase.
            options: Optional purchase options.

        Returns:
            PurchaseSuccess, PurchasePending or PurchaseUserCancelled.

        Raises:
            BridgeError: PRODUCT_FETCH_ERROR, PRODUCT_NOT_FOUND or
                PURCHASE_FAILED (unverified transaction).
            StoreError: If the store fails the purchase.
            UnknownStoreResultError: If the store returns an unknown result.
        """
        product = await self._catalog.fetch_one(product_id)
        if product is None:
            raise product_not_found(product_id)

        purchase_options = self.build_options(product, options)
        logger.info(
            "Submitting purchase: %s (options=%s)",
            product_id,
            [o.kind for o in purchase_options],
        )

        result = await self._store.purchase(product, purchase_options)

        if isinstance(result, StorePurchaseSuccess):
            purchase = normalize_verification(result.verification)
            if isinstance(purchase, UnverifiedPurchase):
                logger.warning(
                    "Purchase of %s returned unverified transaction %s: %s",
                    product_id,
                    purchase.transaction_id,
                    purchase.cause.value,
                )
                raise BridgeError(
                    BridgeErrorCode.PURCHASE_FAILED,
                    "The purchased transaction failed verification.",
                    details={
                        "product_id": product_id,
                        "transaction_id": purchase.transaction_id,
                    },
                    cause=purchase.cause.value,
                )
            await self._dispatcher.send(purchase.transaction, receipt=purchase.receipt)
            logger.info(
                "Purchase completed: %s (transaction=%s)",
                product_id,
                purchase.transaction.id,
            )
            return PurchaseSuccess(
                transaction=translate_transaction(
                    purchase.transaction, receipt=purchase.receipt
                ),
                receipt=purchase.receipt,
            )
        if isinstance(result, StorePurchasePending):
            logger.info("Purchase pending: %s", product_id)
            return PurchasePending(product_id=product_id)
        if isinstance(result, StorePurchaseCancelled):
            logger.info("Purchase cancelled by user: %s", product_id)
            return PurchaseUserCancelled(product_id=product_id)

        raise UnknownStoreResultError(
            f"Unknown purchase result from the store: {type(result).__name__}"
        )
