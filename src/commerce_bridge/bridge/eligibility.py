"""Offer eligibility checks."""

import logging

from commerce_bridge.bridge.catalog import ProductCatalogFetcher
from commerce_bridge.bridge.errors import (
    BridgeError,
    BridgeErrorCode,
    not_a_subscription,
    product_not_found,
)
from commerce_bridge.store.capabilities import Capability, CapabilityProvider
from commerce_bridge.store.client import StoreClient, StoreError
from commerce_bridge.store.models import SubscriptionInfo, VerifiedRenewalInfo

logger = logging.getLogger(__name__)


def _eligibility_failed(product_id: str, cause: Exception) -> BridgeError:
    return BridgeError(
        BridgeErrorCode.ELIGIBILITY_CHECK_FAILED,
        f"Failed to check offer eligibility: {cause}",
        details={"product_id": product_id},
        cause=cause,
    )


class EligibilityChecker:
    """Answer whether the current user qualifies for subscription offers."""

    def __init__(
        self,
        store: StoreClient,
        catalog: ProductCatalogFetcher,
        capabilities: CapabilityProvider,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._capabilities = capabilities

    async def _subscription_for(self, product_id: str) -> SubscriptionInfo:
        try:
            product = await self._catalog.fetch_one(product_id)
        except BridgeError as e:
            raise _eligibility_failed(product_id, e) from e

        if product is None:
            raise product_not_found(product_id)
        if product.subscription is None:
            raise not_a_subscription(product_id)
        return product.subscription

    async def is_win_back_offer_eligible(self, product_id: str, offer_id: str) -> bool:
        """Check win-back offer eligibility.

        Only verified renewal info counts as evidence of eligibility.

        Args:
            product_id: Subscription product ID.
            offer_id: Win-back offer ID.

        Returns:
            True if a verified renewal record lists the offer.

        Raises:
            BridgeError: UNSUPPORTED_PLATFORM_VERSION, PRODUCT_NOT_FOUND,
                NOT_A_SUBSCRIPTION or ELIGIBILITY_CHECK_FAILED.
        """
        if not self._capabilities.supports(Capability.WIN_BACK_OFFERS):
            raise BridgeError(
                BridgeErrorCode.UNSUPPORTED_PLATFORM_VERSION,
                "Win-back offers are not supported on this platform version.",
            )

        subscription = await self._subscription_for(product_id)

        try:
            statuses = await self._store.subscription_statuses(
                subscription.subscription_group_id
            )
        except StoreError as e:
            logger.error("Failed to load subscription status for %s: %s", product_id, e)
            raise _eligibility_failed(product_id, e) from e

        eligible = any(
            isinstance(status.renewal_info, VerifiedRenewalInfo)
            and offer_id in status.renewal_info.renewal_info.eligible_win_back_offer_ids
            for status in statuses
        )
        logger.debug(
            "Win-back eligibility for %s/%s: %s", product_id, offer_id, eligible
        )
        return eligible

    async def is_introductory_offer_eligible(self, product_id: str) -> bool:
        """Check introductory offer eligibility (computed by the store).

        Raises:
            BridgeError: PRODUCT_NOT_FOUND, NOT_A_SUBSCRIPTION or
                ELIGIBILITY_CHECK_FAILED.
        """
        subscription = await self._subscription_for(product_id)

        try:
            return await self._store.is_eligible_for_intro_offer(
                subscription.subscription_group_id
            )
        except StoreError as e:
            logger.error("Failed to check intro offer eligibility for %s: %s", product_id, e)
            raise _eligibility_failed(product_id, e) from e
