"""Product catalog lookups."""

import logging
from collections.abc import Iterable

from commerce_bridge.bridge.errors import BridgeError, BridgeErrorCode
from commerce_bridge.store.client import StoreClient, StoreError
from commerce_bridge.store.models import Product

logger = logging.getLogger(__name__)


class ProductCatalogFetcher:
    """Resolve product identifiers against the store catalog.

    Products are never cached: every purchase and eligibility check sees
    the store's current descriptors.
    """

    def __init__(self, store: StoreClient) -> None:
        self._store = store

    async def fetch(self, identifiers: Iterable[str]) -> list[Product]:
        """Fetch the descriptors of a set of products.

        Unknown identifiers are skipped, so the result may be smaller than
        the request.

        Args:
            identifiers: Product identifiers (duplicates are ignored).

        Returns:
            Matching products.

        Raises:
            BridgeError: PRODUCT_FETCH_ERROR if the set is empty or the
                store call fails.
        """
        unique_ids = list(dict.fromkeys(identifiers))
        if not unique_ids:
            raise BridgeError(
                BridgeErrorCode.PRODUCT_FETCH_ERROR,
                "At least one product identifier is required.",
            )

        try:
            products = await self._store.products(unique_ids)
        except StoreError as e:
            logger.error("Failed to fetch products %s: %s", unique_ids, e)
            raise BridgeError(
                BridgeErrorCode.PRODUCT_FETCH_ERROR,
                str(e),
                details={"product_ids": unique_ids},
                cause=e,
            ) from e

        if len(products) < len(unique_ids):
            found = {p.id for p in products}
            logger.info(
                "Products not found in store: %s",
                [i for i in unique_ids if i not in found],
            )
        return products

    async def fetch_one(self, product_id: str) -> Product | None:
        """Fetch a single product, None if the store does not know it."""
        products = await self.fetch([product_id])
        return next((p for p in products if p.id == product_id), None)
