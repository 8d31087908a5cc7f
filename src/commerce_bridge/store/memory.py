"""In-memory store for development and testing."""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from datetime import UTC, datetime

from commerce_bridge.store.client import StoreClient, StoreError
from commerce_bridge.store.models import (
    AppAccountTokenOption,
    Product,
    ProductType,
    PurchaseOption,
    StorePurchaseResult,
    StorePurchaseSuccess,
    SubscriptionStatus,
    Transaction,
    VerificationResult,
    VerifiedTransaction,
)

logger = logging.getLogger(__name__)


class InMemoryStore(StoreClient):
    """Store client backed by in-memory state.

    In production, the bridge talks to the platform store. This
    implementation keeps catalog, history and entitlements in memory for
    development, and lets tests script purchase results, publish live
    updates and inject failures per operation.
    """

    def __init__(
        self,
        storefront_country_code: str | None = "USA",
        can_make_payments: bool = True,
    ) -> None:
        """Initialize the in-memory store.

        Args:
            storefront_country_code: Country code reported for the storefront.
            can_make_payments: Whether payments are allowed.
        """
        self._storefront_country_code = storefront_country_code
        self._can_make_payments = can_make_payments
        self._products: dict[str, Product] = {}
        self._history: list[VerificationResult] = []
        self._entitled_ids: set[int] = set()
        self._statuses: dict[str, list[SubscriptionStatus]] = {}
        self._intro_eligibility: dict[str, bool] = {}
        self._scripted_results: dict[str, list[StorePurchaseResult]] = {}
        self._failures: dict[str, StoreError] = {}
        self._subscribers: list[asyncio.Queue[VerificationResult | None]] = []
        self._next_transaction_id = 1000

        # Submitted purchases as (product_id, options)
        self.purchases: list[tuple[str, list[PurchaseOption]]] = []
        self.sync_count = 0

    # Setup helpers

    def add_product(self, product: Product) -> Product:
        """Add a product to the catalog."""
        self._products[product.id] = product
        return product

    def add_transaction(
        self, result: VerificationResult, entitled: bool = True
    ) -> VerificationResult:
        """Add a transaction to the history (and entitlements if entitled)."""
        self._history.append(result)
        if entitled:
            self._entitled_ids.add(result.transaction.id)
        return result

    def set_subscription_statuses(
        self, subscription_group_id: str, statuses: list[SubscriptionStatus]
    ) -> None:
        """Set renewal statuses for a subscription group."""
        self._statuses[subscription_group_id] = statuses

    def set_intro_offer_eligibility(
        self, subscription_group_id: str, eligible: bool
    ) -> None:
        """Set introductory offer eligibility for a subscription group."""
        self._intro_eligibility[subscription_group_id] = eligible

    def script_purchase_result(
        self, product_id: str, result: StorePurchaseResult
    ) -> None:
        """Queue the result returned by the next purchase of a product."""
        self._scripted_results.setdefault(product_id, []).append(result)

    def fail(self, operation: str, error: StoreError) -> None:
        """Make an operation (method name) raise until cleared."""
        self._failures[operation] = error

    def clear_failure(self, operation: str) -> None:
        """Stop failing an operation."""
        self._failures.pop(operation, None)

    def publish_update(self, result: VerificationResult) -> None:
        """Publish a live transaction update to every subscriber."""
        for queue in list(self._subscribers):
            queue.put_nowait(result)

    def close_updates(self) -> None:
        """End every live update stream."""
        for queue in list(self._subscribers):
            queue.put_nowait(None)

    @property
    def subscriber_count(self) -> int:
        """Number of open live update streams."""
        return len(self._subscribers)

    def get_transaction(self, transaction_id: int) -> Transaction | None:
        """Look up a transaction in the history."""
        for result in self._history:
            if result.transaction.id == transaction_id:
                return result.transaction
        return None

    def _raise_if_failing(self, operation: str) -> None:
        error = self._failures.get(operation)
        if error is not None:
            raise error

    def _new_transaction(
        self, product: Product, options: list[PurchaseOption]
    ) -> Transaction:
        transaction_id = self._next_transaction_id
        self._next_transaction_id += 1
        token = next(
            (o.token for o in options if isinstance(o, AppAccountTokenOption)),
            None,
        )
        return Transaction(
            id=transaction_id,
            original_id=transaction_id,
            product_id=product.id,
            purchase_date=datetime.now(UTC),
            app_account_token=token,
            json_representation=f'{{"transactionId": {transaction_id}}}',
        )

    # StoreClient

    def can_make_payments(self) -> bool:
        return self._can_make_payments

    async def products(self, identifiers: Iterable[str]) -> list[Product]:
        self._raise_if_failing("products")
        return [self._products[i] for i in identifiers if i in self._products]

    async def purchase(
        self,
        product: Product,
        options: list[PurchaseOption],
    ) -> StorePurchaseResult:
        self._raise_if_failing("purchase")
        self.purchases.append((product.id, list(options)))

        scripted = self._scripted_results.get(product.id)
        if scripted:
            result = scripted.pop(0)
        else:
            transaction = self._new_transaction(product, options)
            result = StorePurchaseSuccess(
                verification=VerifiedTransaction(
                    transaction=transaction,
                    jws_representation=f"jws.{transaction.id}",
                )
            )

        if isinstance(result, StorePurchaseSuccess):
            self.add_transaction(
                result.verification,
                entitled=product.type != ProductType.CONSUMABLE,
            )
        logger.debug("Purchase submitted: %s (%s)", product.id, type(result).__name__)
        return result

    async def transaction_updates(self) -> AsyncIterator[VerificationResult]:
        queue: asyncio.Queue[VerificationResult | None] = asyncio.Queue()
        self._subscribers.append(queue)
        try:
            while True:
                result = await queue.get()
                if result is None:
                    return
                yield result
        finally:
            self._subscribers.remove(queue)

    async def current_entitlements(self) -> AsyncIterator[VerificationResult]:
        self._raise_if_failing("current_entitlements")
        for result in list(self._history):
            if result.transaction.id in self._entitled_ids:
                yield result

    async def all_transactions(self) -> AsyncIterator[VerificationResult]:
        self._raise_if_failing("all_transactions")
        for result in list(self._history):
            yield result

    async def finish(self, transaction_id: int) -> None:
        self._raise_if_failing("finish")
        for index, result in enumerate(self._history):
            if result.transaction.id != transaction_id:
                continue
            finished = result.transaction.model_copy(update={"is_finished": True})
            self._history[index] = result.model_copy(update={"transaction": finished})

    async def subscription_statuses(
        self, subscription_group_id: str
    ) -> list[SubscriptionStatus]:
        self._raise_if_failing("subscription_statuses")
        return list(self._statuses.get(subscription_group_id, []))

    async def is_eligible_for_intro_offer(self, subscription_group_id: str) -> bool:
        self._raise_if_failing("is_eligible_for_intro_offer")
        return self._intro_eligibility.get(subscription_group_id, True)

    async def storefront_country_code(self) -> str | None:
        self._raise_if_failing("storefront_country_code")
        return self._storefront_country_code

    async def sync(self) -> None:
        self._raise_if_failing("sync")
        self.sync_count += 1
