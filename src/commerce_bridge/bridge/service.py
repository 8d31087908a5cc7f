"""Commerce bridge service: the operations exposed to the application."""

import logging
from collections.abc import Iterable

from commerce_bridge.bridge.callbacks import (
    TransactionCallback,
    TransactionUpdateDispatcher,
    WebhookTransactionCallback,
)
from commerce_bridge.bridge.catalog import ProductCatalogFetcher
from commerce_bridge.bridge.eligibility import EligibilityChecker
from commerce_bridge.bridge.errors import BridgeError, BridgeErrorCode
from commerce_bridge.bridge.listener import TransactionListener
from commerce_bridge.bridge.models import (
    PurchaseOptions,
    PurchaseOutcome,
    RestorationReport,
    TransactionMessage,
    VerifiedPurchase,
)
from commerce_bridge.bridge.purchase import PurchaseOrchestrator
from commerce_bridge.bridge.restoration import RestorationReconciler
from commerce_bridge.bridge.translator import translate_transaction
from commerce_bridge.bridge.verification import normalize_verification
from commerce_bridge.config import Settings, get_settings
from commerce_bridge.store.capabilities import CapabilityProvider, PlatformCapabilities
from commerce_bridge.store.client import StoreClient, StoreError
from commerce_bridge.store.memory import InMemoryStore
from commerce_bridge.store.models import Product

logger = logging.getLogger(__name__)


class CommerceBridge:
    """Bridge between the application and the platform commerce store.

    This service:
    - Fetches products and checks offer eligibility
    - Orchestrates purchases with composable options
    - Owns the live transaction listener
    - Restores and reconciles purchase history
    - Pushes every verified transaction through one outbound channel

    Operations are independent: any number may be in flight at once.
    """

    def __init__(
        self,
        store: StoreClient,
        capabilities: CapabilityProvider | None = None,
        callback: TransactionCallback | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            store: Store client.
            capabilities: Capability provider (derived from settings if not provided).
            callback: Outbound transaction callback.
            settings: Bridge settings (uses global settings if not provided).
        """
        self._settings = settings or get_settings()
        self._store = store
        self._capabilities = capabilities or PlatformCapabilities(
            self._settings.store_platform,
            self._settings.store_platform_version,
        )
        self._dispatcher = TransactionUpdateDispatcher(callback)
        self._catalog = ProductCatalogFetcher(store)
        self._orchestrator = PurchaseOrchestrator(
            store, self._catalog, self._capabilities, self._dispatcher
        )
        self._eligibility = EligibilityChecker(store, self._catalog, self._capabilities)
        self._listener = TransactionListener(store, self._dispatcher)
        self._reconciler = RestorationReconciler(store, self._dispatcher)

    @property
    def store(self) -> StoreClient:
        return self._store

    @property
    def listener(self) -> TransactionListener:
        return self._listener

    def set_transaction_callback(self, callback: TransactionCallback | None) -> None:
        """Register the receiver of onTransactionsUpdated pushes."""
        self._dispatcher.set_callback(callback)

    # Payments and catalog

    def can_make_payments(self) -> bool:
        """Whether the user can authorize payments."""
        return self._store.can_make_payments()

    async def fetch_products(self, identifiers: Iterable[str]) -> list[Product]:
        """Fetch product descriptors; unknown identifiers are skipped."""
        return await self._catalog.fetch(identifiers)

    async def purchase(
        self,
        product_id: str,
        options: PurchaseOptions | None = None,
    ) -> PurchaseOutcome:
        """Purchase a product. See PurchaseOrchestrator.purchase."""
        return await self._orchestrator.purchase(product_id, options)

    # Eligibility

    async def is_win_back_offer_eligible(self, product_id: str, offer_id: str) -> bool:
        return await self._eligibility.is_win_back_offer_eligible(product_id, offer_id)

    async def is_introductory_offer_eligible(self, product_id: str) -> bool:
        return await self._eligibility.is_introductory_offer_eligible(product_id)

    # History

    async def _verified_history(self) -> list[VerifiedPurchase]:
        verified = []
        async for result in self._store.all_transactions():
            purchase = normalize_verification(result)
            if isinstance(purchase, VerifiedPurchase):
                verified.append(purchase)
        return verified

    async def list_all_transactions(self) -> list[TransactionMessage]:
        """List every verified transaction in the store history."""
        return [
            translate_transaction(p.transaction) for p in await self._verified_history()
        ]

    async def restore_purchases(self) -> None:
        """Restore purchases. Raises RESTORE_FAILED if any entry is unverified."""
        await self._reconciler.restore()

    async def reconcile_purchases(self) -> RestorationReport:
        """Walk the entitlements and return the full report without raising."""
        return await self._reconciler.reconcile()

    async def finish_transaction(self, transaction_id: int) -> None:
        """Finish (acknowledge) a transaction.

        Args:
            transaction_id: Transaction to finish.

        Raises:
            BridgeError: TRANSACTION_NOT_FOUND if no verified transaction
                in the history has this ID.
        """
        for purchase in await self._verified_history():
            if purchase.transaction.id == transaction_id:
                await self._store.finish(transaction_id)
                logger.info("Finished transaction: %s", transaction_id)
                return

        raise BridgeError(
            BridgeErrorCode.TRANSACTION_NOT_FOUND,
            "No verified transaction with this ID exists in the history.",
            details={"transaction_id": transaction_id},
        )

    # Storefront

    async def fetch_storefront_country_code(self) -> str:
        """Country code of the current storefront.

        Raises:
            BridgeError: STOREFRONT_UNAVAILABLE.
        """
        try:
            country_code = await self._store.storefront_country_code()
        except StoreError as e:
            raise BridgeError(
                BridgeErrorCode.STOREFRONT_UNAVAILABLE,
                "The store has failed to fetch the country code.",
                cause=e,
            ) from e

        if country_code is None:
            raise BridgeError(
                BridgeErrorCode.STOREFRONT_UNAVAILABLE,
                "The store has failed to fetch the country code.",
                details={"reason": "No current storefront."},
            )
        return country_code

    async def sync_with_store(self) -> None:
        """Sync with the store. May prompt the user to authenticate.

        Raises:
            BridgeError: SYNC_FAILED.
        """
        try:
            await self._store.sync()
        except StoreError as e:
            logger.error("Failed to sync with the store: %s", e)
            raise BridgeError(
                BridgeErrorCode.SYNC_FAILED,
                "The store has failed to sync.",
                cause=e,
            ) from e

    # Listener

    async def start_listening(self) -> None:
        await self._listener.start()

    async def stop_listening(self) -> None:
        await self._listener.stop()

    async def close(self) -> None:
        """Stop the listener and release the outbound channel."""
        await self._listener.stop()
        callback = self._dispatcher.callback
        if isinstance(callback, WebhookTransactionCallback):
            await callback.close()

    def get_status(self) -> dict:
        """Get bridge status."""
        return {
            "listener": self._listener.get_status(),
            "updates": self._dispatcher.get_stats(),
            "can_make_payments": self.can_make_payments(),
        }


# Global bridge instance
_commerce_bridge: CommerceBridge | None = None


def init_commerce_bridge(
    store: StoreClient | None = None,
    capabilities: CapabilityProvider | None = None,
    callback: TransactionCallback | None = None,
    settings: Settings | None = None,
) -> CommerceBridge:
    """Create the process-wide bridge instance, replacing any previous one.

    Args:
        store: Store client (in-memory store if not provided).
        capabilities: Capability provider.
        callback: Outbound callback (webhook from settings if not provided).
        settings: Bridge settings.

    Returns:
        The new CommerceBridge.
    """
    global _commerce_bridge
    settings = settings or get_settings()

    if store is None:
        logger.warning("No store client configured, using in-memory store")
        store = InMemoryStore()

    if callback is None and settings.transaction_webhook_url:
        callback = WebhookTransactionCallback(
            settings.transaction_webhook_url,
            timeout=settings.transaction_webhook_timeout_seconds,
        )

    _commerce_bridge = CommerceBridge(
        store,
        capabilities=capabilities,
        callback=callback,
        settings=settings,
    )
    return _commerce_bridge


def get_commerce_bridge() -> CommerceBridge:
    """Get the global bridge instance.

    Raises:
        RuntimeError: If init_commerce_bridge has not been called.
    """
    if _commerce_bridge is None:
        raise RuntimeError("Commerce bridge not initialized")
    return _commerce_bridge


async def close_commerce_bridge() -> None:
    """Tear down the global bridge instance."""
    global _commerce_bridge
    if _commerce_bridge is not None:
        await _commerce_bridge.close()
        _commerce_bridge = None
