"""Restoration of purchase history from the store's entitlements."""

import logging

from commerce_bridge.bridge.callbacks import TransactionUpdateDispatcher
from commerce_bridge.bridge.errors import BridgeError, BridgeErrorCode
from commerce_bridge.bridge.models import RestorationReport, UnverifiedPurchase
from commerce_bridge.bridge.translator import translate_transaction
from commerce_bridge.bridge.verification import normalize_verification
from commerce_bridge.store.client import StoreClient

logger = logging.getLogger(__name__)


class RestorationReconciler:
    """Walk the current entitlements and re-deliver verified ones."""

    def __init__(
        self,
        store: StoreClient,
        dispatcher: TransactionUpdateDispatcher,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher

    async def reconcile(self) -> RestorationReport:
        """Walk every current entitlement once.

        Verified entries are pushed to the outbound channel as soon as they
        are seen, flagged as restoring. Unverified entries are collected.

        Returns:
            RestorationReport with the restored messages and failures.

        Raises:
            StoreError: If the store fails to list entitlements.
        """
        report = RestorationReport()
        async for result in self._store.current_entitlements():
            purchase = normalize_verification(result)
            if isinstance(purchase, UnverifiedPurchase):
                report.failures[purchase.transaction_id] = purchase
                continue
            await self._dispatcher.send(
                purchase.transaction, receipt=purchase.receipt, restoring=True
            )
            report.restored.append(
                translate_transaction(
                    purchase.transaction, receipt=purchase.receipt, restoring=True
                )
            )

        logger.info(
            "Restoration walk complete. Restored: %d, Failed: %d",
            len(report.restored),
            len(report.failures),
        )
        return report

    async def restore(self) -> None:
        """Restore purchases, signaling exactly one outcome.

        Returns normally when every entitlement was verified, otherwise
        raises RESTORE_FAILED. It never does both.

        Raises:
            BridgeError: RESTORE_FAILED carrying {transaction_id:
                {"receipt", "cause"}} for every unverified entitlement.
        """
        report = await self.reconcile()
        if report.failures:
            raise BridgeError(
                BridgeErrorCode.RESTORE_FAILED,
                "This purchase could not be restored.",
                details={
                    transaction_id: {
                        "receipt": failure.receipt,
                        "cause": failure.cause.value,
                    }
                    for transaction_id, failure in report.failures.items()
                },
            )
