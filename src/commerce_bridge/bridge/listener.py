"""Listener for the store's live transaction update stream."""

import asyncio
import logging
from contextlib import aclosing
from enum import Enum

from commerce_bridge.bridge.callbacks import TransactionUpdateDispatcher
from commerce_bridge.bridge.models import UnverifiedPurchase
from commerce_bridge.bridge.verification import normalize_verification
from commerce_bridge.store.client import StoreClient, StoreError

logger = logging.getLogger(__name__)


class ListenerState(str, Enum):
    """Listener lifecycle states."""

    STOPPED = "stopped"
    LISTENING = "listening"


class TransactionListener:
    """Long-lived subscription to the store's transaction updates.

    This listener:
    - Holds at most one subscription task; start replaces a running one
    - Pushes each verified update to the outbound channel, in store order
    - Drops unverified updates
    - Keeps running when a single push fails

    Start it as soon as the application launches so transactions completed
    outside the app (renewals, approved pending purchases) are not missed.
    """

    def __init__(
        self,
        store: StoreClient,
        dispatcher: TransactionUpdateDispatcher,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self._received_count = 0
        self._dropped_count = 0

    async def _consume_updates(self) -> None:
        """Consume the update stream until cancelled or the stream ends."""
        try:
            async with aclosing(self._store.transaction_updates()) as updates:
                async for result in updates:
                    self._received_count += 1
                    purchase = normalize_verification(result)
                    if isinstance(purchase, UnverifiedPurchase):
                        self._dropped_count += 1
                        logger.debug(
                            "Dropping unverified transaction update %s (%s)",
                            purchase.transaction_id,
                            purchase.cause.value,
                        )
                        continue
                    await self._dispatcher.send(
                        purchase.transaction, receipt=purchase.receipt
                    )
        except StoreError as e:
            logger.error("Transaction update stream failed: %s", e)
            return

        logger.warning("Transaction update stream ended")

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.critical(
                "Transaction listener aborted", exc_info=(type(error), error, error.__traceback__)
            )

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def start(self) -> None:
        """Start listening, replacing any running subscription."""
        async with self._lock:
            if self._task is not None and not self._task.done():
                logger.info("Replacing running transaction listener")
            await self._cancel_task()

            self._task = asyncio.create_task(
                self._consume_updates(),
                name="transaction_updates_listener",
            )
            self._task.add_done_callback(self._on_task_done)
            logger.info("Started transaction listener")

    async def stop(self) -> None:
        """Stop listening.

        Once this returns no further update is delivered, including
        updates the store had already buffered.
        """
        async with self._lock:
            if self._task is None:
                return
            await self._cancel_task()
            logger.info("Stopped transaction listener")

    @property
    def state(self) -> ListenerState:
        if self._task is not None and not self._task.done():
            return ListenerState.LISTENING
        return ListenerState.STOPPED

    @property
    def is_running(self) -> bool:
        """Check if the listener is running."""
        return self.state == ListenerState.LISTENING

    def get_status(self) -> dict:
        """Get listener status.

        Returns:
            Status dictionary.
        """
        return {
            "state": self.state.value,
            "received_count": self._received_count,
            "dropped_unverified_count": self._dropped_count,
        }
