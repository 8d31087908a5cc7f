"""Outbound transaction update channel."""

import asyncio
import logging
from typing import Protocol

import httpx

from commerce_bridge.bridge.models import TransactionMessage
from commerce_bridge.bridge.translator import translate_transaction
from commerce_bridge.store.models import Transaction

logger = logging.getLogger(__name__)


class TransactionCallback(Protocol):
    """Receiver of onTransactionsUpdated pushes."""

    async def on_transactions_updated(
        self, transactions: list[TransactionMessage]
    ) -> None: ...


class TransactionDeliveryError(Exception):
    """The outbound channel rejected a push."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class WebhookTransactionCallback:
    """Deliver transaction updates by POSTing them to a webhook URL.

    The request body is ``{"transactions": [<TransactionMessage>, ...]}``
    using the camelCase wire names.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the webhook callback.

        Args:
            url: Webhook endpoint.
            timeout: Request timeout in seconds.
            http_client: Optional HTTP client for testing.
        """
        self._url = url
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def on_transactions_updated(
        self, transactions: list[TransactionMessage]
    ) -> None:
        """POST the updates.

        Raises:
            TransactionDeliveryError: On transport errors or non-2xx responses.
        """
        body = {
            "transactions": [
                t.model_dump(mode="json", by_alias=True) for t in transactions
            ]
        }
        client = await self._get_client()
        try:
            response = await client.post(self._url, json=body)
        except httpx.RequestError as e:
            raise TransactionDeliveryError(f"HTTP error delivering updates: {e}") from e

        if not response.is_success:
            raise TransactionDeliveryError(
                f"Webhook rejected updates: status={response.status_code}",
                status_code=response.status_code,
            )

    async def close(self) -> None:
        """Close the HTTP client if this callback created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


class TransactionUpdateDispatcher:
    """Translate verified transactions and push them onto the callback.

    Pushes from the listener, purchases and restores go through one
    dispatcher, so they reach the callback one at a time and in call order.
    A failed push is logged and reported through the return value; it
    never propagates to the caller.
    """

    def __init__(self, callback: TransactionCallback | None = None) -> None:
        self._callback = callback
        self._lock = asyncio.Lock()
        self._delivered_count = 0
        self._failed_count = 0

    @property
    def callback(self) -> TransactionCallback | None:
        return self._callback

    def set_callback(self, callback: TransactionCallback | None) -> None:
        """Replace the outbound callback."""
        self._callback = callback

    async def send(
        self,
        transaction: Transaction,
        receipt: str | None = None,
        restoring: bool = False,
    ) -> bool:
        """Push a single verified transaction.

        Args:
            transaction: Verified transaction.
            receipt: Signed receipt payload.
            restoring: Whether the push comes from a restore.

        Returns:
            True if the callback accepted the push, False otherwise.
        """
        message = translate_transaction(transaction, receipt=receipt, restoring=restoring)

        async with self._lock:
            if self._callback is None:
                logger.warning(
                    "No transaction callback registered, dropping update: %s",
                    transaction.id,
                )
                return False
            try:
                await self._callback.on_transactions_updated([message])
            except Exception as e:
                self._failed_count += 1
                logger.exception(
                    "Failed to send transaction update %s: %s", transaction.id, e
                )
                return False

        self._delivered_count += 1
        logger.debug("Delivered transaction update: %s", transaction.id)
        return True

    def get_stats(self) -> dict[str, int]:
        """Delivery counters."""
        return {
            "delivered": self._delivered_count,
            "failed": self._failed_count,
        }
