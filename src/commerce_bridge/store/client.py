"""Client interface to the platform commerce store."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable

from commerce_bridge.store.models import (
    Product,
    PurchaseOption,
    StorePurchaseResult,
    SubscriptionStatus,
    VerificationResult,
)


class StoreError(Exception):
    """Error reported by the store (network, store unavailable, bad request)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class StoreClient(ABC):
    """Operations the bridge needs from the platform commerce store.

    Every method reads the store's authoritative state at call time. The
    async iterators yield verification envelopes exactly as the store
    produces them; callers decide what to do with unverified entries.
    Implementations raise ``StoreError`` for store-level failures.
    """

    @abstractmethod
    def can_make_payments(self) -> bool:
        """Whether the user is allowed to authorize payments."""

    @abstractmethod
    async def products(self, identifiers: Iterable[str]) -> list[Product]:
        """Resolve product identifiers; unknown identifiers are skipped."""

    @abstractmethod
    async def purchase(
        self,
        product: Product,
        options: list[PurchaseOption],
    ) -> StorePurchaseResult:
        """Submit a purchase for a product."""

    @abstractmethod
    def transaction_updates(self) -> AsyncIterator[VerificationResult]:
        """Live stream of transaction updates (never ends on its own)."""

    @abstractmethod
    def current_entitlements(self) -> AsyncIterator[VerificationResult]:
        """Transactions that currently entitle the user."""

    @abstractmethod
    def all_transactions(self) -> AsyncIterator[VerificationResult]:
        """Full transaction history."""

    @abstractmethod
    async def finish(self, transaction_id: int) -> None:
        """Mark a transaction finished. Finishing twice is a no-op."""

    @abstractmethod
    async def subscription_statuses(
        self, subscription_group_id: str
    ) -> list[SubscriptionStatus]:
        """Renewal statuses for a subscription group."""

    @abstractmethod
    async def is_eligible_for_intro_offer(self, subscription_group_id: str) -> bool:
        """Store-computed introductory offer eligibility for the current user."""

    @abstractmethod
    async def storefront_country_code(self) -> str | None:
        """Country code of the current storefront, None when unavailable."""

    @abstractmethod
    async def sync(self) -> None:
        """Sync transactions with the store (may prompt the user to sign in)."""
