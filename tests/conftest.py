"""Pytest configuration and fixtures."""

import asyncio
import os
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio

# Set test environment variables before importing application modules
os.environ["STORE_PLATFORM"] = "ios"
os.environ["STORE_PLATFORM_VERSION"] = "18.0"
os.environ["LISTEN_ON_STARTUP"] = "true"
os.environ["DEBUG"] = "true"
os.environ.pop("TRANSACTION_WEBHOOK_URL", None)

from commerce_bridge.bridge import CommerceBridge  # noqa: E402
from commerce_bridge.store import (  # noqa: E402
    InMemoryStore,
    OfferType,
    PaymentMode,
    Product,
    ProductType,
    StaticCapabilities,
    SubscriptionInfo,
    SubscriptionOffer,
    SubscriptionPeriod,
    SubscriptionPeriodUnit,
    Transaction,
    UnverifiedTransaction,
    VerificationFailure,
    VerifiedTransaction,
)

MONTH = SubscriptionPeriod(unit=SubscriptionPeriodUnit.MONTH, value=1)

WIN_BACK_OFFER = SubscriptionOffer(
    id="comeback",
    type=OfferType.WIN_BACK,
    price=Decimal("0.99"),
    display_price="$0.99",
    period=MONTH,
    period_count=3,
    payment_mode=PaymentMode.PAY_AS_YOU_GO,
)

COINS = Product(
    id="coins.100",
    display_name="100 Coins",
    price=Decimal("0.99"),
    display_price="$0.99",
    type=ProductType.CONSUMABLE,
)

LIFETIME = Product(
    id="premium.lifetime",
    display_name="Premium (Lifetime)",
    price=Decimal("49.99"),
    display_price="$49.99",
    type=ProductType.NON_CONSUMABLE,
)

MONTHLY = Product(
    id="premium.monthly",
    display_name="Premium (Monthly)",
    price=Decimal("4.99"),
    display_price="$4.99",
    type=ProductType.AUTO_RENEWABLE,
    subscription=SubscriptionInfo(
        subscription_group_id="premium",
        subscription_period=MONTH,
        win_back_offers=[WIN_BACK_OFFER],
    ),
)


def make_transaction(transaction_id: int, product_id: str = "premium.lifetime") -> Transaction:
    return Transaction(
        id=transaction_id,
        original_id=transaction_id,
        product_id=product_id,
        purchase_date=datetime(2024, 1, 1, 12, 0, 0),
    )


def make_verified(transaction_id: int, product_id: str = "premium.lifetime") -> VerifiedTransaction:
    return VerifiedTransaction(
        transaction=make_transaction(transaction_id, product_id),
        jws_representation=f"jws.{transaction_id}",
    )


def make_unverified(
    transaction_id: int,
    product_id: str = "premium.lifetime",
    cause: VerificationFailure = VerificationFailure.INVALID_SIGNATURE,
) -> UnverifiedTransaction:
    return UnverifiedTransaction(
        transaction=make_transaction(transaction_id, product_id),
        jws_representation=f"jws.{transaction_id}",
        cause=cause,
    )


class RecordingCallback:
    """Outbound callback that records every push."""

    def __init__(self, fail_times: int = 0, delay: float = 0.0) -> None:
        self.updates: list[list] = []
        self._fail_times = fail_times
        self._delay = delay

    async def on_transactions_updated(self, transactions) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail_times > 0:
            self._fail_times -= 1
            raise RuntimeError("channel closed")
        self.updates.append(list(transactions))

    @property
    def messages(self) -> list:
        return [t for batch in self.updates for t in batch]

    @property
    def transaction_ids(self) -> list[int]:
        return [t.id for t in self.messages]


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def verified():
    """Factory for verified transactions."""
    return make_verified


@pytest.fixture
def unverified():
    """Factory for unverified transactions."""
    return make_unverified


@pytest.fixture
def waiter():
    """Async polling helper."""
    return wait_until


@pytest.fixture
def store():
    """In-memory store with a small catalog."""
    store = InMemoryStore()
    store.add_product(COINS)
    store.add_product(LIFETIME)
    store.add_product(MONTHLY)
    return store


@pytest.fixture
def recorder():
    """Recording outbound callback."""
    return RecordingCallback()


@pytest_asyncio.fixture
async def bridge(store, recorder):
    """Bridge with every capability enabled."""
    bridge = CommerceBridge(
        store,
        capabilities=StaticCapabilities.all(),
        callback=recorder,
    )
    yield bridge
    await bridge.close()


@pytest.fixture
def recorder_factory():
    """Factory for recording callbacks with failure/delay settings."""
    return RecordingCallback


@pytest.fixture
def monthly_product():
    """Auto-renewable product with a win-back offer."""
    return MONTHLY
