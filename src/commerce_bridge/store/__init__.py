"""Platform commerce store boundary.

The store owns the product catalog, transaction history and entitlement
state. This package defines the models it returns, the client interface
the bridge consumes, capability gating, and an in-memory store for
development and tests.
"""

from commerce_bridge.store.capabilities import (
    MINIMUM_VERSIONS,
    Capability,
    CapabilityProvider,
    Platform,
    PlatformCapabilities,
    StaticCapabilities,
    parse_version,
)
from commerce_bridge.store.client import StoreClient, StoreError
from commerce_bridge.store.memory import InMemoryStore
from commerce_bridge.store.models import (
    AppAccountTokenOption,
    OfferSignature,
    OfferType,
    PaymentMode,
    Product,
    ProductType,
    PromotionalOfferOption,
    PurchaseOption,
    RenewalInfo,
    RenewalInfoResult,
    RenewalState,
    StorePurchaseCancelled,
    StorePurchasePending,
    StorePurchaseResult,
    StorePurchaseSuccess,
    SubscriptionInfo,
    SubscriptionOffer,
    SubscriptionPeriod,
    SubscriptionPeriodUnit,
    SubscriptionStatus,
    Transaction,
    UnverifiedRenewalInfo,
    UnverifiedTransaction,
    VerificationFailure,
    VerificationResult,
    VerifiedRenewalInfo,
    VerifiedTransaction,
    WinBackOfferOption,
)

__all__ = [
    # Capabilities
    "MINIMUM_VERSIONS",
    "Capability",
    "CapabilityProvider",
    "Platform",
    "PlatformCapabilities",
    "StaticCapabilities",
    "parse_version",
    # Client
    "StoreClient",
    "StoreError",
    "InMemoryStore",
    # Models
    "AppAccountTokenOption",
    "OfferSignature",
    "OfferType",
    "PaymentMode",
    "Product",
    "ProductType",
    "PromotionalOfferOption",
    "PurchaseOption",
    "RenewalInfo",
    "RenewalInfoResult",
    "RenewalState",
    "StorePurchaseCancelled",
    "StorePurchasePending",
    "StorePurchaseResult",
    "StorePurchaseSuccess",
    "SubscriptionInfo",
    "SubscriptionOffer",
    "SubscriptionPeriod",
    "SubscriptionPeriodUnit",
    "SubscriptionStatus",
    "Transaction",
    "UnverifiedRenewalInfo",
    "UnverifiedTransaction",
    "VerificationFailure",
    "VerificationResult",
    "VerifiedRenewalInfo",
    "VerifiedTransaction",
    "WinBackOfferOption",
]
