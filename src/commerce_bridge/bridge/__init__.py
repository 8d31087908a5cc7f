"""Commerce Transaction Bridge core.

This module coordinates the application with the platform store:
- Product lookups and purchase orchestration
- Offer eligibility checks
- The live transaction listener
- Restoration and reconciliation of purchase history
"""

from commerce_bridge.bridge.callbacks import (
    TransactionCallback,
    TransactionDeliveryError,
    TransactionUpdateDispatcher,
    WebhookTransactionCallback,
)
from commerce_bridge.bridge.catalog import ProductCatalogFetcher
from commerce_bridge.bridge.eligibility import EligibilityChecker
from commerce_bridge.bridge.errors import (
    BridgeError,
    BridgeErrorCode,
    UnknownStoreResultError,
)
from commerce_bridge.bridge.listener import ListenerState, TransactionListener
from commerce_bridge.bridge.models import (
    PromotionalOffer,
    PromotionalOfferSignature,
    PurchaseOptions,
    PurchaseOutcome,
    PurchasePending,
    PurchaseSuccess,
    PurchaseUserCancelled,
    RestorationReport,
    TransactionMessage,
    UnverifiedPurchase,
    VerifiedPurchase,
)
from commerce_bridge.bridge.purchase import PurchaseOrchestrator
from commerce_bridge.bridge.restoration import RestorationReconciler
from commerce_bridge.bridge.service import (
    CommerceBridge,
    close_commerce_bridge,
    get_commerce_bridge,
    init_commerce_bridge,
)
from commerce_bridge.bridge.translator import translate_transaction
from commerce_bridge.bridge.verification import normalize_verification

__all__ = [
    # Errors
    "BridgeError",
    "BridgeErrorCode",
    "UnknownStoreResultError",
    # Models
    "PromotionalOffer",
    "PromotionalOfferSignature",
    "PurchaseOptions",
    "PurchaseOutcome",
    "PurchasePending",
    "PurchaseSuccess",
    "PurchaseUserCancelled",
    "RestorationReport",
    "TransactionMessage",
    "UnverifiedPurchase",
    "VerifiedPurchase",
    # Components
    "EligibilityChecker",
    "ListenerState",
    "ProductCatalogFetcher",
    "PurchaseOrchestrator",
    "RestorationReconciler",
    "TransactionListener",
    "normalize_verification",
    "translate_transaction",
    # Outbound channel
    "TransactionCallback",
    "TransactionDeliveryError",
    "TransactionUpdateDispatcher",
    "WebhookTransactionCallback",
    # Service
    "CommerceBridge",
    "close_commerce_bridge",
    "get_commerce_bridge",
    "init_commerce_bridge",
]
