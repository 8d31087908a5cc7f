"""Data models for the platform commerce store.

These mirror what the store hands back: products, transactions and the
verification envelopes around them. They are owned by the store; the
bridge reads them but never persists its own copies.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProductType(str, Enum):
    """Product types offered by the store."""

    CONSUMABLE = "consumable"
    NON_CONSUMABLE = "nonConsumable"
    AUTO_RENEWABLE = "autoRenewable"
    NON_RENEWABLE = "nonRenewable"


class SubscriptionPeriodUnit(str, Enum):
    """Units of a subscription or offer period."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class OfferType(str, Enum):
    """Subscription offer kinds."""

    INTRODUCTORY = "introductory"
    PROMOTIONAL = "promotional"
    WIN_BACK = "winBack"


class PaymentMode(str, Enum):
    """How the customer pays during an offer period."""

    FREE_TRIAL = "freeTrial"
    PAY_AS_YOU_GO = "payAsYouGo"
    PAY_UP_FRONT = "payUpFront"


class VerificationFailure(str, Enum):
    """Reasons the store gives for failing to verify a signed payload."""

    REVOKED_CERTIFICATE = "revokedCertificate"
    INVALID_CERTIFICATE_CHAIN = "invalidCertificateChain"
    INVALID_DEVICE_VERIFICATION = "invalidDeviceVerification"
    INVALID_ENCODING = "invalidEncoding"
    INVALID_SIGNATURE = "invalidSignature"
    MISSING_REQUIRED_PROPERTIES = "missingRequiredProperties"


class RenewalState(str, Enum):
    """Subscription renewal states."""

    SUBSCRIBED = "subscribed"
    EXPIRED = "expired"
    IN_BILLING_RETRY_PERIOD = "inBillingRetryPeriod"
    IN_GRACE_PERIOD = "inGracePeriod"
    REVOKED = "revoked"


class SubscriptionPeriod(BaseModel):
    """A subscription or offer period, e.g. 1 month."""

    model_config = ConfigDict(frozen=True)

    unit: SubscriptionPeriodUnit = Field(..., description="Period unit")
    value: int = Field(1, ge=1, description="Number of units")


class SubscriptionOffer(BaseModel):
    """An offer attached to a subscription product."""

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(None, description="Offer ID (None for introductory offers)")
    type: OfferType = Field(..., description="Offer type")
    price: Decimal = Field(..., description="Offer price")
    display_price: str = Field(..., description="Localized offer price")
    period: SubscriptionPeriod = Field(..., description="Offer period")
    period_count: int = Field(1, ge=1, description="Number of periods the offer lasts")
    payment_mode: PaymentMode = Field(..., description="Payment mode")


class SubscriptionInfo(BaseModel):
    """Subscription details of an auto-renewable product."""

    model_config = ConfigDict(frozen=True)

    subscription_group_id: str = Field(..., description="Subscription group ID")
    subscription_period: SubscriptionPeriod = Field(..., description="Renewal period")
    introductory_offer: SubscriptionOffer | None = Field(
        None, description="Introductory offer, if configured"
    )
    promotional_offers: list[SubscriptionOffer] = Field(
        default_factory=list, description="Configured promotional offers"
    )
    win_back_offers: list[SubscriptionOffer] = Field(
        default_factory=list,
        description="Win-back offers the current user is eligible for",
    )


class Product(BaseModel):
    """Product descriptor resolved from the store catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Product identifier")
    display_name: str = Field(..., description="Localized display name")
    description: str = Field("", description="Localized description")
    price: Decimal = Field(..., description="Price in the storefront currency")
    display_price: str = Field(..., description="Localized price")
    type: ProductType = Field(..., description="Product type")
    subscription: SubscriptionInfo | None = Field(
        None, description="Subscription info (auto-renewable products only)"
    )


class Transaction(BaseModel):
    """A store transaction."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Unique transaction ID")
    original_id: int = Field(..., description="ID of the original purchase")
    product_id: str = Field(..., description="Purchased product ID")
    purchase_date: datetime = Field(..., description="Purchase timestamp")
    expiration_date: datetime | None = Field(None, description="Subscription expiry")
    purchased_quantity: int = Field(1, ge=1, description="Quantity purchased")
    app_account_token: UUID | None = Field(
        None, description="Account binding token supplied at purchase"
    )
    json_representation: str = Field("", description="Raw transaction payload")
    is_finished: bool = Field(False, description="Whether the app finished it")


class VerifiedTransaction(BaseModel):
    """A transaction the store attested as authentic."""

    model_config = ConfigDict(frozen=True)

    status: Literal["verified"] = "verified"
    transaction: Transaction
    jws_representation: str = Field(..., description="Signed receipt payload")


class UnverifiedTransaction(BaseModel):
    """A transaction that failed store verification."""

    model_config = ConfigDict(frozen=True)

    status: Literal["unverified"] = "unverified"
    transaction: Transaction
    jws_representation: str = Field(..., description="Signed receipt payload")
    cause: VerificationFailure = Field(..., description="Why verification failed")


VerificationResult = Annotated[
    VerifiedTransaction | UnverifiedTransaction,
    Field(discriminator="status"),
]


class RenewalInfo(BaseModel):
    """Renewal information of a subscription."""

    model_config = ConfigDict(frozen=True)

    original_transaction_id: int = Field(..., description="Original transaction ID")
    current_product_id: str = Field(..., description="Product currently subscribed")
    will_auto_renew: bool = Field(True, description="Auto-renew status")
    eligible_win_back_offer_ids: list[str] = Field(
        default_factory=list, description="Win-back offers the user may redeem"
    )


class VerifiedRenewalInfo(BaseModel):
    """Renewal info the store attested as authentic."""

    model_config = ConfigDict(frozen=True)

    status: Literal["verified"] = "verified"
    renewal_info: RenewalInfo


class UnverifiedRenewalInfo(BaseModel):
    """Renewal info that failed store verification."""

    model_config = ConfigDict(frozen=True)

    status: Literal["unverified"] = "unverified"
    renewal_info: RenewalInfo
    cause: VerificationFailure


RenewalInfoResult = Annotated[
    VerifiedRenewalInfo | UnverifiedRenewalInfo,
    Field(discriminator="status"),
]


class SubscriptionStatus(BaseModel):
    """Status of one subscription in a subscription group."""

    model_config = ConfigDict(frozen=True)

    state: RenewalState
    renewal_info: RenewalInfoResult


class OfferSignature(BaseModel):
    """Server-generated signature authorizing a promotional offer."""

    model_config = ConfigDict(frozen=True)

    key_id: str = Field(..., description="Subscription key ID")
    nonce: UUID = Field(..., description="One-time nonce")
    timestamp: int = Field(..., description="Signature timestamp (Unix millis)")
    signature: str = Field(..., description="Base64-encoded signature")


class AppAccountTokenOption(BaseModel):
    """Binds the purchase to an app account."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["appAccountToken"] = "appAccountToken"
    token: UUID


class PromotionalOfferOption(BaseModel):
    """Applies a signed promotional offer to the purchase."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["promotionalOffer"] = "promotionalOffer"
    offer_id: str
    signature: OfferSignature


class WinBackOfferOption(BaseModel):
    """Applies a win-back offer to the purchase."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["winBackOffer"] = "winBackOffer"
    offer: SubscriptionOffer


PurchaseOption = Annotated[
    AppAccountTokenOption | PromotionalOfferOption | WinBackOfferOption,
    Field(discriminator="kind"),
]


class StorePurchaseSuccess(BaseModel):
    """The store completed the purchase; the transaction may be unverified."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    verification: VerificationResult


class StorePurchasePending(BaseModel):
    """The purchase awaits approval (e.g. Ask to Buy)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pending"] = "pending"


class StorePurchaseCancelled(BaseModel):
    """The user cancelled the purchase."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["userCancelled"] = "userCancelled"


StorePurchaseResult = Annotated[
    StorePurchaseSuccess | StorePurchasePending | StorePurchaseCancelled,
    Field(discriminator="kind"),
]
