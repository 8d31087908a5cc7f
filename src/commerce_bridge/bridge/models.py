"""Data models exchanged with the application through the bridge."""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from commerce_bridge.store.models import Transaction, VerificationFailure


class PromotionalOfferSignature(BaseModel):
    """Signature authorizing a promotional offer, as sent by the app."""

    model_config = ConfigDict(populate_by_name=True)

    key_id: str = Field(..., alias="keyID", description="Subscription key ID")
    nonce: UUID = Field(..., description="One-time nonce")
    timestamp: int = Field(..., description="Signature timestamp (Unix millis)")
    signature: str = Field(..., description="Base64-encoded signature")


class PromotionalOffer(BaseModel):
    """Promotional offer reference supplied with a purchase."""

    model_config = ConfigDict(populate_by_name=True)

    offer_id: str = Field(..., alias="promotionalOfferId", description="Offer ID")
    signature: PromotionalOfferSignature = Field(
        ..., alias="promotionalOfferSignature", description="Offer signature"
    )


class PurchaseOptions(BaseModel):
    """Optional purchase parameters.

    Fields that are malformed or not supported by the running platform
    are dropped silently when the purchase is built.
    """

    model_config = ConfigDict(populate_by_name=True)

    app_account_token: str | None = Field(
        None,
        alias="appAccountToken",
        description="Account binding token (honored only if it is a UUID)",
    )
    promotional_offer: PromotionalOffer | None = Field(
        None, alias="promotionalOffer", description="Promotional offer"
    )
    win_back_offer_id: str | None = Field(
        None, alias="winBackOfferId", description="Win-back offer ID"
    )


class TransactionMessage(BaseModel):
    """Normalized transaction delivered to the application."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., description="Transaction ID")
    original_id: int = Field(..., alias="originalId")
    product_id: str = Field(..., alias="productId")
    purchase_date: str = Field(..., alias="purchaseDate", description="ISO 8601")
    expiration_date: str | None = Field(None, alias="expirationDate")
    purchased_quantity: int = Field(1, alias="purchasedQuantity")
    app_account_token: str | None = Field(None, alias="appAccountToken")
    restoring: bool = Field(False, description="Delivered by a restore")
    receipt_data: str | None = Field(
        None, alias="receiptData", description="Signed receipt payload"
    )
    json_representation: str | None = Field(None, alias="jsonRepresentation")


class VerifiedPurchase(BaseModel):
    """A transaction that passed verification, with its signed receipt."""

    model_config = ConfigDict(frozen=True)

    transaction: Transaction
    receipt: str


class UnverifiedPurchase(BaseModel):
    """A transaction that failed verification. Never surfaced as trusted."""

    model_config = ConfigDict(frozen=True)

    transaction_id: int
    receipt: str
    cause: VerificationFailure


class PurchaseSuccess(BaseModel):
    """The purchase completed and its transaction was verified."""

    kind: Literal["success"] = "success"
    transaction: TransactionMessage
    receipt: str


class PurchasePending(BaseModel):
    """The purchase awaits approval; the result arrives via the listener."""

    kind: Literal["pending"] = "pending"
    product_id: str


class PurchaseUserCancelled(BaseModel):
    """The user cancelled the purchase."""

    kind: Literal["userCancelled"] = "userCancelled"
    product_id: str


PurchaseOutcome = Annotated[
    PurchaseSuccess | PurchasePending | PurchaseUserCancelled,
    Field(discriminator="kind"),
]


class RestorationReport(BaseModel):
    """Result of walking the current entitlements."""

    restored: list[TransactionMessage] = Field(default_factory=list)
    failures: dict[int, UnverifiedPurchase] = Field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        """True when every entitlement was re-verified."""
        return not self.failures
