"""Tests for offer eligibility."""

import pytest

from commerce_bridge.bridge import BridgeError, BridgeErrorCode, CommerceBridge
from commerce_bridge.store import (
    Capability,
    RenewalInfo,
    RenewalState,
    StaticCapabilities,
    StoreError,
    SubscriptionStatus,
    UnverifiedRenewalInfo,
    VerificationFailure,
    VerifiedRenewalInfo,
)


def renewal_info(offer_ids: list[str]) -> RenewalInfo:
    return RenewalInfo(
        original_transaction_id=1,
        current_product_id="premium.monthly",
        will_auto_renew=False,
        eligible_win_back_offer_ids=offer_ids,
    )


def verified_status(offer_ids: list[str]) -> SubscriptionStatus:
    return SubscriptionStatus(
        state=RenewalState.EXPIRED,
        renewal_info=VerifiedRenewalInfo(renewal_info=renewal_info(offer_ids)),
    )


def unverified_status(offer_ids: list[str]) -> SubscriptionStatus:
    return SubscriptionStatus(
        state=RenewalState.EXPIRED,
        renewal_info=UnverifiedRenewalInfo(
            renewal_info=renewal_info(offer_ids),
            cause=VerificationFailure.INVALID_SIGNATURE,
        ),
    )


class TestWinBackEligibility:
    """Tests for is_win_back_offer_eligible."""

    @pytest.mark.asyncio
    async def test_eligible(self, bridge, store):
        """Test a verified renewal record listing the offer."""
        store.set_subscription_statuses("premium", [verified_status(["comeback"])])

        assert await bridge.is_win_back_offer_eligible("premium.monthly", "comeback") is True

    @pytest.mark.asyncio
    async def test_offer_not_listed(self, bridge, store):
        """Test a verified renewal record for other offers."""
        store.set_subscription_statuses("premium", [verified_status(["other"])])

        assert await bridge.is_win_back_offer_eligible("premium.monthly", "comeback") is False

    @pytest.mark.asyncio
    async def test_unverified_renewal_info_is_ignored(self, bridge, store):
        """Test that only verified renewal info counts."""
        store.set_subscription_statuses("premium", [unverified_status(["comeback"])])

        assert await bridge.is_win_back_offer_eligible("premium.monthly", "comeback") is False

    @pytest.mark.asyncio
    async def test_any_verified_status_suffices(self, bridge, store):
        """Test several statuses where one qualifies."""
        store.set_subscription_statuses(
            "premium",
            [unverified_status(["comeback"]), verified_status([]), verified_status(["comeback"])],
        )

        assert await bridge.is_win_back_offer_eligible("premium.monthly", "comeback") is True

    @pytest.mark.asyncio
    async def test_no_statuses(self, bridge):
        """Test a subscription with no status records."""
        assert await bridge.is_win_back_offer_eligible("premium.monthly", "comeback") is False

    @pytest.mark.asyncio
    async def test_unsupported_platform(self, store):
        """Test that the capability check comes first."""
        bridge = CommerceBridge(
            store, capabilities=StaticCapabilities({Capability.PROMOTIONAL_OFFERS})
        )

        with pytest.raises(BridgeError) as exc_info:
            await bridge.is_win_back_offer_eligible("missing", "comeback")

        assert exc_info.value.code == BridgeErrorCode.UNSUPPORTED_PLATFORM_VERSION

    @pytest.mark.asyncio
    async def test_product_not_found(self, bridge):
        """Test an unknown product."""
        with pytest.raises(BridgeError) as exc_info:
            await bridge.is_win_back_offer_eligible("missing", "comeback")

        assert exc_info.value.code == BridgeErrorCode.PRODUCT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_not_a_subscription(self, bridge):
        """Test a product without subscription info."""
        with pytest.raises(BridgeError) as exc_info:
            await bridge.is_win_back_offer_eligible("premium.lifetime", "comeback")

        assert exc_info.value.code == BridgeErrorCode.NOT_A_SUBSCRIPTION

    @pytest.mark.asyncio
    async def test_status_failure(self, bridge, store):
        """Test that status lookup failures become ELIGIBILITY_CHECK_FAILED."""
        store.fail("subscription_statuses", StoreError("Status unavailable"))

        with pytest.raises(BridgeError) as exc_info:
            await bridge.is_win_back_offer_eligible("premium.monthly", "comeback")

        assert exc_info.value.code == BridgeErrorCode.ELIGIBILITY_CHECK_FAILED

    @pytest.mark.asyncio
    async def test_product_lookup_failure(self, bridge, store):
        """Test that catalog failures become ELIGIBILITY_CHECK_FAILED."""
        store.fail("products", StoreError("Store unavailable"))

        with pytest.raises(BridgeError) as exc_info:
            await bridge.is_win_back_offer_eligible("premium.monthly", "comeback")

        assert exc_info.value.code == BridgeErrorCode.ELIGIBILITY_CHECK_FAILED


class TestIntroductoryOfferEligibility:
    """Tests for is_introductory_offer_eligible."""

    @pytest.mark.asyncio
    async def test_eligible_by_default(self, bridge):
        """Test a subscription group the user never subscribed to."""
        assert await bridge.is_introductory_offer_eligible("premium.monthly") is True

    @pytest.mark.asyncio
    async def test_not_eligible(self, bridge, store):
        """Test a group whose intro offer has been used."""
        store.set_intro_offer_eligibility("premium", False)

        assert await bridge.is_introductory_offer_eligible("premium.monthly") is False

    @pytest.mark.asyncio
    async def test_not_gated_by_capabilities(self, store):
        """Test that intro eligibility works on any platform version."""
        bridge = CommerceBridge(store, capabilities=StaticCapabilities())

        assert await bridge.is_introductory_offer_eligible("premium.monthly") is True

    @pytest.mark.asyncio
    async def test_not_a_subscription(self, bridge):
        """Test a consumable product."""
        with pytest.raises(BridgeError) as exc_info:
            await bridge.is_introductory_offer_eligible("coins.100")

        assert exc_info.value.code == BridgeErrorCode.NOT_A_SUBSCRIPTION

    @pytest.mark.asyncio
    async def test_store_failure(self, bridge, store):
        """Test that store failures become ELIGIBILITY_CHECK_FAILED."""
        store.fail("is_eligible_for_intro_offer", StoreError("Store unavailable"))

        with pytest.raises(BridgeError) as exc_info:
            await bridge.is_introductory_offer_eligible("premium.monthly")

        assert exc_info.value.code == BridgeErrorCode.ELIGIBILITY_CHECK_FAILED
        assert isinstance(exc_info.value.cause, StoreError)
