"""Tests for the live transaction listener."""

import asyncio

import pytest

from commerce_bridge.bridge import CommerceBridge, ListenerState
from commerce_bridge.store import StaticCapabilities


class TestTransactionListener:
    """Tests for TransactionListener."""

    @pytest.mark.asyncio
    async def test_start_delivers_verified_updates(self, bridge, store, recorder, verified, waiter):
        """Test that verified updates are pushed with their receipt."""
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)

        store.publish_update(verified(1))
        await waiter(lambda: len(recorder.updates) == 1)

        message = recorder.messages[0]
        assert message.id == 1
        assert message.receipt_data == "jws.1"
        assert message.restoring is False

    @pytest.mark.asyncio
    async def test_unverified_updates_are_dropped(
        self, bridge, store, recorder, verified, unverified, waiter
    ):
        """Test that unverified updates never reach the callback."""
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)

        store.publish_update(unverified(1))
        store.publish_update(verified(2))
        await waiter(lambda: len(recorder.updates) == 1)

        assert recorder.transaction_ids == [2]
        assert bridge.listener.get_status()["dropped_unverified_count"] == 1

    @pytest.mark.asyncio
    async def test_updates_keep_store_order(self, bridge, store, recorder, verified, waiter):
        """Test that pushes follow the order the store produced them in."""
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)

        for transaction_id in range(1, 11):
            store.publish_update(verified(transaction_id))
        await waiter(lambda: len(recorder.updates) == 10)

        assert recorder.transaction_ids == list(range(1, 11))

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_subscription(
        self, bridge, store, recorder, verified, waiter
    ):
        """Test that restarting replaces the subscription instead of adding one."""
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)
        await asyncio.sleep(0.05)

        assert store.subscriber_count == 1

        store.publish_update(verified(1))
        await waiter(lambda: len(recorder.updates) == 1)
        await asyncio.sleep(0.05)

        assert recorder.transaction_ids == [1]
        assert bridge.listener.state == ListenerState.LISTENING

    @pytest.mark.asyncio
    async def test_stop_prevents_further_delivery(
        self, store, recorder_factory, verified, waiter
    ):
        """Test that nothing is delivered once stop returns."""
        callback = recorder_factory(delay=0.05)
        bridge = CommerceBridge(store, capabilities=StaticCapabilities.all(), callback=callback)
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)

        store.publish_update(verified(1))
        store.publish_update(verified(2))
        await asyncio.sleep(0.01)
        await bridge.stop_listening()

        store.publish_update(verified(3))
        await asyncio.sleep(0.2)

        assert callback.updates == []
        assert store.subscriber_count == 0
        assert bridge.listener.state == ListenerState.STOPPED

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_listening(
        self, store, recorder_factory, verified, waiter
    ):
        """Test that one failed push does not stop the listener."""
        callback = recorder_factory(fail_times=1)
        bridge = CommerceBridge(store, capabilities=StaticCapabilities.all(), callback=callback)
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)

        store.publish_update(verified(1))
        store.publish_update(verified(2))
        await waiter(lambda: len(callback.updates) == 1)

        assert callback.transaction_ids == [2]
        assert bridge.listener.is_running
        assert bridge.get_status()["updates"] == {"delivered": 1, "failed": 1}

        await bridge.close()

    @pytest.mark.asyncio
    async def test_stream_end_stops_listener(self, bridge, store, waiter):
        """Test that the listener stops when the store ends the stream."""
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)

        store.close_updates()
        await waiter(lambda: not bridge.listener.is_running)

        assert bridge.listener.state == ListenerState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_when_not_started(self, bridge):
        """Test that stopping an idle listener is a no-op."""
        await bridge.stop_listening()

        assert bridge.listener.state == ListenerState.STOPPED

    @pytest.mark.asyncio
    async def test_restart_after_stop(self, bridge, store, recorder, verified, waiter):
        """Test that a stopped listener can be started again."""
        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)
        await bridge.stop_listening()

        await bridge.start_listening()
        await waiter(lambda: store.subscriber_count == 1)
        store.publish_update(verified(5))
        await waiter(lambda: len(recorder.updates) == 1)

        assert recorder.transaction_ids == [5]
