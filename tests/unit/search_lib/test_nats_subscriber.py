"""
Unit tests for the JetStream subscriber.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from nats.js.api import AckPolicy

from search_lib.db.nats_subscriber import JetStreamSubscriber


class TestJetStreamSubscriber:
    """Tests for subscription setup and teardown."""

    @pytest.fixture
    def subscriber(self):
        """Create a subscriber with mocked connection and JetStream context."""
        subscriber = JetStreamSubscriber(servers=["nats://queue:4222"])
        subscriber._nc = MagicMock()
        subscriber._nc.close = AsyncMock()
        subscriber._js = MagicMock()
        subscriber._js.subscribe = AsyncMock(return_value=AsyncMock())
        return subscriber

    @pytest.mark.asyncio
    async def test_subscribe_before_init_raises(self) -> None:
        """Test subscribing requires a connection."""
        with pytest.raises(RuntimeError):
            await JetStreamSubscriber().subscribe("S", "c", "s.x", AsyncMock())

    @pytest.mark.asyncio
    async def test_subscribe_uses_durable_queue_group(self, subscriber) -> None:
        """Test the consumer is durable, queue-grouped and explicitly acked."""
        handler = AsyncMock()

        await subscriber.subscribe(
            "SEARCH", "ingester", "search.ingest", handler, max_deliver=5, ack_wait=45.0,
        )

        args, kwargs = subscriber._js.subscribe.await_args
        assert args == ("search.ingest",)
        assert kwargs["stream"] == "SEARCH"
        assert kwargs["cb"] is handler
        assert kwargs["manual_ack"] is True
        config = kwargs["config"]
        assert config.durable_name == "ingester"
        assert config.deliver_group == "ingester"
        assert config.ack_policy == AckPolicy.EXPLICIT
        assert config.max_deliver == 5
        assert config.ack_wait == 45.0

    @pytest.mark.asyncio
    async def test_close_unsubscribes_and_disconnects(self, subscriber) -> None:
        """Test close releases every subscription and the connection."""
        await subscriber.subscribe("SEARCH", "ingester", "search.ingest", AsyncMock())
        subscription = subscriber._js.subscribe.return_value
        connection = subscriber._nc

        await subscriber.close()

        subscription.unsubscribe.assert_awaited_once()
        connection.close.assert_awaited_once()
        assert subscriber._nc is None
