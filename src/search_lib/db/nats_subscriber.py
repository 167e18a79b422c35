"""
JetStream consumer for document-change events.

Events are delivered to a durable, queue-grouped push consumer so that
several ingester replicas share one subject. Every event must be
explicitly acked, nak'ed or terminated by the handler.
"""

from collections.abc import Awaitable, Callable

import nats
from nats.aio.msg import Msg
from nats.js import JetStreamContext
from nats.js.api import AckPolicy, ConsumerConfig, DeliverPolicy

MessageHandler = Callable[[Msg], Awaitable[None]]


class JetStreamSubscriber:
    """
    Durable JetStream subscription owner.

    Usage:
        subscriber = JetStreamSubscriber(servers=["nats://localhost:4222"])
        await subscriber.init()
        await subscriber.subscribe("SEARCH", "ingester", "search.ingest", handle_event)
        ...
        await subscriber.close()
    """

    def __init__(
        self,
        servers: list[str] | None = None,
        user: str | None = None,
        password: str | None = None,
        connect_timeout: float = 5.0,
    ):
        """
        Initialize subscriber.

        Args:
            servers: NATS server URLs
            user: Optional username
            password: Optional password
            connect_timeout: Connection timeout in seconds
        """
        self._servers = servers or ["nats://localhost:4222"]
        self._user = user
        self._password = password
        self._connect_timeout = connect_timeout
        self._nc: nats.NATS | None = None
        self._js: JetStreamContext | None = None
        self._subscriptions: list[JetStreamContext.PushSubscription] = []

    async def init(self) -> None:
        """Open the connection and the JetStream context."""
        self._nc = await nats.connect(
            servers=self._servers,
            user=self._user,
            password=self._password,
            connect_timeout=self._connect_timeout,
        )
        self._js = self._nc.jetstream()

    async def close(self) -> None:
        """Drop every subscription, then the connection."""
        while self._subscriptions:
            await self._subscriptions.pop().unsubscribe()

        if self._nc:
            await self._nc.close()
        self._nc = None
        self._js = None

    async def subscribe(
        self,
        stream: str,
        consumer: str,
        subject: str,
        handler: MessageHandler,
        max_deliver: int = 3,
        ack_wait: float = 30.0,
    ) -> None:
        """
        Attach a handler to a durable queue-group consumer.

        Args:
            stream: Stream holding the subject
            consumer: Durable name, also used as the queue group
            subject: Subject carrying events
            handler: Coroutine deciding ack/nak/term for each message
            max_deliver: Delivery attempts before JetStream gives up
            ack_wait: Seconds before an unacknowledged message is redelivered
        """
        if self._js is None:
            raise RuntimeError("Subscriber not initialized. Call init() first.")

        config = ConsumerConfig(
            durable_name=consumer,
            deliver_policy=DeliverPolicy.ALL,
            ack_policy=AckPolicy.EXPLICIT,
            deliver_group=consumer,
            max_deliver=max_deliver,
            ack_wait=ack_wait,
        )
        subscription = await self._js.subscribe(
            subject,
            stream=stream,
            config=config,
            cb=handler,
            manual_ack=True,
        )
        self._subscriptions.append(subscription)


_nats_subscriber: JetStreamSubscriber | None = None


async def init_nats_subscriber(
    servers: list[str] | None = None,
    user: str | None = None,
    password: str | None = None,
    connect_timeout: float = 5.0,
) -> JetStreamSubscriber:
    """Connect and register the process-wide subscriber."""
    global _nats_subscriber
    subscriber = JetStreamSubscriber(
        servers=servers,
        user=user,
        password=password,
        connect_timeout=connect_timeout,
    )
    await subscriber.init()
    _nats_subscriber = subscriber
    return subscriber


async def close_nats_subscriber() -> None:
    """Close the process-wide subscriber, if any."""
    global _nats_subscriber
    if _nats_subscriber is not None:
        await _nats_subscriber.close()
        _nats_subscriber = None
