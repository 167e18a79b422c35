"""
Search Ingester Service - Main Entry Point.

NATS JetStream consumer applying document-change events to the search index.
"""

import asyncio
import logging
import os
import signal
import threading

from nats.aio.msg import Msg

from search_lib.db.minio import MinIOClient, close_minio, init_minio
from search_lib.db.nats_subscriber import (
    JetStreamSubscriber,
    close_nats_subscriber,
    init_nats_subscriber,
)
from search_lib.db.qdrant import QdrantDB, close_qdrant, init_qdrant
from search_lib.helpers.readiness_probe import HealthServer

from ingester.config import get_settings
from ingester.logic.event_processor import EventProcessor
from ingester.logic.exceptions import IngesterError
from ingester.logic.index_gateway import IndexGateway
from ingester.logic.payload_resolver import PayloadResolver, decode_event
from ingester.middleware.error_handler import handle_ingester_error

# Configure logging
logging.basicConfig(
    level=os.getenv("INGESTER_LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("search-ingester")


class IngesterApp:
    """
    Main Ingester application managing service lifecycle.

    Handles:
    - NATS subscription lifecycle
    - MinIO and Qdrant client initialization
    - Health server for Kubernetes probes
    - Graceful shutdown with signal handlers
    - Background retry for failed connections
    """

    def __init__(self) -> None:
        """Initialize the Ingester application."""
        self._settings = get_settings()
        self._subscriber: JetStreamSubscriber | None = None
        self._health_server: HealthServer | None = None
        self._minio: MinIOClient | None = None
        self._qdrant: QdrantDB | None = None
        self._processor: EventProcessor | None = None
        self._running = False
        self._retry_tasks: list[asyncio.Task[None]] = []

        # Connection status flags
        self._minio_connected = False
        self._qdrant_connected = False
        self._nats_connected = False

    async def start(self) -> None:
        """
        Start the Ingester service.

        Initializes all connections with graceful degradation.
        Service starts even if some connections fail, with background retry.
        """
        logger.info("🛠️ Starting Search Ingester Service...")
        logger.info("📋 Configuration:")
        logger.info(f"   Enabled: {self._settings.enabled}")
        logger.info(f"   Health port: {self._settings.health_port}")
        logger.info(f"   NATS: {self._settings.nats_url} ({self._settings.nats_subject})")
        logger.info(f"   MinIO: {self._settings.minio_endpoint}")
        logger.info(f"   Qdrant: {self._settings.qdrant_host}:{self._settings.qdrant_port}")
        logger.info(f"   Composite site: {self._settings.composite_site}")

        if not self._settings.enabled:
            logger.warning("⚠️ Ingester is disabled via configuration")
            return

        # Start health server FIRST - service must respond to health checks
        self._health_server = HealthServer(port=self._settings.health_port)
        health_thread = threading.Thread(
            target=self._health_server.start,
            daemon=True,
        )
        health_thread.start()
        logger.info(f"💓 Health server started on port {self._settings.health_port}")

        logger.info("🛠️ Connecting to MinIO...")
        try:
            await self._connect_minio()
        except Exception as e:
            logger.warning(f"⚠️ MinIO connection failed: {e}")
            logger.info("🔄 Will retry MinIO connection in background...")
            self._retry_tasks.append(
                asyncio.create_task(self._retry(self._connect_minio, "MinIO"))
            )

        logger.info("🛠️ Connecting to Qdrant...")
        try:
            await self._connect_qdrant()
        except Exception as e:
            logger.warning(f"⚠️ Qdrant connection failed: {e}")
            logger.info("🔄 Will retry Qdrant connection in background...")
            self._retry_tasks.append(
                asyncio.create_task(self._retry(self._connect_qdrant, "Qdrant"))
            )

        logger.info("🛠️ Connecting to NATS...")
        try:
            await self._connect_nats()
        except Exception as e:
            logger.warning(f"⚠️ NATS connection failed: {e}")
            logger.info("🔄 Will retry NATS connection in background...")
            self._retry_tasks.append(
                asyncio.create_task(self._retry(self._connect_nats, "NATS"))
            )

        self._update_readiness()
        self._running = True

        if self._is_ready():
            logger.info("🚀 Ingester ready and listening")
        else:
            logger.warning("⚠️ Ingester started but waiting for connections...")

    async def _connect_minio(self) -> None:
        self._minio = await init_minio(
            endpoint=self._settings.minio_endpoint,
            access_key=self._settings.minio_access_key,
            secret_key=self._settings.minio_secret_key,
            secure=self._settings.minio_secure,
        )
        self._minio_connected = True
        logger.info("📦 MinIO connected")
        self._build_processor()

    async def _connect_qdrant(self) -> None:
        self._qdrant = await init_qdrant(
            host=self._settings.qdrant_host,
            port=self._settings.qdrant_port,
            api_key=self._settings.qdrant_api_key or None,
            timeout=self._settings.qdrant_timeout,
        )
        self._qdrant_connected = True
        logger.info("🔍 Qdrant connected")
        self._build_processor()

    async def _connect_nats(self) -> None:
        self._subscriber = await init_nats_subscriber(
            servers=[self._settings.nats_url],
            user=self._settings.nats_user or None,
            password=self._settings.nats_password or None,
            connect_timeout=self._settings.nats_connect_timeout,
        )
        self._nats_connected = True
        logger.info("📥 NATS subscriber connected")
        await self._setup_subscriptions()

    async def _retry(self, connect, name: str) -> None:
        """Background task retrying a connection every 30 seconds."""
        while True:
            await asyncio.sleep(30)
            try:
                await connect()
                logger.info(f"🔌 {name} reconnected")
                self._update_readiness()
                return
            except Exception as e:
                logger.warning(f"⚠️ {name} reconnection attempt failed: {e}")

    def _build_processor(self) -> None:
        """Wire the event processor once both storage clients exist."""
        if not (self._minio_connected and self._qdrant_connected):
            return
        self._processor = EventProcessor.from_settings(
            self._settings,
            gateway=IndexGateway(self._qdrant),
            resolver=PayloadResolver(
                self._minio, timeout=self._settings.object_store_timeout,
            ),
        )

    def _is_ready(self) -> bool:
        """Check if all required services are connected."""
        return (
            self._minio_connected
            and self._qdrant_connected
            and self._nats_connected
            and self._processor is not None
        )

    def _update_readiness(self) -> None:
        """Update health server readiness based on connection status."""
        if self._health_server:
            ready = self._is_ready()
            self._health_server.set_ready(ready)
            if ready:
                logger.info("🚀 All services connected - marking as ready")

    async def _setup_subscriptions(self) -> None:
        """Subscribe to the document-change subject."""
        if not self._subscriber:
            return

        subject = self._settings.nats_subject
        consumer_name = f"{self._settings.nats_consumer_name}-{subject.replace('.', '-')}"

        await self._subscriber.subscribe(
            stream=self._settings.nats_stream_name,
            consumer=consumer_name,
            subject=subject,
            handler=self._handle_message,
            max_deliver=self._settings.nats_max_deliver,
            ack_wait=self._settings.nats_ack_wait,
        )
        logger.info(f"📥 Subscribed to {subject}")

    async def _handle_message(self, msg: Msg) -> None:
        """
        Handle incoming NATS message.

        Args:
            msg: NATS message with a JSON event payload.
        """
        if not self._is_ready() or self._processor is None:
            logger.warning("⚠️ Message received but services not ready, will NAK")
            await msg.nak()
            return

        start_time = asyncio.get_running_loop().time()

        try:
            event = decode_event(msg.data)
            await self._processor.handle(event)
            await msg.ack()

        except IngesterError as e:
            error_info = await handle_ingester_error(e)
            if error_info["should_retry"]:
                await msg.nak(delay=error_info["retry_after"])  # NATS will redeliver
            else:
                await msg.term()  # Terminal failure, don't retry

        except Exception as e:
            logger.exception(f"💀 Unexpected error processing event: {e}")
            await msg.nak()  # Allow retry for unexpected errors

        finally:
            elapsed = asyncio.get_running_loop().time() - start_time
            logger.info(f"⏰ Elapsed: {elapsed:.2f}s")

    async def stop(self) -> None:
        """
        Stop the Ingester service gracefully.

        Closes all connections in reverse order of initialization.
        """
        logger.info("🛑 Ingester shutting down...")
        self._running = False

        if self._health_server:
            self._health_server.set_ready(False)

        for task in self._retry_tasks:
            task.cancel()

        try:
            await close_nats_subscriber()
            logger.info("📥 NATS subscriber disconnected")
        except Exception as e:
            logger.warning(f"⚠️ NATS close failed: {e}")

        try:
            await close_qdrant()
            logger.info("🔍 Qdrant disconnected")
        except Exception as e:
            logger.warning(f"⚠️ Qdrant close failed: {e}")

        close_minio()
        logger.info("📦 MinIO disconnected")

        if self._health_server:
            self._health_server.stop()

        logger.info("👋 Ingester stopped")


async def main() -> None:
    """
    Main entry point for the Ingester service.

    Sets up signal handlers and manages application lifecycle.
    """
    app = IngesterApp()

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def signal_handler() -> None:
        """Handle shutdown signals."""
        logger.info("⚠️ Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await app.start()
        await stop_event.wait()

    except KeyboardInterrupt:
        logger.info("⚠️ Received keyboard interrupt")

    except Exception as e:
        logger.exception(f"💀 Fatal error: {e}")

    finally:
        await app.stop()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
