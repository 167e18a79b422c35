"""
MinIO/S3 access for out-of-line event payloads.

Producers park large event bodies in object storage and send only the
bucket/key on the queue. The ingester reads each body once and removes
it after the event has been applied.
"""

from miniopy_async import Minio


class MinIOClient:
    """
    Payload store backed by MinIO.

    Usage:
        store = MinIOClient(endpoint="localhost:9000", access_key="...", secret_key="...")
        await store.init()

        body = await store.download_file("payloads", "events/42.json")
        await store.delete_file("payloads", "events/42.json")
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
    ):
        """
        Initialize payload store.

        Args:
            endpoint: MinIO server endpoint (host:port)
            access_key: Access key ID
            secret_key: Secret access key
            secure: Use HTTPS
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
        )

    async def init(self) -> None:
        """Fail fast on bad credentials or an unreachable endpoint."""
        await self._client.list_buckets()

    async def download_file(self, bucket_name: str, object_name: str) -> bytes:
        """
        Read a whole payload object.

        Args:
            bucket_name: Payload bucket
            object_name: Payload key

        Returns:
            Raw payload bytes
        """
        response = await self._client.get_object(bucket_name, object_name)
        try:
            return await response.read()
        finally:
            # The connection goes back to the pool even when the read fails
            response.close()
            await response.release()

    async def delete_file(self, bucket_name: str, object_name: str) -> None:
        """Remove a processed payload object."""
        await self._client.remove_object(bucket_name, object_name)


_minio_client: MinIOClient | None = None


async def init_minio(
    endpoint: str,
    access_key: str,
    secret_key: str,
    secure: bool = False,
) -> MinIOClient:
    """Create, verify and register the process-wide payload store."""
    global _minio_client
    client = MinIOClient(
        endpoint=endpoint,
        access_key=access_key,
        secret_key=secret_key,
        secure=secure,
    )
    await client.init()
    _minio_client = client
    return client


def close_minio() -> None:
    """Forget the process-wide payload store (HTTP needs no teardown)."""
    global _minio_client
    _minio_client = None
