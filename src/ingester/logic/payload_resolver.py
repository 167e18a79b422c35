"""
Event body resolution.

Large events travel as a pointer to an object in MinIO/S3. The resolver
swaps the pointer for the stored body before processing and removes the
object once the event has been fully processed.
"""

import asyncio
import json
import logging

from pydantic import ValidationError as PydanticValidationError

from search_lib.db.minio import MinIOClient
from search_lib.models.event_model import Event, EventBody, PayloadRef

from ingester.logic.exceptions import PayloadDecodeError, PayloadFetchError

logger = logging.getLogger("search-ingester.payload")


def decode_event(data: bytes | str, source: str = "message") -> Event:
    """
    Decode a queue message into an Event.

    Args:
        data: Raw JSON message body.
        source: Description of where the body came from.

    Returns:
        Decoded event.

    Raises:
        PayloadDecodeError: If the body is not a valid event.
    """
    try:
        return Event.model_validate_json(data)
    except PydanticValidationError as e:
        raise PayloadDecodeError(source, _summarize(e)) from e


def decode_event_body(data: bytes | str, source: str) -> EventBody:
    """
    Decode an out-of-line event body.

    Args:
        data: Raw JSON object body.
        source: Description of where the body came from.

    Returns:
        Decoded document and resources.

    Raises:
        PayloadDecodeError: If the body is not valid JSON of the expected shape.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadDecodeError(source, f"invalid JSON: {e}") from e
    try:
        return EventBody.model_validate(raw)
    except PydanticValidationError as e:
        raise PayloadDecodeError(source, _summarize(e)) from e


def _summarize(error: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
        for err in error.errors()
    )


class PayloadResolver:
    """
    Materializes out-of-line event bodies.

    Attributes:
        minio: Object storage client.
        timeout: Seconds allowed for each object storage call.
    """

    def __init__(self, minio_client: MinIOClient, timeout: float | None = None) -> None:
        """
        Initialize payload resolver.

        Args:
            minio_client: Connected MinIO client.
            timeout: Optional timeout in seconds for fetch and cleanup.
        """
        self._minio = minio_client
        self._timeout = timeout

    async def resolve(self, event: Event) -> Event:
        """
        Return the event with its real document and resources.

        Args:
            event: Event as decoded from the queue.

        Returns:
            The same event when inline; otherwise a copy carrying the
            fetched body and the original payload reference.

        Raises:
            PayloadFetchError: If the object is missing or unreadable.
            PayloadDecodeError: If the object is not a valid event body.
        """
        ref = event.payload_ref
        if ref is None:
            return event

        logger.info(f"📥 Fetching out-of-line payload {ref}")
        data = await self._fetch(ref)
        body = decode_event_body(data, source=str(ref))

        return event.model_copy(
            update={"document": body.document, "resources": body.resources}
        )

    async def cleanup(self, ref: PayloadRef | None) -> None:
        """
        Delete an out-of-line payload after successful processing.

        Failures are logged and swallowed; storage lifecycle rules
        reclaim anything left behind.

        Args:
            ref: Payload reference, or None for inline events.
        """
        if ref is None:
            return
        try:
            await asyncio.wait_for(
                self._minio.delete_file(ref.bucket, ref.key),
                timeout=self._timeout,
            )
            logger.debug(f"🧹 Removed payload {ref}")
        except Exception as e:
            logger.warning(f"⚠️ Failed to remove payload {ref}: {e}")

    async def _fetch(self, ref: PayloadRef) -> bytes:
        try:
            return await asyncio.wait_for(
                self._minio.download_file(ref.bucket, ref.key),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise PayloadFetchError(ref.bucket, ref.key, f"timed out after {self._timeout}s") from e
        except Exception as e:
            raise PayloadFetchError(ref.bucket, ref.key, str(e)) from e
