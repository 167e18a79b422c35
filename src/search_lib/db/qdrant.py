"""
Qdrant search index client.

Provides async payload-only point storage keyed by document id.
"""

import uuid
from typing import Any

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    FieldCondition,
    Filter,
    FilterSelector,
    MatchValue,
    PointIdsList,
    PointStruct,
)


def point_id_for(document_id: str) -> str:
    """
    Map a document id to a Qdrant point id.

    Qdrant only accepts UUIDs or unsigned integers as point ids, so
    arbitrary document ids are hashed into a stable UUID.

    Args:
        document_id: Document identifier from the event.

    Returns:
        Deterministic UUID string for the document.
    """
    return str(uuid.uuid5(uuid.NAMESPACE_URL, document_id))


class QdrantDB:
    """
    Async Qdrant client for document operations.
    
    Points are stored without vectors; the document JSON lives in the
    payload and is filtered on by field.

    Usage:
        qdrant = QdrantDB(host="localhost", port=6333)
        await qdrant.init()
        
        status = await qdrant.upsert_payload("collection", "doc-1", {"id": "doc-1"})
        deleted = await qdrant.delete_by_field("collection", "parent_id", "doc-1")
        
        await qdrant.close()
    """
    
    def __init__(
        self,
        host: str = "localhost",
        port: int = 6333,
        grpc_port: int = 6334,
        prefer_grpc: bool = True,
        api_key: str | None = None,
        timeout: int | None = None,
    ):
        """
        Initialize Qdrant client.
        
        Args:
            host: Qdrant server host
            port: Qdrant REST API port
            grpc_port: Qdrant gRPC port
            prefer_grpc: Use gRPC for better performance
            api_key: Optional API key for authentication
            timeout: Request timeout in seconds
        """
        self._client = AsyncQdrantClient(
            host=host,
            port=port,
            grpc_port=grpc_port,
            prefer_grpc=prefer_grpc,
            api_key=api_key,
            timeout=timeout,
        )
    
    async def init(self) -> None:
        """Initialize connection (verify connectivity)."""
        await self._client.get_collections()
    
    async def close(self) -> None:
        """Close the client connection."""
        await self._client.close()

    async def upsert_payload(
        self,
        collection_name: str,
        document_id: str,
        payload: dict[str, Any],
    ) -> str:
        """
        Insert or replace a single payload-only point.
        
        Args:
            collection_name: Target collection
            document_id: Document identifier
            payload: Document body
        
        Returns:
            Update status reported by Qdrant
        """
        result = await self._client.upsert(
            collection_name=collection_name,
            points=[
                PointStruct(id=point_id_for(document_id), vector={}, payload=payload),
            ],
            wait=True,
        )
        return result.status.value

    async def retrieve(
        self,
        collection_name: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """
        Fetch a single point payload.
        
        Args:
            collection_name: Collection to read
            document_id: Document identifier
        
        Returns:
            Stored payload, or None if the point does not exist
        """
        records = await self._client.retrieve(
            collection_name=collection_name,
            ids=[point_id_for(document_id)],
            with_payload=True,
            with_vectors=False,
        )
        if not records:
            return None
        return records[0].payload or {}

    async def delete_point(self, collection_name: str, document_id: str) -> str:
        """
        Delete a single point by document id.

        Returns:
            Update status reported by Qdrant
        """
        result = await self._client.delete(
            collection_name=collection_name,
            points_selector=PointIdsList(points=[point_id_for(document_id)]),
            wait=True,
        )
        return result.status.value

    async def count_by_field(self, collection_name: str, key: str, value: str) -> int:
        """Count points whose payload field equals a value."""
        result = await self._client.count(
            collection_name=collection_name,
            count_filter=_match_filter(key, value),
            exact=True,
        )
        return result.count

    async def delete_by_field(self, collection_name: str, key: str, value: str) -> str:
        """
        Delete all points whose payload field equals a value.

        Returns:
            Update status reported by Qdrant
        """
        result = await self._client.delete(
            collection_name=collection_name,
            points_selector=FilterSelector(filter=_match_filter(key, value)),
            wait=True,
        )
        return result.status.value


def _match_filter(key: str, value: str) -> Filter:
    return Filter(must=[FieldCondition(key=key, match=MatchValue(value=value))])


_qdrant_client: QdrantDB | None = None


async def init_qdrant(
    host: str = "localhost",
    port: int = 6333,
    api_key: str | None = None,
    timeout: int | None = None,
) -> QdrantDB:
    """Initialize the global Qdrant client."""
    global _qdrant_client
    _qdrant_client = QdrantDB(host=host, port=port, api_key=api_key, timeout=timeout)
    await _qdrant_client.init()
    return _qdrant_client


async def close_qdrant() -> None:
    """Close the global Qdrant client."""
    global _qdrant_client
    if _qdrant_client is not None:
        await _qdrant_client.close()
        _qdrant_client = None
