"""
Search index gateway.

Single-document writes by id plus delete-by-parent, with every outcome
other than an explicit success surfaced as IndexWriteError.
"""

import logging
from typing import Any

from qdrant_client.http.exceptions import UnexpectedResponse
from qdrant_client.models import UpdateStatus

from search_lib.db.qdrant import QdrantDB

from ingester.logic.exceptions import IndexWriteError

logger = logging.getLogger("search-ingester.index")

# Qdrant does not distinguish created from updated; both finish as one of these.
_WRITE_OK = {UpdateStatus.COMPLETED.value, UpdateStatus.ACKNOWLEDGED.value}


class IndexGateway:
    """
    Thin wrapper over the Qdrant client.

    Attributes:
        qdrant: Qdrant client (one collection per index name).
    """

    PARENT_FIELD = "parent_id"

    def __init__(self, qdrant_client: QdrantDB) -> None:
        """
        Initialize index gateway.

        Args:
            qdrant_client: Connected Qdrant client.
        """
        self._qdrant = qdrant_client

    async def upsert(self, index: str, document_id: str, body: dict[str, Any]) -> None:
        """
        Create or replace a document.

        Args:
            index: Target index.
            document_id: Document id.
            body: Document JSON.

        Raises:
            IndexWriteError: If the index does not confirm the write.
        """
        try:
            status = await self._qdrant.upsert_payload(index, document_id, body)
        except UnexpectedResponse as e:
            raise IndexWriteError("upsert", index, document_id, str(e.status_code), _content(e)) from e
        except Exception as e:
            raise IndexWriteError("upsert", index, document_id, type(e).__name__, str(e)) from e

        if status not in _WRITE_OK:
            raise IndexWriteError("upsert", index, document_id, status)
        logger.debug(f"📝 Upserted {document_id} in {index} ({status})")

    async def delete(self, index: str, document_id: str) -> None:
        """
        Delete a document by id.

        Absence is reported, not ignored: callers wanting idempotent
        deletes must handle ``IndexWriteError.is_not_found``.

        Args:
            index: Target index.
            document_id: Document id.

        Raises:
            IndexWriteError: If the document is absent or the delete fails.
        """
        try:
            existing = await self._qdrant.retrieve(index, document_id)
            if existing is None:
                raise IndexWriteError(
                    "delete", index, document_id, IndexWriteError.NOT_FOUND,
                )
            status = await self._qdrant.delete_point(index, document_id)
        except IndexWriteError:
            raise
        except UnexpectedResponse as e:
            raise IndexWriteError("delete", index, document_id, str(e.status_code), _content(e)) from e
        except Exception as e:
            raise IndexWriteError("delete", index, document_id, type(e).__name__, str(e)) from e

        if status not in _WRITE_OK:
            raise IndexWriteError("delete", index, document_id, status)
        logger.debug(f"🗑️ Deleted {document_id} from {index}")

    async def delete_by_parent_id(self, index: str, parent_id: str) -> int:
        """
        Delete every document whose parent_id equals ``parent_id``.

        Args:
            index: Target index.
            parent_id: Id of the owning document.

        Returns:
            Number of documents matched for deletion.

        Raises:
            IndexWriteError: Single aggregate error for any failure.
        """
        try:
            matched = await self._qdrant.count_by_field(index, self.PARENT_FIELD, parent_id)
            status = await self._qdrant.delete_by_field(index, self.PARENT_FIELD, parent_id)
        except UnexpectedResponse as e:
            raise IndexWriteError(
                "delete_by_parent_id", index, parent_id, str(e.status_code), _content(e),
            ) from e
        except Exception as e:
            raise IndexWriteError(
                "delete_by_parent_id", index, parent_id, type(e).__name__, str(e),
            ) from e

        if status not in _WRITE_OK:
            raise IndexWriteError("delete_by_parent_id", index, parent_id, status)
        logger.debug(f"🗑️ Deleted {matched} children of {parent_id} from {index}")
        return matched


def _content(error: UnexpectedResponse) -> str:
    return error.content.decode("utf-8", errors="replace") if error.content else ""
