"""Unit tests for IndexGateway."""

from unittest.mock import AsyncMock

import httpx
import pytest
from qdrant_client.http.exceptions import UnexpectedResponse

from ingester.logic.exceptions import IndexWriteError
from ingester.logic.index_gateway import IndexGateway


def _unexpected(status: int, content: bytes) -> UnexpectedResponse:
    return UnexpectedResponse(
        status_code=status,
        reason_phrase="error",
        content=content,
        headers=httpx.Headers(),
    )


class TestIndexGateway:
    """Tests for IndexGateway class."""

    def setup_method(self) -> None:
        """Create gateway with a mocked Qdrant client."""
        self.mock_qdrant = AsyncMock()
        self.gateway = IndexGateway(self.mock_qdrant)

    # ==========================================
    # upsert
    # ==========================================

    @pytest.mark.asyncio
    async def test_upsert_completed_is_success(self) -> None:
        """Test a completed write succeeds."""
        self.mock_qdrant.upsert_payload.return_value = "completed"

        await self.gateway.upsert("main", "doc-1", {"id": "doc-1"})

        self.mock_qdrant.upsert_payload.assert_awaited_once_with("main", "doc-1", {"id": "doc-1"})

    @pytest.mark.asyncio
    async def test_upsert_acknowledged_is_success(self) -> None:
        """Test an acknowledged write succeeds."""
        self.mock_qdrant.upsert_payload.return_value = "acknowledged"

        await self.gateway.upsert("main", "doc-1", {})

    @pytest.mark.asyncio
    async def test_upsert_unexpected_status_raises(self) -> None:
        """Test any other status is an IndexWriteError."""
        self.mock_qdrant.upsert_payload.return_value = "wait_timeout"

        with pytest.raises(IndexWriteError) as exc_info:
            await self.gateway.upsert("main", "doc-1", {})

        assert exc_info.value.status == "wait_timeout"
        assert exc_info.value.operation == "upsert"

    @pytest.mark.asyncio
    async def test_upsert_api_error_carries_status_and_body(self) -> None:
        """Test API errors keep the index status code and body."""
        self.mock_qdrant.upsert_payload.side_effect = _unexpected(404, b"collection missing")

        with pytest.raises(IndexWriteError) as exc_info:
            await self.gateway.upsert("main", "doc-1", {})

        assert exc_info.value.status == "404"
        assert exc_info.value.body == "collection missing"

    # ==========================================
    # delete
    # ==========================================

    @pytest.mark.asyncio
    async def test_delete_existing_document(self) -> None:
        """Test delete of a present document succeeds."""
        self.mock_qdrant.retrieve.return_value = {"id": "doc-1"}
        self.mock_qdrant.delete_point.return_value = "completed"

        await self.gateway.delete("main", "doc-1")

        self.mock_qdrant.delete_point.assert_awaited_once_with("main", "doc-1")

    @pytest.mark.asyncio
    async def test_delete_missing_document_is_not_swallowed(self) -> None:
        """Test deleting an absent document raises with not_found status."""
        self.mock_qdrant.retrieve.return_value = None

        with pytest.raises(IndexWriteError) as exc_info:
            await self.gateway.delete("main", "doc-1")

        assert exc_info.value.is_not_found
        self.mock_qdrant.delete_point.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_client_failure(self) -> None:
        """Test transport errors become IndexWriteError."""
        self.mock_qdrant.retrieve.side_effect = ConnectionError("refused")

        with pytest.raises(IndexWriteError) as exc_info:
            await self.gateway.delete("main", "doc-1")

        assert exc_info.value.status == "ConnectionError"

    # ==========================================
    # delete_by_parent_id
    # ==========================================

    @pytest.mark.asyncio
    async def test_delete_by_parent_id_returns_count(self) -> None:
        """Test bulk delete filters on parent_id and reports the count."""
        self.mock_qdrant.count_by_field.return_value = 4
        self.mock_qdrant.delete_by_field.return_value = "completed"

        deleted = await self.gateway.delete_by_parent_id("main", "dh-1")

        assert deleted == 4
        self.mock_qdrant.delete_by_field.assert_awaited_once_with("main", "parent_id", "dh-1")

    @pytest.mark.asyncio
    async def test_delete_by_parent_id_failure_is_aggregate(self) -> None:
        """Test a failed bulk delete is one IndexWriteError."""
        self.mock_qdrant.count_by_field.return_value = 4
        self.mock_qdrant.delete_by_field.side_effect = _unexpected(500, b"partial failure")

        with pytest.raises(IndexWriteError) as exc_info:
            await self.gateway.delete_by_parent_id("main", "dh-1")

        assert exc_info.value.operation == "delete_by_parent_id"
        assert exc_info.value.document_id == "dh-1"
        assert exc_info.value.status == "500"
