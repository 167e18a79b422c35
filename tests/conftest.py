"""
Pytest configuration and fixtures for search ingester tests.
"""

from unittest.mock import AsyncMock

import pytest

from search_lib.models.event_model import Document, Event, Keyword


@pytest.fixture
def article() -> Document:
    """A plain (non-composite) document."""
    return Document(
        id="doc-1",
        site="website",
        title="Rivers of England",
        content="Rivers\nflow  to the sea.\n",
        url="https://example.org/rivers",
        data_type="article",
        published="2021-06-01",
        keywords=[Keyword(vocab="topic", value="hydrology")],
    )


@pytest.fixture
def datahub_document() -> Document:
    """A composite document that owns resources."""
    return Document(
        id="dh-1",
        site="datahub",
        title="Water Quality Dataset",
        content="Monthly samples from monitoring stations.",
    )


@pytest.fixture
def datahub_resources() -> list[Document]:
    """Three resources sent with a composite document."""
    return [
        Document(title=f"Resource {n}", content=f"Resource body {n}", data_type="file")
        for n in range(1, 4)
    ]


@pytest.fixture
def upsert_event(article: Document) -> Event:
    """Inline upsert event for the plain document."""
    return Event(index="main", verb="upsert", document=article)


@pytest.fixture
def mock_gateway() -> AsyncMock:
    """Index gateway double recording every write."""
    gateway = AsyncMock()
    gateway.delete_by_parent_id.return_value = 0
    return gateway


@pytest.fixture
def mock_minio() -> AsyncMock:
    """MinIO client double."""
    return AsyncMock()
