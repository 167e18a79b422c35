"""
Lifecycle of resources owned by composite documents.

Resources have no durable identity: they are regenerated from the
parent on every upsert and removed with it on delete. Old resources are
deleted before the parent is written and new ones are written after,
so a failure leaves children missing rather than duplicated.
"""

import logging
import uuid

from search_lib.constants import Sites
from search_lib.models.event_model import Document

from ingester.logic.index_gateway import IndexGateway
from ingester.logic.normalizer import DocumentNormalizer

logger = logging.getLogger("search-ingester.resources")


class ResourceLifecycleManager:
    """
    Applies the delete-old / write-new protocol for composite documents.

    Attributes:
        gateway: Index gateway used for all writes.
        normalizer: Derives content_truncated for each resource.
        composite_site: Site tag marking composite documents.
    """

    def __init__(
        self,
        gateway: IndexGateway,
        normalizer: DocumentNormalizer | None = None,
        composite_site: str = Sites.DATAHUB,
    ) -> None:
        self._gateway = gateway
        self._normalizer = normalizer or DocumentNormalizer()
        self._composite_site = composite_site

    def is_composite(self, document: Document) -> bool:
        return document.site == self._composite_site

    async def delete_existing_resources(self, index: str, parent: Document) -> int:
        """
        Remove every resource pointing at the parent.

        Keyed on the parent's own id, which is what each resource
        carries in its parent_id.

        Args:
            index: Target index.
            parent: The composite document.

        Returns:
            Number of resources removed (0 for non-composite documents).
        """
        if not self.is_composite(parent):
            return 0

        deleted = await self._gateway.delete_by_parent_id(index, parent.id)
        logger.info(f"🗑️ Deleted {deleted} existing resources of {parent.id} in {index}")
        return deleted

    async def upsert_resources(
        self,
        index: str,
        parent: Document,
        resources: list[Document] | None,
    ) -> list[str]:
        """
        Write freshly linked copies of the resources.

        Args:
            index: Target index.
            parent: The composite document, already written.
            resources: Resources sent with the event.

        Returns:
            Generated ids of the written resources, in order.
        """
        if not resources or not self.is_composite(parent):
            return []

        logger.info(f"📝 Upserting {len(resources)} resources for {parent.id}")
        written: list[str] = []
        for resource in resources:
            linked = self.link_resource(parent, resource)
            await self._gateway.upsert(index, linked.id, linked.to_index_body())
            written.append(linked.id)
        return written

    def link_resource(self, parent: Document, resource: Document) -> Document:
        """
        Build the indexable copy of a resource.

        Args:
            parent: Owning composite document.
            resource: Resource as sent by the producer.

        Returns:
            New document with fresh id/url and parent linkage.
        """
        # TODO: derive a stable id from parent id + resource title so redelivery reuses ids
        linked = resource.model_copy(
            update={
                "id": str(uuid.uuid4()),
                "url": str(uuid.uuid4()),
                "site": parent.site,
                "parent_id": parent.id,
                "parent_title": parent.title,
                "file_base64": None,
            }
        )
        return self._normalizer.set_content_truncated(linked)
