"""
Event processing pipeline.

Protocol-agnostic handling of one document-change event:
verb check → payload resolution → upsert or delete → payload cleanup.
Stages run strictly in sequence and any failure aborts the rest.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from search_lib.models.event_model import Document, Event, Verb

from ingester.config import IngesterSettings
from ingester.logic.content_extractor import ContentExtractor, ExtractionEngine
from ingester.logic.exceptions import FieldViolation, UnknownVerbError, ValidationError
from ingester.logic.index_gateway import IndexGateway
from ingester.logic.normalizer import DocumentNormalizer
from ingester.logic.payload_resolver import PayloadResolver
from ingester.logic.resource_lifecycle import ResourceLifecycleManager
from ingester.logic.validator import DocumentValidator, default_rules

logger = logging.getLogger("search-ingester.processor")


class EventState(str, Enum):
    """Processing states of a single event."""

    RECEIVED = "received"
    RESOLVED = "resolved"
    UPSERT = "upsert"
    DELETE = "delete"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ProcessingResult:
    """Outcome of a successfully processed event."""

    verb: Verb
    index: str
    document_id: str
    state: EventState = EventState.COMPLETED
    resources_deleted: int = 0
    resource_ids: list[str] = field(default_factory=list)


class EventProcessor:
    """
    Applies document-change events to the search index.

    Coordinates between:
    - PayloadResolver (out-of-line bodies in MinIO)
    - ContentExtractor (file bytes → text)
    - DocumentNormalizer / DocumentValidator
    - ResourceLifecycleManager (composite document cascades)
    - IndexGateway (Qdrant writes)

    Holds no per-event state, so one instance may serve events one after
    another; concurrent workers should each build their own.
    """

    def __init__(
        self,
        extractor: ContentExtractor,
        gateway: IndexGateway,
        resolver: PayloadResolver,
        normalizer: DocumentNormalizer | None = None,
        validator: DocumentValidator | None = None,
        lifecycle: ResourceLifecycleManager | None = None,
    ) -> None:
        """
        Initialize event processor.

        Args:
            extractor: Content extractor for file bytes.
            gateway: Index gateway for all writes.
            resolver: Payload resolver for out-of-line bodies.
            normalizer: Document normalizer (default settings if omitted).
            validator: Document validator (default rules if omitted).
            lifecycle: Resource lifecycle manager (built on ``gateway`` if omitted).
        """
        self._extractor = extractor
        self._gateway = gateway
        self._resolver = resolver
        self._normalizer = normalizer or DocumentNormalizer()
        self._validator = validator or DocumentValidator()
        self._lifecycle = lifecycle or ResourceLifecycleManager(gateway, self._normalizer)

    @classmethod
    def from_settings(
        cls,
        settings: IngesterSettings,
        gateway: IndexGateway,
        resolver: PayloadResolver,
        engine: ExtractionEngine | None = None,
    ) -> "EventProcessor":
        """
        Build a processor wired from service settings.

        Args:
            settings: Service configuration.
            gateway: Index gateway.
            resolver: Payload resolver.
            engine: Optional extraction engine override.

        Returns:
            Configured EventProcessor.
        """
        normalizer = DocumentNormalizer(
            truncate_length=settings.content_truncate_length,
            truncate_marker=settings.content_truncate_marker,
        )
        return cls(
            extractor=ContentExtractor(
                engine=engine,
                char_limit=settings.extraction_char_limit,
                timeout=settings.extraction_timeout,
            ),
            gateway=gateway,
            resolver=resolver,
            normalizer=normalizer,
            validator=DocumentValidator(
                default_rules(settings.composite_site, settings.max_field_lengths)
            ),
            lifecycle=ResourceLifecycleManager(
                gateway, normalizer, composite_site=settings.composite_site,
            ),
        )

    async def handle(self, event: Event) -> ProcessingResult:
        """
        Process one event to completion.

        Args:
            event: Event decoded from the queue.

        Returns:
            ProcessingResult with counts and generated resource ids.

        Raises:
            UnknownVerbError: If the verb is not upsert or delete.
            PayloadFetchError: If the out-of-line body cannot be fetched.
            PayloadDecodeError: If the out-of-line body is malformed.
            ExtractionError: If file extraction fails.
            ValidationError: If the document is invalid.
            IndexWriteError: If any index write fails.
        """
        state = EventState.RECEIVED
        try:
            verb = Verb.parse(event.verb)
            if verb is None:
                raise UnknownVerbError(event.verb)

            resolved = await self._resolver.resolve(event)
            state = EventState.RESOLVED
            logger.debug(f"🔀 Event for index {event.index}: {state.value}")

            state = EventState.UPSERT if verb is Verb.UPSERT else EventState.DELETE
            logger.debug(f"🔀 Event for index {event.index}: {state.value}")
            if verb is Verb.UPSERT:
                result = await self._process_upsert(resolved)
            else:
                result = await self._process_delete(resolved)

        except Exception as e:
            logger.error(f"❌ Event for index {event.index} failed in state '{state.value}': {e}")
            raise

        await self._resolver.cleanup(resolved.payload_ref)
        logger.info(
            f"✅ {result.verb.value} of {result.document_id} in {result.index} completed "
            f"(resources deleted: {result.resources_deleted}, written: {len(result.resource_ids)})"
        )
        return result

    async def _process_upsert(self, event: Event) -> ProcessingResult:
        document = event.document
        if document is None:
            raise ValidationError(self._validator.validate(None))

        logger.info(f"📄 Upserting doc {document.id} for site {document.site} in index {event.index}")

        document = await self._extract_if_file(document)
        document = self._normalizer.set_content_truncated(document)
        self._validate(self._validator.validate(document))

        deleted = await self._lifecycle.delete_existing_resources(event.index, document)
        await self._gateway.upsert(event.index, document.id, document.to_index_body())
        resource_ids = await self._lifecycle.upsert_resources(
            event.index, document, event.resources,
        )

        return ProcessingResult(
            verb=Verb.UPSERT,
            index=event.index,
            document_id=document.id,
            resources_deleted=deleted,
            resource_ids=resource_ids,
        )

    async def _process_delete(self, event: Event) -> ProcessingResult:
        document = event.document
        self._validate(self._validator.validate_for_delete(document))

        logger.info(f"🗑️ Deleting doc {document.id} for site {document.site} in index {event.index}")

        deleted = await self._lifecycle.delete_existing_resources(event.index, document)
        await self._gateway.delete(event.index, document.id)

        return ProcessingResult(
            verb=Verb.DELETE,
            index=event.index,
            document_id=document.id,
            resources_deleted=deleted,
        )

    async def _extract_if_file(self, document: Document) -> Document:
        """Replace file bytes with extracted text; bytes never survive this step."""
        if not document.file_base64:
            return document.model_copy(update={"file_base64": None})

        extracted = await self._extractor.extract_base64(document.file_base64, document.id)
        if extracted.truncated:
            logger.warning(f"⚠️ Indexing partial content for {document.id}")
        return self._normalizer.apply_extraction(document, extracted)

    @staticmethod
    def _validate(violations: list[FieldViolation]) -> None:
        if violations:
            raise ValidationError(violations)
