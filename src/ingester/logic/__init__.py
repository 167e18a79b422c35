"""
Business logic for the Ingester service.

Protocol-agnostic logic for resolving, extracting, validating and
indexing document-change events. Import directly from submodules:

    from ingester.logic.exceptions import ValidationError
    from ingester.logic.event_processor import EventProcessor
    from ingester.logic.index_gateway import IndexGateway
"""
