"""
Search Ingester Service.

Consumes document-change events from NATS and applies them to the search index.
"""
