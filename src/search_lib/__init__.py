"""
Search Ingester Shared Library

This package contains the shared code used by the ingester worker:
- db/: Storage clients (Qdrant, MinIO, NATS)
- helpers/: Utility functions (health probes)
- models/: Pydantic models for the queue wire format
"""

__version__ = "0.1.0"
