"""
Storage clients for the search ingester.

- qdrant: Search index client
- minio: Object storage client for out-of-line payloads
- nats_subscriber: JetStream consumer
"""
