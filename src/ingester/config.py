"""
Configuration for the Ingester Service.

Uses Pydantic Settings to load environment variables.
All settings prefixed with INGESTER_ for namespace isolation.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from search_lib.constants import CONTENT_TRUNCATE_LENGTH, CONTENT_TRUNCATE_MARKER, Sites
from search_lib.models.event_model import Document


class IngesterSettings(BaseSettings):
    """
    Settings for the Ingester service.

    All environment variables are prefixed with INGESTER_.
    Example: INGESTER_NATS_URL, INGESTER_QDRANT_HOST
    """

    # Service Settings
    enabled: bool = Field(
        True,
        description="Enable ingester service",
    )
    health_port: int = Field(
        8080,
        description="Health check HTTP port",
    )

    # NATS
    nats_url: str = Field(
        "nats://localhost:4222",
        description="NATS server URL",
    )
    nats_user: str | None = Field(
        None,
        description="NATS username",
    )
    nats_password: str | None = Field(
        None,
        description="NATS password",
    )
    nats_connect_timeout: float = Field(
        5.0,
        description="NATS connection timeout in seconds",
        gt=0,
    )
    nats_stream_name: str = Field(
        "SEARCH",
        description="NATS JetStream stream name",
    )
    nats_consumer_name: str = Field(
        "ingester-consumer",
        description="NATS consumer durable name",
    )
    nats_subject: str = Field(
        "search.ingest",
        description="Subject carrying document-change events",
    )
    nats_max_deliver: int = Field(
        3,
        description="Maximum JetStream delivery attempts per event",
        ge=1,
    )
    nats_ack_wait: float = Field(
        60.0,
        description="Seconds before an unacknowledged event is redelivered",
        gt=0,
    )

    # MinIO
    minio_endpoint: str = Field(
        "localhost:9000",
        description="MinIO server endpoint",
    )
    minio_access_key: str = Field(
        "minioadmin",
        description="MinIO access key",
    )
    minio_secret_key: str = Field(
        "minioadmin",
        description="MinIO secret key",
    )
    minio_secure: bool = Field(
        False,
        description="Use HTTPS for MinIO",
    )
    object_store_timeout: float = Field(
        30.0,
        description="Timeout in seconds for payload fetch and cleanup",
        gt=0,
    )

    # Qdrant
    qdrant_host: str = Field(
        "localhost",
        description="Qdrant server hostname",
    )
    qdrant_port: int = Field(
        6333,
        description="Qdrant REST API port",
    )
    qdrant_api_key: str | None = Field(
        None,
        description="Qdrant API key for authentication",
    )
    qdrant_timeout: int = Field(
        30,
        description="Qdrant request timeout in seconds",
        gt=0,
    )

    # Extraction
    extraction_char_limit: int = Field(
        100_000_000,
        description="Maximum characters kept from an extracted file",
        gt=0,
    )
    extraction_timeout: float = Field(
        120.0,
        description="Timeout in seconds for extracting a single file",
        gt=0,
    )

    # Normalization
    content_truncate_length: int = Field(
        CONTENT_TRUNCATE_LENGTH,
        description="Characters of content kept in content_truncated",
        gt=0,
    )
    content_truncate_marker: str = Field(
        CONTENT_TRUNCATE_MARKER,
        description="Marker appended when content_truncated is cut short",
    )

    # Documents
    composite_site: str = Field(
        Sites.DATAHUB,
        description="Site tag marking composite documents that own resources",
    )
    max_field_lengths: dict[str, int] = Field(
        default_factory=dict,
        description="Extra validation rules: field name -> maximum length",
    )

    # Logging
    log_level: str = Field(
        "INFO",
        description="Logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="INGESTER_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate log level is valid.

        Args:
            v: Log level string.

        Returns:
            Uppercase log level.

        Raises:
            ValueError: If log level is invalid.
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("max_field_lengths")
    @classmethod
    def validate_max_field_lengths(cls, v: dict[str, int]) -> dict[str, int]:
        """
        Validate field length limits name document fields and are positive.

        Args:
            v: Mapping of field name to maximum length.

        Returns:
            Validated mapping.

        Raises:
            ValueError: If a field is unknown or a limit is not positive.
        """
        for field, limit in v.items():
            if field not in Document.model_fields:
                raise ValueError(f"Unknown document field in max_field_lengths: '{field}'")
            if limit <= 0:
                raise ValueError(f"Invalid max length for '{field}': {limit}. Must be positive")
        return v


_settings: IngesterSettings | None = None


def get_settings() -> IngesterSettings:
    """
    Get ingester settings from environment.

    Returns:
        IngesterSettings instance.
    """
    global _settings
    if _settings is None:
        _settings = IngesterSettings()  # type: ignore[call-arg]
    return _settings


def reset_settings() -> None:
    """
    Reset settings for testing.

    Clears the cached settings instance.
    """
    global _settings
    _settings = None
