"""
Central constants for the search ingester.

Single source of truth for site tags and display-field limits.
"""


class Sites:
    """
    Registry of site tags with special meaning to the ingester.

    Documents tagged with ``DATAHUB`` are composite: they own child
    resources that are regenerated on every upsert and removed on delete.
    """

    DATAHUB: str = "datahub"


# content_truncated is what search results show when there is no highlight
CONTENT_TRUNCATE_LENGTH: int = 200
CONTENT_TRUNCATE_MARKER: str = "..."
