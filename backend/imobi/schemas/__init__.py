from .listing import (
    LOCATION_NOT_INFORMED,
    PLACEHOLDER_IMAGE,
    ListingRecord,
    PropertyCategory,
    QueryFilters,
)
from .search import (
    AggregatedResult,
    ConnectorFailure,
    ConnectorOutcome,
    ConnectorSuccess,
    RequestDescriptor,
)

__all__ = [
    "AggregatedResult",
    "ConnectorFailure",
    "ConnectorOutcome",
    "ConnectorSuccess",
    "ListingRecord",
    "LOCATION_NOT_INFORMED",
    "PLACEHOLDER_IMAGE",
    "PropertyCategory",
    "QueryFilters",
    "RequestDescriptor",
]
