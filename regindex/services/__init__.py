"""
Service layer for regindex.

Contains the logic between the catalog store and its callers:
- EventSink: Applies registry notifications (the only writer)
- QueryService: Paginated catalog reads
- StatusPatchService: Review-status annotations on tags

Each service takes the CatalogStore it works on.
"""

from .event_sink import EventSink
from .query_service import QueryArgs, QueryService, DEFAULT_LIMIT
from .status_service import StatusPatchService, TagStatusPatch

__all__ = [
    'EventSink',
    'QueryArgs',
    'QueryService',
    'DEFAULT_LIMIT',
    'StatusPatchService',
    'TagStatusPatch',
]
