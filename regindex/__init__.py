"""
regindex - A repository and tag catalog for a container image registry.

The registry emits a notification for every manifest push and delete.
regindex consumes those notifications and keeps a queryable index of
repositories and their tags, which external tools can page through and
annotate with a review status.

Quick Start:
    from regindex import CatalogStore, EventSink, QueryArgs, QueryService, parse_envelope
    from regindex.api import create_app

    store = CatalogStore.open("/var/lib/registry/registry.sqlite3")

    # Apply registry notifications
    sink = EventSink(store)
    sink.write(parse_envelope(notification_json))

    # Page through the catalog
    for repo in QueryService(store).get_page(QueryArgs(keyword="library/")):
        print(repo.repository, [t.tag for t in repo.tags])

    # Serve it over HTTP
    app = create_app(store)
"""

__version__ = "0.1.0"

from .domain import (
    Repository,
    Tag,
    Event,
    EventAction,
    Target,
    parse_envelope,
    parse_tag_name,
)
from .errors import (
    CatalogError,
    StorageUnavailable,
    QueryFailure,
    NotFound,
    MalformedRequest,
)
from .database import CatalogStore, Database
from .services import (
    EventSink,
    QueryArgs,
    QueryService,
    StatusPatchService,
    TagStatusPatch,
)
from .config import load_config

__all__ = [
    "__version__",
    # Domain objects
    "Repository",
    "Tag",
    "Event",
    "EventAction",
    "Target",
    "parse_envelope",
    "parse_tag_name",
    # Errors
    "CatalogError",
    "StorageUnavailable",
    "QueryFailure",
    "NotFound",
    "MalformedRequest",
    # Storage
    "CatalogStore",
    "Database",
    # Services
    "EventSink",
    "QueryArgs",
    "QueryService",
    "StatusPatchService",
    "TagStatusPatch",
    # Configuration
    "load_config",
]
