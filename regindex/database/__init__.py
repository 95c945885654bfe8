"""
Database module for regindex.

Provides SQLite-based persistence for the repository/tag catalog.
The catalog is a derived cache of registry events; the registry's
notification stream is the source of truth.

Key components:
- connection: Database path resolution and the shared connection handle
- schema: Table definitions and schema versioning
- catalog: Repository and tag operations
- store: CatalogStore, the handle passed to the sink and HTTP services
"""

from .connection import (
    DB_FILENAME,
    MEMORY,
    Database,
    get_connection,
    get_db_path,
)
from .schema import CURRENT_VERSION, ensure_schema, get_schema_version
from .catalog import (
    upsert_repository,
    upsert_tag,
    delete_tag,
    prune_orphan_repositories,
    patch_tag_status,
    get_tag,
    list_repositories,
    get_repository_count,
    get_tag_count,
    get_catalog_info,
    record_to_tag,
)
from .store import CatalogStore

__all__ = [
    # Connection
    'DB_FILENAME',
    'MEMORY',
    'Database',
    'get_connection',
    'get_db_path',
    # Schema
    'CURRENT_VERSION',
    'ensure_schema',
    'get_schema_version',
    # Catalog
    'upsert_repository',
    'upsert_tag',
    'delete_tag',
    'prune_orphan_repositories',
    'patch_tag_status',
    'get_tag',
    'list_repositories',
    'get_repository_count',
    'get_tag_count',
    'get_catalog_info',
    'record_to_tag',
    # Store
    'CatalogStore',
]
