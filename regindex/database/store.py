"""
CatalogStore: the process-wide handle to the catalog.

Wraps a Database and exposes the catalog operations as methods, so the
event sink and the HTTP services receive one explicitly passed object.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..domain.repository import Repository
from ..domain.tag import Tag
from . import catalog
from .connection import MEMORY, Database

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Durable repositories/tags catalog.

    Example:
        store = CatalogStore.from_config(load_config())
        store.upsert_repository('library/nginx')
        store.upsert_tag('library/nginx', '1.25', 'sha256:...', url, datetime.now(timezone.utc))
        for repo in store.list_repositories(keyword='nginx'):
            print(repo.repository, [t.tag for t in repo.tags])
        store.close()
    """

    def __init__(self, db: Database):
        self.db = db.open()

    @classmethod
    def open(cls, db_path: Union[Path, str]) -> 'CatalogStore':
        """Open (creating if needed) the catalog at db_path."""
        return cls(Database(db_path=db_path))

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> 'CatalogStore':
        """Open the catalog under config['storage']['rootdirectory']."""
        return cls(Database(config=config))

    @classmethod
    def in_memory(cls) -> 'CatalogStore':
        """Open a private in-memory catalog."""
        return cls(Database(db_path=MEMORY))

    @property
    def path(self) -> str:
        return str(self.db.db_path)

    def close(self) -> None:
        logger.debug(f"closing catalog {self.path}")
        self.db.close()

    def __enter__(self) -> 'CatalogStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # Mutations

    def upsert_repository(self, name: str) -> None:
        catalog.upsert_repository(self.db, name)

    def upsert_tag(
        self,
        repository: str,
        tag: str,
        digest: str,
        url: str,
        timestamp: datetime,
    ) -> None:
        catalog.upsert_tag(self.db, repository, tag, digest, url, timestamp)

    def delete_tag(self, repository: str, tag: str) -> bool:
        return catalog.delete_tag(self.db, repository, tag)

    def prune_orphan_repositories(self) -> int:
        return catalog.prune_orphan_repositories(self.db)

    def delete_tag_and_prune(self, repository: str, tag: str) -> int:
        """
        Delete a tag and then any repository left without tags.

        Both statements run in one transaction.

        Returns:
            Number of repositories pruned
        """
        with self.db.transaction():
            catalog.delete_tag(self.db, repository, tag)
            return catalog.prune_orphan_repositories(self.db)

    def patch_tag_status(
        self,
        repository: str,
        tag: str,
        status: str,
        description: str,
        target_url: str,
    ) -> None:
        catalog.patch_tag_status(self.db, repository, tag, status, description, target_url)

    # Queries

    def list_repositories(
        self,
        keyword: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Repository]:
        return catalog.list_repositories(self.db, keyword, limit, offset)

    def get_tag(self, repository: str, tag: str) -> Optional[Tag]:
        return catalog.get_tag(self.db, repository, tag)

    def get_catalog_info(self) -> Dict[str, Any]:
        return catalog.get_catalog_info(self.db)
