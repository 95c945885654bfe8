"""
Query service for regindex.

Paginated, keyword-filtered read access to the catalog.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..database.store import CatalogStore
from ..domain.repository import Repository

DEFAULT_LIMIT = 20
MAX_INT = 2**63 - 1  # SQLite INTEGER range


def _to_int(value: Optional[str]) -> int:
    """Parse a query parameter; anything unparsable reads as 0."""
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


@dataclass
class QueryArgs:
    """One page request: keyword filter plus skip/limit."""
    keyword: str = ''
    skip: int = 0
    limit: int = DEFAULT_LIMIT

    def __post_init__(self):
        if self.skip < 0:
            self.skip = 0
        if self.limit < 1:
            self.limit = DEFAULT_LIMIT
        self.skip = min(self.skip, MAX_INT)
        self.limit = min(self.limit, MAX_INT)

    @classmethod
    def from_params(
        cls,
        keyword: Optional[str] = None,
        skip: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> 'QueryArgs':
        """Build QueryArgs from raw query-string values."""
        return cls(keyword=keyword or '', skip=_to_int(skip), limit=_to_int(limit))


class QueryService:
    """Read access to the catalog for external consumers."""

    def __init__(self, store: CatalogStore):
        self.store = store

    def get_page(self, args: QueryArgs) -> List[Repository]:
        """Return one page of repositories with their tags."""
        return self.store.list_repositories(
            keyword=args.keyword or None,
            limit=args.limit,
            offset=args.skip,
        )
