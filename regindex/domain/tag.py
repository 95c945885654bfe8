"""
Tag domain object for regindex.

A tag row is the indexed unit of the catalog: one manifest pushed to a
repository under a tag name, plus review metadata that an external
verifier may attach later.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

# Status assigned on every push; any other string is accepted on patch.
DEFAULT_STATUS = 'unset'


@dataclass
class Tag:
    """
    A (repository, tag) entry in the catalog.

    Attributes:
        repository: Repository name (e.g., "library/nginx")
        tag: Tag name (e.g., "1.25")
        digest: Content digest of the manifest
        url: Manifest URL reported by the registry
        status: Review status, free text ("unset" until patched)
        description: Free-text review description
        target_url: Optional link to an external review report
        updated_at: When the tag was last pushed
    """

    repository: str
    tag: str
    digest: str = ''
    url: str = ''
    status: str = DEFAULT_STATUS
    description: str = ''
    target_url: str = ''
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'repository': self.repository,
            'tag': self.tag,
            'digest': self.digest,
            'url': self.url,
            'status': self.status,
            'description': self.description,
            'target_url': self.target_url,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"
