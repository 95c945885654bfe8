"""Repository domain object for regindex."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .tag import Tag


@dataclass
class Repository:
    """A repository in the catalog together with all of its tags."""

    repository: str
    tags: List[Tag] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'repository': self.repository,
            'tags': [t.to_dict() for t in self.tags],
        }

    def __str__(self) -> str:
        return self.repository
