"""
Domain layer for regindex.

Contains pure domain objects with no I/O or side effects:
- Repository: A repository and its tags
- Tag: One (repository, tag) catalog entry
- Event: A registry lifecycle notification (push, delete, ...)
"""

from .tag import Tag, DEFAULT_STATUS
from .repository import Repository
from .event import (
    Event,
    EventAction,
    Target,
    MANIFEST_MEDIA_TYPES,
    parse_tag_name,
    parse_envelope,
)

__all__ = [
    'Tag',
    'DEFAULT_STATUS',
    'Repository',
    'Event',
    'EventAction',
    'Target',
    'MANIFEST_MEDIA_TYPES',
    'parse_tag_name',
    'parse_envelope',
]
