"""
Event domain object for regindex.

Events are the lifecycle notifications the registry emits when a
manifest or blob is pushed, pulled or deleted. Only manifest push and
delete events change the catalog.

Notification JSON as delivered by the registry:

    {
        "id": "...",
        "timestamp": "...",
        "action": "push",
        "target": {
            "mediaType": "application/vnd.docker.distribution.manifest.v2+json",
            "digest": "sha256:...",
            "repository": "library/nginx",
            "url": "https://registry.example.com/v2/library/nginx/manifests/1.25"
        }
    }
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from ..errors import MalformedRequest

MANIFEST_MEDIA_TYPES = frozenset({
    'application/vnd.docker.distribution.manifest.v1+json',
    'application/vnd.docker.distribution.manifest.v1+prettyjws',
    'application/vnd.docker.distribution.manifest.v2+json',
    'application/vnd.docker.distribution.manifest.list.v2+json',
    'application/vnd.oci.image.manifest.v1+json',
    'application/vnd.oci.image.index.v1+json',
})


class EventAction(Enum):
    """What happened to the event target."""
    PUSH = "push"
    DELETE = "delete"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> 'EventAction':
        """Map a notification action string; pull, mount etc. become OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


def parse_tag_name(url: str) -> str:
    """
    Derive the tag name from a manifest URL.

    Examples:
        parse_tag_name(".../v2/library/nginx/manifests/1.25")  -> "1.25"
        parse_tag_name("latest")                               -> ""
    """
    if '/' not in url:
        return ''
    return url.rsplit('/', 1)[1]


@dataclass(frozen=True)
class Target:
    """The artifact an event refers to."""
    repository: str
    digest: str = ''
    url: str = ''
    media_type: str = ''

    @property
    def is_manifest(self) -> bool:
        return self.media_type in MANIFEST_MEDIA_TYPES

    @property
    def tag(self) -> str:
        return parse_tag_name(self.url)


@dataclass(frozen=True)
class Event:
    """A single registry lifecycle notification."""
    action: EventAction
    target: Target

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """
        Build an Event from registry notification JSON.

        Raises:
            MalformedRequest: if the event or its target is not an object
        """
        if not isinstance(data, dict):
            raise MalformedRequest(f"event must be an object, got {type(data).__name__}")

        target = data.get('target') or {}
        if not isinstance(target, dict):
            raise MalformedRequest("event target must be an object")

        return cls(
            action=EventAction.parse(str(data.get('action') or '')),
            target=Target(
                repository=str(target.get('repository') or ''),
                digest=str(target.get('digest') or ''),
                url=str(target.get('url') or ''),
                media_type=str(target.get('mediaType') or ''),
            ),
        )

    def __str__(self) -> str:
        return f"{self.action.value} {self.target.repository}:{self.target.tag}"


def parse_envelope(data: Any) -> List[Event]:
    """
    Parse a notification envelope ({"events": [...]}) into Events.

    Raises:
        MalformedRequest: if the envelope does not hold an events list
    """
    if not isinstance(data, dict) or not isinstance(data.get('events'), list):
        raise MalformedRequest("notification envelope must be an object with an 'events' list")
    return [Event.from_dict(e) for e in data['events']]
