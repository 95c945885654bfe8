"""
Event sink for regindex.

Applies registry lifecycle notifications to the catalog. The sink is
the only writer of repository and tag rows:

- manifest push: upsert the repository, then replace the tag row
- manifest delete: delete the tag row, then prune empty repositories
- anything else (blob events, pulls, mounts): ignored
"""

import logging
from datetime import datetime, timezone
from typing import Iterable

from ..database.store import CatalogStore
from ..domain.event import Event, EventAction

logger = logging.getLogger(__name__)


class EventSink:
    """
    Registry notification consumer that maintains the catalog.

    Example:
        sink = EventSink(store)
        sink.write(parse_envelope(json.loads(body)))
        sink.close()

    A batch is processed in order and stops at the first error, which
    is re-raised to the caller. Events before the failing one stay
    applied; redelivery is up to whoever sent the batch.
    """

    def __init__(self, store: CatalogStore):
        self.store = store

    def write(self, events: Iterable[Event]) -> int:
        """
        Apply a batch of events.

        Returns:
            Number of events that changed the catalog
        """
        applied = 0
        for event in events:
            if not event.target.is_manifest:
                continue

            if event.action is EventAction.PUSH:
                self._push(event)
            elif event.action is EventAction.DELETE:
                self._delete(event)
            else:
                continue
            applied += 1

        logger.debug(f"applied {applied} events")
        return applied

    def _push(self, event: Event) -> None:
        target = event.target
        self.store.upsert_repository(target.repository)
        self.store.upsert_tag(
            target.repository,
            target.tag,
            target.digest,
            target.url,
            datetime.now(timezone.utc),
        )

    def _delete(self, event: Event) -> None:
        pruned = self.store.delete_tag_and_prune(event.target.repository, event.target.tag)
        if pruned:
            logger.debug(f"pruned {pruned} empty repositories after deleting {event.target.repository}:{event.target.tag}")

    def close(self) -> None:
        """Release the catalog on shutdown."""
        logger.debug("index service close")
        self.store.close()
