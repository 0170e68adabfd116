"""
Aggregation - Incident Store.

============================================================
RESPONSIBILITY
============================================================
Accumulates classified incidents for one report run.

- Keyed by (group, device, primary_ts, secondary_ts)
- Incidents sharing all four keys land in the same bucket;
  their messages are kept in arrival order
- No filtering: everything handed in is kept, the renderer
  narrows to the duty window

============================================================
LIFECYCLE
============================================================
created empty -> add() per incident -> entries() read once
by the renderer -> discarded

============================================================
"""

import logging
import threading
from datetime import datetime
from typing import Dict, Iterator, List, NamedTuple, Optional

from classification.types import BucketKey, ParsedIncident


logger = logging.getLogger(__name__)


class StoreEntry(NamedTuple):
    """One flattened report line."""
    group: str
    device: str
    primary_timestamp: datetime
    secondary_timestamp: datetime
    message: str


class IncidentStore:
    """
    Flat mapping from composite bucket key to message list.

    ``add`` is serialized so concurrent producers keep the
    append order of their own incidents.
    """

    def __init__(self) -> None:
        self._buckets: Dict[BucketKey, List[str]] = {}
        self._lock = threading.Lock()
        self._needs_review: Dict[str, int] = {}

    def add(self, incident: ParsedIncident) -> None:
        """Append the incident's message to its bucket."""
        key = incident.bucket_key
        with self._lock:
            self._buckets.setdefault(key, []).append(incident.message)
            if incident.needs_review:
                self._needs_review[incident.group_key] = (
                    self._needs_review.get(incident.group_key, 0) + 1
                )
        logger.debug(f"Stored {incident.category.value} incident in bucket {key[:2]}")

    def bucket(self, key: BucketKey) -> List[str]:
        with self._lock:
            return list(self._buckets.get(key, []))

    def keys(self) -> List[BucketKey]:
        with self._lock:
            return list(self._buckets)

    def entries(self) -> Iterator[StoreEntry]:
        """Flatten to one entry per message, in insertion order."""
        with self._lock:
            snapshot = [(key, list(messages)) for key, messages in self._buckets.items()]
        for (group, device, primary, secondary), messages in snapshot:
            for message in messages:
                yield StoreEntry(group, device, primary, secondary, message)

    def groups(self) -> List[str]:
        with self._lock:
            return sorted({key[0] for key in self._buckets})

    def review_candidates(self) -> Dict[str, int]:
        """Groups whose names did not canonicalize, with counts."""
        with self._lock:
            return dict(self._needs_review)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(messages) for messages in self._buckets.values())

    def __bool__(self) -> bool:
        with self._lock:
            return bool(self._buckets)


def add(store: IncidentStore, incident: ParsedIncident) -> None:
    """Insert ``incident`` into ``store`` (mutates in place)."""
    store.add(incident)


def build_store(incidents, store: Optional[IncidentStore] = None) -> IncidentStore:
    """Aggregate an iterable of incidents in order."""
    store = store if store is not None else IncidentStore()
    for incident in incidents:
        store.add(incident)
    return store
