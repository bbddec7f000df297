"""In-memory topic store.

Holds one TopicRecord per keyword together with its bounded velocity
history. A store is an explicit object owned by whoever builds the engine,
so independent engines (per tenant, per test) never share state.

All mutation happens under ``store.lock``; the orchestrator holds it for
the whole mutation phase of a cycle so two overlapping cycles cannot
interleave mention appends and score recomputation for the same keyword.
"""

import threading
from collections import deque
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from trendbot.core.logging import get_logger
from trendbot.trender.models import HISTORY_CAPACITY, TopicRecord, VelocitySnapshot

logger = get_logger(__name__)


class TopicStore:
    """Mapping keyword -> TopicRecord with a single-writer lock."""

    def __init__(self, history_capacity: int = HISTORY_CAPACITY):
        self.history_capacity = history_capacity
        self.lock = threading.RLock()
        self._records: Dict[str, TopicRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, keyword: str) -> bool:
        return keyword in self._records

    def __iter__(self) -> Iterator[TopicRecord]:
        return iter(list(self._records.values()))

    def get(self, keyword: str) -> Optional[TopicRecord]:
        return self._records.get(keyword)

    def get_or_create(self, keyword: str) -> TopicRecord:
        """Return the record for ``keyword``, creating it on first mention."""
        with self.lock:
            record = self._records.get(keyword)
            if record is None:
                record = TopicRecord(keyword=keyword)
                if self.history_capacity != HISTORY_CAPACITY:
                    record.history = deque(maxlen=self.history_capacity)
                self._records[keyword] = record
            return record

    def keywords(self) -> List[str]:
        return list(self._records.keys())

    def append_history(self, record: TopicRecord, snapshot: VelocitySnapshot) -> None:
        """Append a snapshot; the deque drops the oldest entry once full."""
        with self.lock:
            record.history.append(snapshot)

    def get_history(self, keyword: str) -> List[VelocitySnapshot]:
        """Historical snapshots for a keyword, oldest first."""
        record = self._records.get(keyword)
        return list(record.history) if record else []

    def purge_expired(self, cutoff: datetime) -> List[str]:
        """
        Drop mentions older than ``cutoff`` and remove records left empty.

        Returns:
            Keywords removed from the store
        """
        removed = []
        with self.lock:
            for keyword, record in list(self._records.items()):
                record.prune_before(cutoff)
                if record.mention_count == 0:
                    del self._records[keyword]
                    removed.append(keyword)

        if removed:
            logger.debug(f"Purged {len(removed)} expired topics")
        return removed

    def cleanup(self) -> None:
        """Clear all records and history. Safe to call more than once."""
        with self.lock:
            count = len(self._records)
            self._records.clear()
        if count:
            logger.info(f"Topic store cleared ({count} topics)")

    def stats(self) -> Dict[str, int]:
        with self.lock:
            return {
                'tracked_topics': len(self._records),
                'total_mentions': sum(r.mention_count for r in self._records.values()),
                'history_points': sum(len(r.history) for r in self._records.values())
            }
