"""
Bounded buffer of events waiting to be flushed.
"""

import logging
from collections import deque
from typing import Deque, List, Optional

from .types import EventRecord

logger = logging.getLogger(__name__)


class EventQueue:
    """
    Ordered, bounded buffer of pending event records.

    Insertion order is the retry priority: records that failed delivery are
    put back at the front. None of the operations block; they are meant to be
    called from the event loop thread only.
    """

    def __init__(self, max_size: int):
        """
        Initialize the queue.

        Args:
            max_size: Maximum number of records held at any time
        """
        self.max_size = max_size
        self._records: Deque[EventRecord] = deque()

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def enqueue(self, record: EventRecord) -> Optional[EventRecord]:
        """
        Append a record, evicting the oldest one when the queue is full.

        Returns:
            The evicted record, if any
        """
        evicted = None
        if len(self._records) >= self.max_size:
            evicted = self._records.popleft()
            logger.debug(
                "Queue full (%s), dropping oldest event: %s",
                self.max_size,
                evicted.event,
            )

        self._records.append(record)
        logger.debug("Event queued: %s", record.event)
        return evicted

    def drain_all(self) -> List[EventRecord]:
        """
        Remove and return every queued record, leaving a fresh empty buffer.
        """
        records = list(self._records)
        self._records = deque()
        return records

    def requeue_front(self, record: EventRecord) -> bool:
        """
        Put a record back at the head of the queue.

        The head is the eviction position, so a full queue drops the record
        instead of admitting it.

        Returns:
            Whether the record was admitted
        """
        if len(self._records) >= self.max_size:
            logger.debug(
                "Queue full (%s), dropping failed event: %s",
                self.max_size,
                record.event,
            )
            return False

        self._records.appendleft(record)
        return True
