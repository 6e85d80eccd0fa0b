"""
Draining of the event queue into concurrent deliveries.
"""

import asyncio
import logging
from typing import Callable, Iterator, List, Optional

from datalyr.constants import BATCH_SIZE
from datalyr.errors import PermanentDeliveryError

from .delivery import DeliveryUnit
from .queue import EventQueue
from .types import EventRecord

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[EventRecord, BaseException], None]


def chunked(records: List[EventRecord], size: int) -> Iterator[List[EventRecord]]:
    for start in range(0, len(records), size):
        yield records[start:start + size]


class BatchFlusher:
    """
    Drains the queue and drives one delivery per record.

    Records are sent in sub-batches: every record of a sub-batch is sent
    concurrently and the next sub-batch starts once all of them settled.
    At most one flush runs at a time.
    """

    def __init__(
        self,
        queue: EventQueue,
        delivery: DeliveryUnit,
        batch_size: int = BATCH_SIZE,
        on_error: Optional[ErrorCallback] = None,
    ):
        """
        Args:
            queue: Queue to drain and to requeue failures into
            delivery: Delivery unit sending each record
            batch_size: Records sent concurrently
            on_error: Called with each record whose delivery ultimately failed
        """
        self.queue = queue
        self.delivery = delivery
        self.batch_size = batch_size
        self.on_error = on_error
        self._flushing = False

    @property
    def flushing(self) -> bool:
        return self._flushing

    async def flush(self) -> None:
        """
        Send every queued record.

        Returns immediately when the queue is empty or a flush is already in
        progress. Transient failures go back to the front of the queue,
        permanent failures are dropped. Delivery errors are never raised.
        """
        if self._flushing or not self.queue:
            return

        self._flushing = True

        try:
            records = self.queue.drain_all()
            logger.debug("Flushing %s events", len(records))

            failures = 0
            for batch in chunked(records, self.batch_size):
                results = await asyncio.gather(
                    *(self._deliver(record) for record in batch)
                )
                failures += results.count(False)

            if failures:
                logger.debug("%s events failed to send", failures)
        finally:
            self._flushing = False

    async def _deliver(self, record: EventRecord) -> bool:
        try:
            await self.delivery.send(record)
            return True
        except PermanentDeliveryError as e:
            logger.debug("Dropping event %s: %s", record.event, e)
            self._report(record, e)
        except Exception as e:
            logger.debug("Requeueing event %s: %s", record.event, e)
            self.queue.requeue_front(record)
            self._report(record, e)

        return False

    def _report(self, record: EventRecord, error: BaseException) -> None:
        if self.on_error is None:
            return

        try:
            self.on_error(record, error)
        except Exception:
            logger.exception("Error callback failed for event %s", record.event)
