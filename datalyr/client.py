"""
Public entry point of the Datalyr client.
"""

import asyncio
import concurrent.futures
import logging
import threading
import time
from typing import Any, Mapping, Optional, Union

from datalyr.config import ClientConfig
from datalyr.constants import (
    API_KEY_PREFIX,
    CLOSE_TIMEOUT,
    SHUTDOWN_TIMEOUT,
)
from datalyr.errors import ValidationError
from datalyr.events.delivery import DeliveryUnit
from datalyr.events.flusher import BatchFlusher, ErrorCallback
from datalyr.events.loop import EventLoopThread
from datalyr.events.queue import EventQueue
from datalyr.events.types import EventRecord, ReservedEvent
from datalyr.events.utils import create_event_record
from datalyr.logs_helpers import enable_debug_logging
from datalyr.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


class Datalyr:
    """
    Collects analytics events in memory and delivers them in the background.

    Tracking calls never block on the network: records are queued and sent
    when ``flush_at`` of them are waiting, every ``flush_interval``
    milliseconds, on ``flush()`` and on ``close()``.

    Example:
        client = Datalyr("dk_live_123")
        client.track("user-1", "Signed Up", {"plan": "pro"})
        client.close()
    """

    def __init__(
        self,
        config: Union[str, ClientConfig, Mapping[str, Any]],
        transport: Optional[Transport] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        """
        Initialize the client and start the background flush timer.

        Args:
            config: The API key, a mapping of options or a ClientConfig
            transport: Transport used for delivery, httpx by default
            on_error: Called with each record whose delivery failed

        Raises:
            ConfigurationError: If no API key is given or an option is invalid
        """
        self.config = ClientConfig.load(config)

        if self.config.debug:
            enable_debug_logging()

        if not self.config.has_expected_key_prefix:
            logger.warning('API key should start with "%s"', API_KEY_PREFIX)

        self._owns_transport = transport is None
        self.transport = transport if transport is not None else HttpxTransport()

        self._queue = EventQueue(self.config.max_queue_size)
        self._delivery = DeliveryUnit(
            self.transport,
            url=self.config.host,
            api_key=self.config.api_key,
            timeout=self.config.timeout_seconds,
            retry_limit=self.config.retry_limit,
        )
        self._flusher = BatchFlusher(self._queue, self._delivery, on_error=on_error)

        self._closing = False
        self._closed = False
        self._close_lock = threading.Lock()

        self._runner = EventLoopThread()
        self._runner.start()
        self._timer: Optional[concurrent.futures.Future] = self._runner.submit(
            self._flush_periodically()
        )

    @property
    def queued(self) -> int:
        """Number of events waiting to be sent."""
        return len(self._queue)

    @property
    def closed(self) -> bool:
        return self._closed

    def track(
        self,
        user_id: Optional[str],
        event: str,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Queue an event for delivery.

        Without a ``user_id`` the record gets a generated anonymous id. Events
        tracked while the client is closing are dropped silently.

        Args:
            user_id: Identifier of a known user, or None
            event: Name of the event
            properties: Event properties

        Raises:
            ValidationError: If the event name is missing or the record is invalid
        """
        if self._closing:
            logger.debug("Client is closing, event dropped: %s", event)
            return

        if not event or not isinstance(event, str):
            raise ValidationError("Event name is required and must be a string")

        record = create_event_record(user_id, event, properties)

        try:
            self._runner.call_soon(self._enqueue, record)
        except RuntimeError:
            logger.debug("Client is closed, event dropped: %s", event)

    def identify(self, user_id: str, traits: Optional[Mapping[str, Any]] = None) -> None:
        """
        Attach traits to a known user.
        """
        if not user_id:
            raise ValidationError("user_id is required for identify")

        self.track(user_id, ReservedEvent.IDENTIFY.value, {"$set": dict(traits or {})})

    def page(
        self,
        user_id: Optional[str],
        name: Optional[str] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Record a page view. Keys of ``properties`` win over ``name``.
        """
        page_properties = {} if name is None else {"name": name}
        page_properties.update(properties or {})
        self.track(user_id, ReservedEvent.PAGEVIEW.value, page_properties)

    def group(
        self,
        user_id: Optional[str],
        group_id: str,
        traits: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Associate a user with a group.
        """
        if not group_id:
            raise ValidationError("group_id is required for group")

        group_properties: dict = {"groupId": group_id}
        if traits is not None:
            group_properties["traits"] = dict(traits)
        self.track(user_id, ReservedEvent.GROUP.value, group_properties)

    def flush(self) -> None:
        """
        Send every queued event and wait until the flush settles.

        Delivery failures are requeued or dropped, never raised. Does nothing
        once the client is closed or while another flush is running.
        """
        if not self._runner.running:
            return

        if self._runner.in_loop_thread():
            raise RuntimeError("flush() cannot be called from the client's event loop")

        try:
            future = self._runner.submit(self._flusher.flush())
        except RuntimeError:
            # Closed concurrently
            return

        try:
            future.result()
        except concurrent.futures.CancelledError:
            logger.debug("Flush interrupted by close()")

    def close(self) -> None:
        """
        Stop accepting events and make a final, bounded attempt to deliver
        what is queued.

        The whole call, loop teardown included, finishes within
        ``CLOSE_TIMEOUT`` seconds: the final flush gets what is left after
        reserving ``SHUTDOWN_TIMEOUT`` for the teardown. Events still queued
        afterwards are discarded. Safe to call more than once, but not from
        the client's event loop (an ``on_error`` callback, for instance).
        """
        if self._runner.in_loop_thread():
            raise RuntimeError("close() cannot be called from the client's event loop")

        with self._close_lock:
            if self._closed:
                return

            deadline = time.monotonic() + CLOSE_TIMEOUT
            self._closing = True
            self._cancel_timer()

            flush_timeout = max(CLOSE_TIMEOUT - SHUTDOWN_TIMEOUT, 0)
            final_flush = self._runner.submit(self._final_flush())
            try:
                final_flush.result(flush_timeout)
            except concurrent.futures.TimeoutError:
                logger.debug("Final flush did not finish within %ss", flush_timeout)
            except Exception:
                logger.debug("Final flush failed", exc_info=True)

            remaining = len(self._queue)
            if remaining:
                logger.debug("Closing with %s events still queued", remaining)

            cleanup = self.transport.close if self._owns_transport else None
            self._runner.stop(cleanup=cleanup, timeout=max(deadline - time.monotonic(), 0))
            self._closed = True

    def __enter__(self) -> "Datalyr":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _enqueue(self, record: EventRecord) -> None:
        # close() may have started after track() handed the record over
        if self._closing:
            logger.debug("Client is closing, event dropped: %s", record.event)
            return

        self._queue.enqueue(record)

        if len(self._queue) >= self.config.flush_at:
            self._schedule_flush("Auto-flush")

    def _schedule_flush(self, trigger: str) -> None:
        def log_error(error: BaseException) -> None:
            logger.debug("%s error: %s", trigger, error, exc_info=error)

        self._runner.spawn(self._flusher.flush(), on_error=log_error)

    async def _flush_periodically(self) -> None:
        while True:
            await asyncio.sleep(self.config.flush_interval_seconds)
            if not self._closing:
                self._schedule_flush("Timer flush")

    async def _final_flush(self) -> None:
        # Let a running flush settle so its requeued failures get one more try
        while self._flusher.flushing:
            await asyncio.sleep(0.05)

        await self._flusher.flush()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
