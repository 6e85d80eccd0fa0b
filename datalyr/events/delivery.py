"""
Delivery of a single event record, with retries on transient failures.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from datalyr.constants import API_KEY_HEADER, BACKOFF_BASE, BACKOFF_MAX, CONTENT_TYPE
from datalyr.errors import (
    NetworkConnectionError,
    PermanentDeliveryError,
    RequestTimeoutError,
    ServerError,
    TransientDeliveryError,
)
from datalyr.meta import get_meta_http_headers
from datalyr.transport import Transport, TransportResponse

from .types import EventRecord

logger = logging.getLogger(__name__)


def check_response(response: TransportResponse) -> TransportResponse:
    """
    Classify a collector response.

    2xx is a success, 4xx a permanent failure and anything else a transient
    failure.

    Raises:
        PermanentDeliveryError: On a 4xx status
        ServerError: On any other non-2xx status
    """
    status = response.status_code

    if 200 <= status < 300:
        return response

    if 400 <= status < 500:
        raise PermanentDeliveryError(status_code=status, reason=response.text)

    raise ServerError(status_code=status, reason=response.text)


class DeliveryUnit:
    """
    Sends one event per request and retries transient failures with capped
    exponential backoff.

    The retries are local to one ``send`` call and re-send the same record.
    Once they are exhausted the last transient error is raised so the caller
    can requeue the record for a later flush.
    """

    def __init__(
        self,
        transport: Transport,
        url: str,
        api_key: str,
        timeout: float,
        retry_limit: int,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Args:
            transport: Transport performing the request
            url: Collector address
            api_key: Credential attached to every request
            timeout: Seconds allowed for each attempt
            retry_limit: Retries after the first attempt
            sleep: Coroutine function used for the backoff waits
        """
        self.transport = transport
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.retry_limit = retry_limit
        self._sleep = sleep

    def build_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": CONTENT_TYPE,
        }
        headers.update(get_meta_http_headers())
        headers[API_KEY_HEADER] = self.api_key
        return headers

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.retry_limit + 1),
            wait=wait_exponential(multiplier=BACKOFF_BASE, max=BACKOFF_MAX),
            retry=retry_if_exception_type(TransientDeliveryError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            sleep=self._sleep,
            reraise=True,
        )

    async def send(self, record: EventRecord) -> TransportResponse:
        """
        Deliver one record.

        Args:
            record: The record to deliver

        Returns:
            The successful response

        Raises:
            PermanentDeliveryError: The collector rejected the record
            TransientDeliveryError: Every attempt failed transiently
        """
        body = record.to_json()
        headers = self.build_headers()

        try:
            response = await self._retrying()(self._attempt, body, headers)
        except PermanentDeliveryError as e:
            logger.debug("Permanent error, not retrying %s: %s", record.event, e)
            raise

        logger.debug("Event sent successfully: %s (%s)", record.event, response.status_code)
        return response

    async def _attempt(self, body: bytes, headers: Dict[str, str]) -> TransportResponse:
        try:
            response = await asyncio.wait_for(
                self.transport.send(self.url, headers, body, self.timeout),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(reason=f"no response after {self.timeout}s") from e
        except OSError as e:
            raise NetworkConnectionError(reason=str(e)) from e

        return check_response(response)
