"""
Network transport used to deliver serialized events.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from datalyr.errors import NetworkConnectionError, RequestTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """
    Status and body text of a completed request.
    """

    status_code: int
    text: str = ""


class Transport(ABC):
    """
    Abstract base class for transports.

    Implementations perform one POST and return the collector's answer.
    Failures to get an answer at all must be raised as
    ``NetworkConnectionError`` or ``RequestTimeoutError``.
    """

    @abstractmethod
    async def send(
        self, url: str, headers: Mapping[str, str], body: bytes, timeout: float
    ) -> TransportResponse:
        """
        Send one request.

        Args:
            url: Destination address
            headers: Request headers
            body: Serialized request body
            timeout: Seconds before the request is aborted

        Returns:
            The response status and text
        """
        pass

    async def close(self) -> None:
        """Release any network resources."""
        return None


class HttpxTransport(Transport):
    """
    Transport backed by an ``httpx.AsyncClient``.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            http_client: Client to use; one is created on first send otherwise
        """
        self.http_client = http_client

    async def send(
        self, url: str, headers: Mapping[str, str], body: bytes, timeout: float
    ) -> TransportResponse:
        if self.http_client is None:
            self.http_client = httpx.AsyncClient()

        try:
            response = await self.http_client.post(
                url, content=body, headers=dict(headers), timeout=timeout
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(reason=str(e) or type(e).__name__) from e
        except httpx.TransportError as e:
            raise NetworkConnectionError(reason=str(e) or type(e).__name__) from e

        # Body is kept for diagnostics only
        text = "" if response.is_success else response.text

        return TransportResponse(status_code=response.status_code, text=text)

    async def close(self) -> None:
        """Close the HTTP client asynchronously."""
        if self.http_client:
            await self.http_client.aclose()
            self.http_client = None
            logger.debug("HTTP client closed")
