# -*- coding: utf-8 -*-

__author__ = """Datalyr"""
__email__ = 'support@datalyr.com'

import os

ROOT = os.path.dirname(os.path.abspath(__file__))

with open(os.path.join(ROOT, 'VERSION')) as version_file:
    VERSION = version_file.read().strip()

from .client import Datalyr  # noqa: E402
from .config import ClientConfig  # noqa: E402
from .errors import (  # noqa: E402
    ConfigurationError,
    DatalyrError,
    DeliveryError,
    NetworkConnectionError,
    PermanentDeliveryError,
    RequestTimeoutError,
    ServerError,
    TransientDeliveryError,
    ValidationError,
)
from .events.types import EventRecord, ReservedEvent  # noqa: E402
from .transport import HttpxTransport, Transport, TransportResponse  # noqa: E402

__all__ = [
    "VERSION",
    "Datalyr",
    "ClientConfig",
    "EventRecord",
    "ReservedEvent",
    "Transport",
    "TransportResponse",
    "HttpxTransport",
    "DatalyrError",
    "ConfigurationError",
    "ValidationError",
    "DeliveryError",
    "PermanentDeliveryError",
    "TransientDeliveryError",
    "ServerError",
    "NetworkConnectionError",
    "RequestTimeoutError",
]
