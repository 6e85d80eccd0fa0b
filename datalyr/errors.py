from typing import Optional


class DatalyrError(Exception):
    """
    Base exception for every error raised by the Datalyr client.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "An error occurred in the Datalyr client."):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(DatalyrError):
    """
    Error raised when the client cannot be built from the given configuration.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "Datalyr API key is required"):
        super().__init__(message)


class ValidationError(DatalyrError):
    """
    Error raised synchronously when a tracking call receives bad arguments.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "Invalid arguments."):
        super().__init__(message)


class DeliveryError(DatalyrError):
    """
    Base error for a failed attempt to deliver one event to the collector.

    Args:
        message (str): The error message template.
        status_code (Optional[int]): The HTTP status returned, if any.
        reason (Optional[str]): Response body or transport detail, best effort.
    """
    def __init__(self, message: str = "Unable to deliver event{status}{reason}",
                 status_code: Optional[int] = None, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        status = f": {status_code}" if status_code is not None else ""
        detail = f" - {reason}" if reason else ""
        super().__init__(message.format(status=status, reason=detail))


class PermanentDeliveryError(DeliveryError):
    """
    The collector rejected the request with a 4xx status. Retrying cannot fix
    it, so the event is dropped.
    """
    def __init__(self, status_code: Optional[int] = None, reason: Optional[str] = None,
                 message: str = "Client error{status}{reason}"):
        super().__init__(message=message, status_code=status_code, reason=reason)


class TransientDeliveryError(DeliveryError):
    """
    A delivery failure that is expected to succeed on a later attempt.
    """


class ServerError(TransientDeliveryError):
    """
    The collector answered with a 5xx (or otherwise unexpected) status.
    """
    def __init__(self, status_code: Optional[int] = None, reason: Optional[str] = None,
                 message: str = "Server error{status}{reason}"):
        super().__init__(message=message, status_code=status_code, reason=reason)


class NetworkConnectionError(TransientDeliveryError):
    """
    The request never reached the collector.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Unable to connect to the collector{reason}"):
        super().__init__(message=message, reason=reason)


class RequestTimeoutError(TransientDeliveryError):
    """
    The request did not complete within the configured timeout.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Request to the collector timed out{reason}"):
        super().__init__(message=message, reason=reason)
