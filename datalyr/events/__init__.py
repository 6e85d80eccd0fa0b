from .delivery import DeliveryUnit, check_response
from .flusher import BatchFlusher
from .loop import EventLoopThread
from .queue import EventQueue
from .types import EventRecord, ReservedEvent

__all__ = [
    "BatchFlusher",
    "DeliveryUnit",
    "EventLoopThread",
    "EventQueue",
    "EventRecord",
    "ReservedEvent",
    "check_response",
]
