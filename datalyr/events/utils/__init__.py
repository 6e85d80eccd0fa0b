from .creation import (
    create_event_record,
    current_timestamp,
    generate_anonymous_id,
)

__all__ = [
    "create_event_record",
    "current_timestamp",
    "generate_anonymous_id",
]
