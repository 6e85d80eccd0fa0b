import copy
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from datalyr.constants import ANONYMOUS_ID_PREFIX
from datalyr.errors import ValidationError
from datalyr.meta import get_library_context

from ..types import EventRecord

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_anonymous_id() -> str:
    """
    Build a session-scoped stand-in identity.

    A random component followed by the current epoch milliseconds, both in
    base 36. Unique enough for deduplication, not cryptographically secure.
    """
    random_part = to_base36(random.getrandbits(52))
    time_part = to_base36(int(time.time() * 1000))
    return f"{ANONYMOUS_ID_PREFIX}{random_part}{time_part}"


def current_timestamp() -> str:
    """
    Capture time as ISO-8601 UTC with millisecond precision, e.g.
    ``2024-01-01T12:00:00.000Z``.
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_event_record(
    user_id: Optional[str],
    event: str,
    properties: Optional[Mapping[str, Any]] = None,
) -> EventRecord:
    """
    Generic factory for event records.

    A fresh anonymous id is generated when ``user_id`` is empty. Properties
    are deep-copied so later changes made by the caller do not reach the
    queued record.

    Raises:
        ValidationError: If the arguments cannot form a deliverable record.
    """
    if properties is None:
        properties = {}
    elif not isinstance(properties, Mapping):
        raise ValidationError(
            f"Event properties must be a mapping, got {type(properties).__name__}"
        )

    try:
        record = EventRecord(
            user_id=user_id or None,
            anonymous_id=None if user_id else generate_anonymous_id(),
            event=event,
            properties=copy.deepcopy(dict(properties)),
            context=get_library_context(),
            timestamp=current_timestamp(),
        )
        # Reject what the collector could never decode
        record.to_json()
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid event {event!r}: {e}") from e
    except (PydanticSerializationError, TypeError, copy.Error) as e:
        raise ValidationError(
            f"Event {event!r} has properties that cannot be serialized: {e}"
        ) from e

    return record
