from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReservedEvent(str, Enum):
    """
    Event names reserved for the identity helpers.
    """

    IDENTIFY = "$identify"
    PAGEVIEW = "$pageview"
    GROUP = "$group"


class EventRecord(BaseModel):
    """
    One tracked occurrence, immutable once built.

    Exactly one of ``user_id`` and ``anonymous_id`` is set. The timestamp is
    the capture time and is the record's only notion of ordering.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    anonymous_id: Optional[str] = Field(default=None, alias="anonymousId")
    event: str = Field(min_length=1)
    properties: Dict[str, Any] = Field(default_factory=dict)
    context: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str

    @model_validator(mode="after")
    def check_single_identity(self) -> "EventRecord":
        if bool(self.user_id) == bool(self.anonymous_id):
            raise ValueError("exactly one of userId and anonymousId must be set")
        return self

    def to_json(self) -> bytes:
        """
        Serialize the record as sent on the wire.
        """
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
