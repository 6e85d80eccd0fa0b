import logging
from typing import Any, Mapping, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    ValidationInfo,
    field_validator,
)

from datalyr.constants import (
    API_KEY_PREFIX,
    DEFAULT_FLUSH_AT,
    DEFAULT_FLUSH_INTERVAL,
    DEFAULT_HOST,
    DEFAULT_MAX_QUEUE_SIZE,
    DEFAULT_RETRY_LIMIT,
    DEFAULT_TIMEOUT,
    MAX_FLUSH_AT,
    MAX_MAX_QUEUE_SIZE,
    MAX_TIMEOUT,
    MIN_FLUSH_AT,
    MIN_MAX_QUEUE_SIZE,
    MIN_TIMEOUT,
)
from datalyr.errors import ConfigurationError

logger = logging.getLogger(__name__)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class ClientConfig(BaseModel):
    """
    Validated, immutable client configuration.

    Numeric options outside their safe range are coerced to the nearest
    bound instead of being rejected. Durations are in milliseconds.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(alias="apiKey", min_length=1, repr=False)
    host: str = DEFAULT_HOST
    flush_at: int = Field(default=DEFAULT_FLUSH_AT, alias="flushAt")
    flush_interval: int = Field(default=DEFAULT_FLUSH_INTERVAL, alias="flushInterval")
    debug: bool = False
    timeout: int = DEFAULT_TIMEOUT
    retry_limit: int = Field(default=DEFAULT_RETRY_LIMIT, alias="retryLimit")
    max_queue_size: int = Field(default=DEFAULT_MAX_QUEUE_SIZE, alias="maxQueueSize")

    @field_validator(
        "host",
        "flush_at",
        "flush_interval",
        "debug",
        "timeout",
        "retry_limit",
        "max_queue_size",
        mode="before",
    )
    @classmethod
    def use_default_when_missing(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (info.field_name == "host" and value == ""):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("flush_at")
    @classmethod
    def clamp_flush_at(cls, value: int) -> int:
        return clamp(value, MIN_FLUSH_AT, MAX_FLUSH_AT)

    @field_validator("flush_interval")
    @classmethod
    def positive_flush_interval(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_FLUSH_INTERVAL

    @field_validator("timeout")
    @classmethod
    def clamp_timeout(cls, value: int) -> int:
        return clamp(value, MIN_TIMEOUT, MAX_TIMEOUT)

    @field_validator("retry_limit")
    @classmethod
    def non_negative_retry_limit(cls, value: int) -> int:
        return max(0, value)

    @field_validator("max_queue_size")
    @classmethod
    def clamp_max_queue_size(cls, value: int) -> int:
        return clamp(value, MIN_MAX_QUEUE_SIZE, MAX_MAX_QUEUE_SIZE)

    @property
    def flush_interval_seconds(self) -> float:
        return self.flush_interval / 1000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000

    @property
    def has_expected_key_prefix(self) -> bool:
        return self.api_key.startswith(API_KEY_PREFIX)

    @classmethod
    def load(
        cls, value: Union[str, "ClientConfig", Mapping[str, Any], None]
    ) -> "ClientConfig":
        """
        Build a configuration from a bare API key, a mapping of options or
        an existing configuration.

        Args:
            value: The API key, the options or a ClientConfig.

        Returns:
            ClientConfig: The validated configuration.

        Raises:
            ConfigurationError: If the API key is missing or an option is invalid.
        """
        if isinstance(value, ClientConfig):
            return value

        if isinstance(value, str):
            value = {"api_key": value}
        elif value is None:
            raise ConfigurationError()
        elif not isinstance(value, Mapping):
            raise ConfigurationError(
                f"Expected an API key or a configuration mapping, got {type(value).__name__}"
            )

        try:
            return cls.model_validate(dict(value))
        except PydanticValidationError as e:
            for error in e.errors():
                if error["loc"] and error["loc"][0] in ("apiKey", "api_key"):
                    raise ConfigurationError() from e

            logger.debug("Rejected configuration: %s", e)
            raise ConfigurationError(f"Invalid Datalyr configuration: {e}") from e
