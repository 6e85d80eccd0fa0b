import pytest
from pydantic import ValidationError as PydanticValidationError

from datalyr.config import ClientConfig, clamp
from datalyr.constants import DEFAULT_HOST
from datalyr.errors import ConfigurationError


@pytest.mark.unit
class TestClientConfig:
    def test_api_key_string_uses_defaults(self):
        config = ClientConfig.load("dk_test")

        assert config.api_key == "dk_test"
        assert config.host == DEFAULT_HOST
        assert config.flush_at == 20
        assert config.flush_interval == 10000
        assert config.timeout == 10000
        assert config.retry_limit == 3
        assert config.max_queue_size == 1000
        assert config.debug is False

    def test_wire_style_names(self):
        config = ClientConfig.load(
            {
                "apiKey": "dk_test",
                "host": "https://collector.example.com",
                "flushAt": 5,
                "flushInterval": 2000,
                "timeout": 3000,
                "retryLimit": 1,
                "maxQueueSize": 200,
                "debug": True,
            }
        )

        assert config.host == "https://collector.example.com"
        assert config.flush_at == 5
        assert config.flush_interval == 2000
        assert config.timeout == 3000
        assert config.retry_limit == 1
        assert config.max_queue_size == 200
        assert config.debug is True

    def test_python_names(self):
        config = ClientConfig.load({"api_key": "dk_test", "flush_at": 7, "max_queue_size": 500})

        assert config.flush_at == 7
        assert config.max_queue_size == 500

    def test_existing_config_is_reused(self):
        config = ClientConfig(api_key="dk_test")
        assert ClientConfig.load(config) is config

    @pytest.mark.parametrize(
        "field, value, expected",
        [
            ("flushAt", 0, 1),
            ("flushAt", -5, 1),
            ("flushAt", 500, 100),
            ("timeout", 10, 1000),
            ("timeout", 120000, 60000),
            ("maxQueueSize", 1, 100),
            ("maxQueueSize", 50000, 10000),
            ("retryLimit", -1, 0),
        ],
    )
    def test_out_of_range_values_are_clamped(self, field, value, expected):
        config = ClientConfig.load({"apiKey": "dk_test", field: value})
        assert config.model_dump(by_alias=True)[field] == expected

    def test_missing_values_fall_back_to_defaults(self):
        config = ClientConfig.load(
            {"apiKey": "dk_test", "host": "", "flushAt": None, "timeout": None, "debug": None}
        )

        assert config.host == DEFAULT_HOST
        assert config.flush_at == 20
        assert config.timeout == 10000
        assert config.debug is False

    def test_non_positive_flush_interval_uses_default(self):
        assert ClientConfig.load({"apiKey": "dk_test", "flushInterval": 0}).flush_interval == 10000

    def test_seconds_helpers(self):
        config = ClientConfig.load({"apiKey": "dk_test", "flushInterval": 2500, "timeout": 1500})

        assert config.flush_interval_seconds == 2.5
        assert config.timeout_seconds == 1.5

    @pytest.mark.parametrize("value", [None, "", {}, {"apiKey": ""}, {"apiKey": None}])
    def test_missing_api_key(self, value):
        with pytest.raises(ConfigurationError, match="API key is required"):
            ClientConfig.load(value)

    def test_invalid_option_type(self):
        with pytest.raises(ConfigurationError, match="Invalid Datalyr configuration"):
            ClientConfig.load({"apiKey": "dk_test", "flushAt": "often"})

    def test_unsupported_config_value(self):
        with pytest.raises(ConfigurationError, match="got int"):
            ClientConfig.load(42)

    def test_key_prefix_check(self):
        assert ClientConfig.load("dk_test").has_expected_key_prefix is True
        assert ClientConfig.load("sk_test").has_expected_key_prefix is False

    def test_is_immutable(self):
        config = ClientConfig.load("dk_test")

        with pytest.raises(PydanticValidationError):
            config.flush_at = 50

    def test_repr_hides_api_key(self):
        assert "dk_secret" not in repr(ClientConfig.load("dk_secret"))


@pytest.mark.unit
@pytest.mark.parametrize("value, expected", [(5, 5), (0, 1), (11, 10)])
def test_clamp(value, expected):
    assert clamp(value, 1, 10) == expected
