"""
Tests for ControllerConfig validation and overrides.
"""

import pytest

from lazytreelib import ConfigurationError, ControllerConfig, LazyTreeController


class TestControllerConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = ControllerConfig()
        assert config.stale_time == 30.0
        assert config.cache_ttl == 300.0
        assert config.max_cache_entries == 10000
        assert config.clear_resets_freshness is False
        config.validate()

    @pytest.mark.parametrize("field,value", [
        ("stale_time", -1.0),
        ("cache_ttl", -0.1),
        ("max_cache_entries", -5),
    ])
    def test_negative_values_rejected(self, field, value):
        config = ControllerConfig(**{field: value})
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_controller_validates(self):
        with pytest.raises(ConfigurationError):
            LazyTreeController(stale_time=-1.0)

    def test_with_overrides_ignores_none(self):
        config = ControllerConfig()
        assert config.with_overrides(stale_time=None) is config

    def test_with_overrides_copies(self):
        config = ControllerConfig()
        updated = config.with_overrides(stale_time=1.0)
        assert updated.stale_time == 1.0
        assert config.stale_time == 30.0

    def test_for_testing(self):
        assert ControllerConfig.for_testing(stale_time=0.25).stale_time == 0.25

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)
