"""Tests for configuration validation with Pydantic."""

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from fetchwise.domain.config import FetchConfig, PaginateConfig, RetryConfig
from fetchwise.infrastructure.config.config_manager import ConfigManager, ConfigurationError


class TestRetryConfigValidation:
    """Tests for RetryConfig validation."""

    def test_valid_retry_config(self):
        """Test valid retry configuration"""
        config = RetryConfig(
            max_attempts=3,
            backoff_multiplier=2.0,
            delay_min=0.5,
            delay_max=30.0,
            jitter=0.1,
        )
        assert config.max_attempts == 3
        assert config.jitter == 0.1

    def test_defaults(self):
        """Test default retry configuration"""
        config = RetryConfig()
        assert config.max_attempts == 4
        assert config.backoff_multiplier == 2.0
        assert config.delay_min == 1.0
        assert config.delay_max == 60.0
        assert config.jitter == 1.0
        assert config.condition is None

    def test_max_attempts_zero_allowed(self):
        """Test max_attempts may be zero (no retries)"""
        assert RetryConfig(max_attempts=0).max_attempts == 0

    def test_max_attempts_negative(self):
        """Test max_attempts must not be negative"""
        with pytest.raises(ValidationError, match="max_attempts"):
            RetryConfig(max_attempts=-1)

    def test_backoff_multiplier_too_low(self):
        """Test backoff_multiplier below 1.0"""
        with pytest.raises(ValidationError, match="backoff_multiplier"):
            RetryConfig(backoff_multiplier=0.5)

    def test_jitter_above_one(self):
        """Test jitter above 1.0"""
        with pytest.raises(ValidationError, match="jitter"):
            RetryConfig(jitter=1.5)

    def test_delay_min_not_positive(self):
        """Test delay_min must be positive"""
        with pytest.raises(ValidationError, match="delay_min"):
            RetryConfig(delay_min=0)

    def test_delay_min_not_below_delay_max(self):
        """Test delay_min must stay below delay_max"""
        with pytest.raises(ValidationError, match="delay_min"):
            RetryConfig(delay_min=60.0, delay_max=60.0)

    def test_condition_must_return_bool(self):
        """Test condition returning a non-bool is rejected"""
        with pytest.raises(ValidationError, match="condition"):
            RetryConfig(condition=lambda status, retryable: "yes")

    def test_condition_must_be_callable(self):
        """Test condition must be a function"""
        with pytest.raises(ValidationError, match="condition"):
            RetryConfig(condition="always")

    def test_immutable(self):
        """Test config cannot change after construction"""
        config = RetryConfig()
        with pytest.raises(ValidationError):
            config.max_attempts = 10


class TestPaginateConfigValidation:
    """Tests for PaginateConfig validation."""

    def test_defaults(self):
        """Test default pagination configuration"""
        config = PaginateConfig()
        assert config.max_pages is None
        assert config.pause == 0.0
        assert config.next_page_resolver is None
        assert config.fail_on_bad_link_header is True

    def test_max_pages_zero(self):
        """Test max_pages must be positive if set"""
        with pytest.raises(ValidationError, match="max_pages"):
            PaginateConfig(max_pages=0)

    def test_negative_pause(self):
        """Test pause must not be negative"""
        with pytest.raises(ValidationError, match="pause"):
            PaginateConfig(pause=-1)

    def test_resolver_must_be_callable(self):
        """Test next_page_resolver must be a function"""
        with pytest.raises(ValidationError, match="next_page_resolver"):
            PaginateConfig(next_page_resolver="next")


class TestFetchConfigValidation:
    """Tests for FetchConfig validation."""

    def test_valid_fetch_config(self):
        """Test valid client configuration"""
        config = FetchConfig(timeout=30, retry={"max_attempts": 2}, paginate={"max_pages": 5})
        assert config.timeout == 30
        assert config.retry.max_attempts == 2
        assert config.paginate.max_pages == 5

    def test_unknown_field_rejected(self):
        """Test unknown fields are rejected"""
        with pytest.raises(ValidationError, match="extra"):
            FetchConfig(unknown_field="value")

    def test_timeout_must_be_positive(self):
        """Test timeout must be positive if set"""
        with pytest.raises(ValidationError, match="timeout"):
            FetchConfig(timeout=0)

    def test_nested_validation(self):
        """Test nested validation works"""
        with pytest.raises(ValidationError, match="jitter"):
            FetchConfig(retry={"jitter": 5.0})


class TestConfigManagerValidation:
    """Tests for ConfigManager validation."""

    @pytest.fixture(autouse=True)
    def _isolated_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for name in ConfigManager.ENV_OVERRIDES:
            monkeypatch.delenv(name, raising=False)

    def test_load_valid_config_from_file(self):
        """Test loading valid configuration from file"""
        config_data = {
            "retry": {"max_attempts": 2, "delay_max": 10},
            "paginate": {"max_pages": 3},
            "timeout": 45,
        }

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
            yaml.dump(config_data, f)
            config_path = f.name

        try:
            manager = ConfigManager(config_path=config_path)
            assert manager.config.retry.max_attempts == 2
            assert manager.config.retry.delay_max == 10
            # Unset fields keep defaults
            assert manager.config.retry.delay_min == 1.0
            assert manager.config.paginate.max_pages == 3
            assert manager.config.timeout == 45
        finally:
            Path(config_path).unlink()

    def test_load_invalid_config_raises_error(self):
        """Test loading invalid configuration raises error"""
        config_data = {
            "retry": {
                "delay_min": 90,  # Invalid: above delay_max
            }
        }

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
            yaml.dump(config_data, f)
            config_path = f.name

        try:
            with pytest.raises(ConfigurationError, match="delay_min"):
                ConfigManager(config_path=config_path)
        finally:
            Path(config_path).unlink()

    def test_config_file_found_in_parent(self, tmp_path, monkeypatch):
        """Test .fetchwise.yml is searched upward from the current directory"""
        (tmp_path / ".fetchwise.yml").write_text("paginate:\n  pause: 2\n", encoding="utf-8")
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        monkeypatch.chdir(child)

        manager = ConfigManager()

        assert manager.config.paginate.pause == 2.0

    def test_default_config_is_valid(self):
        """Test default configuration is valid"""
        manager = ConfigManager()
        assert isinstance(manager.config, FetchConfig)
        assert manager.config.retry.max_attempts == 4

    def test_get_typed_config_sections(self):
        """Test getter methods return typed models"""
        manager = ConfigManager()

        assert isinstance(manager.get_retry_config(), RetryConfig)
        assert isinstance(manager.get_paginate_config(), PaginateConfig)

    def test_get_dot_notation(self):
        """Test dotted key lookup"""
        manager = ConfigManager()
        assert manager.get("retry.max_attempts") == 4
        assert manager.get("retry.missing", "fallback") == "fallback"

    def test_env_overrides_work(self, monkeypatch):
        """Test environment variable overrides"""
        monkeypatch.setenv("FETCHWISE_TIMEOUT", "12.5")
        monkeypatch.setenv("FETCHWISE_MAX_ATTEMPTS", "1")
        monkeypatch.setenv("FETCHWISE_MAX_PAGES", "7")
        monkeypatch.setenv("FETCHWISE_USER_AGENT", "bot/2.0")

        manager = ConfigManager()
        assert manager.config.timeout == 12.5
        assert manager.config.retry.max_attempts == 1
        assert manager.config.paginate.max_pages == 7
        assert manager.config.user_agent == "bot/2.0"

    def test_env_unlimited_max_pages(self, monkeypatch):
        """Test 'unlimited' clears the page limit"""
        monkeypatch.setenv("FETCHWISE_MAX_PAGES", "unlimited")
        assert ConfigManager().config.paginate.max_pages is None

    def test_invalid_env_value(self, monkeypatch):
        """Test a non-numeric env override is reported"""
        monkeypatch.setenv("FETCHWISE_MAX_ATTEMPTS", "many")
        with pytest.raises(ConfigurationError, match="FETCHWISE_MAX_ATTEMPTS"):
            ConfigManager()
