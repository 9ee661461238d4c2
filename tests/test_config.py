"""Tests for RightsConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from contextrights import LogLevel, RightsConfig, load_config_from_env


class TestRightsConfig:
    """Tests for RightsConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating a RightsConfig with defaults."""
        config = RightsConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.service_name is None
        assert config.default_right == "default"
        assert config.deny_message == "Access Denied"

    def test_create_custom_config(self) -> None:
        """Test creating a RightsConfig with custom values."""
        config = RightsConfig(
            log_level=LogLevel.DEBUG,
            log_json=True,
            service_name="posts",
            default_right="account",
            deny_message="Nope",
        )
        assert config.log_level == LogLevel.DEBUG
        assert config.log_json is True
        assert config.service_name == "posts"
        assert config.default_right == "account"
        assert config.deny_message == "Nope"

    def test_log_level_from_string(self) -> None:
        """Test creating config with log level as string."""
        config = RightsConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        """Test creating config with invalid log level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            RightsConfig(log_level="INVALID")

    def test_default_right_is_normalised(self) -> None:
        """default_right is stripped and lower-cased like every right name."""
        config = RightsConfig(default_right="  Account ")
        assert config.default_right == "account"

    def test_default_right_empty(self) -> None:
        """An empty default_right is rejected."""
        with pytest.raises(ValueError, match="non-empty"):
            RightsConfig(default_right="   ")

    def test_extra_fields_forbidden(self) -> None:
        """Test that extra fields are forbidden."""
        with pytest.raises(Exception):  # Pydantic validation error
            RightsConfig(extra_field="value")  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_load_defaults(self) -> None:
        """Test loading config with no environment variables."""
        config = load_config_from_env()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.default_right == "default"
        assert config.deny_message == "Access Denied"

    @patch.dict(
        os.environ,
        {
            "LOG_LEVEL": "WARNING",
            "LOG_JSON": "yes",
            "SERVICE_NAME": "posts",
            "RIGHTS_DEFAULT_NAME": "account",
            "RIGHTS_DENY_MESSAGE": "Not yours",
        },
        clear=True,
    )
    def test_load_from_env(self) -> None:
        """Test loading config from environment variables."""
        config = load_config_from_env()
        assert config.log_level == LogLevel.WARNING
        assert config.log_json is True
        assert config.service_name == "posts"
        assert config.default_right == "account"
        assert config.deny_message == "Not yours"

    @patch.dict(os.environ, {"LOG_JSON": "off"}, clear=True)
    def test_log_json_false_values(self) -> None:
        """Unrecognised LOG_JSON values read as false."""
        config = load_config_from_env()
        assert config.log_json is False
