"""Tests for GateConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from campusgate import GateConfig, LogLevel, load_config_from_env


class TestGateConfig:
    """Tests for GateConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating a GateConfig with defaults."""
        config = GateConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.service_name is None
        assert config.min_password_length == 6
        assert config.batch_span_years == 4
        assert config.id_suffix_digits == 4
        assert config.default_denial_reason == "Application denied by administrator"

    def test_create_custom_config(self) -> None:
        """Test creating a GateConfig with custom values."""
        config = GateConfig(
            log_level=LogLevel.DEBUG,
            service_name="registrar",
            min_password_length=10,
            hash_iterations=1_000,
        )
        assert config.log_level == LogLevel.DEBUG
        assert config.service_name == "registrar"
        assert config.min_password_length == 10
        assert config.hash_iterations == 1_000

    def test_log_level_from_string(self) -> None:
        """Test creating config with log level as string."""
        config = GateConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        """Test creating config with invalid log level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            GateConfig(log_level="INVALID")

    @pytest.mark.parametrize("digits", [2, 9])
    def test_suffix_digits_bounds(self, digits: int) -> None:
        """Test identifier suffix width is bounded."""
        with pytest.raises(ValidationError):
            GateConfig(id_suffix_digits=digits)

    def test_frozen(self) -> None:
        """Test that config cannot be mutated after construction."""
        config = GateConfig()
        with pytest.raises(ValidationError):
            config.min_password_length = 1  # type: ignore[misc]

    def test_extra_fields_forbidden(self) -> None:
        """Test that extra fields are forbidden."""
        with pytest.raises(ValidationError):
            GateConfig(redis_url="redis://localhost")  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_load_defaults(self) -> None:
        """Test loading config with no environment variables."""
        assert load_config_from_env() == GateConfig()

    @patch.dict(
        os.environ,
        {
            "LOG_LEVEL": "WARNING",
            "LOG_JSON": "yes",
            "SERVICE_NAME": "registrar",
            "CAMPUSGATE_MIN_PASSWORD_LENGTH": "12",
            "CAMPUSGATE_DEFAULT_DENIAL_REASON": "Seats full",
            "CAMPUSGATE_BATCH_SPAN_YEARS": "5",
            "CAMPUSGATE_ID_SUFFIX_DIGITS": "6",
            "CAMPUSGATE_HASH_ITERATIONS": "5000",
        },
        clear=True,
    )
    def test_load_from_env(self) -> None:
        """Test loading config from environment variables."""
        config = load_config_from_env()
        assert config.log_level == LogLevel.WARNING
        assert config.log_json is True
        assert config.service_name == "registrar"
        assert config.min_password_length == 12
        assert config.default_denial_reason == "Seats full"
        assert config.batch_span_years == 5
        assert config.id_suffix_digits == 6
        assert config.hash_iterations == 5000

    @patch.dict(os.environ, {"CAMPUSGATE_ID_SUFFIX_DIGITS": "20"}, clear=True)
    def test_invalid_env_value(self) -> None:
        """Test that out-of-range environment values are rejected."""
        with pytest.raises(ValidationError):
            load_config_from_env()
