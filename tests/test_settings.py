"""
Unit tests for environment variable parsing and configuration defaults.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import importlib
import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from nodedrain import settings


class TestDurationParsing:
    """Test duration parsing functionality."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("500ms", timedelta(milliseconds=500)),
            ("30s", timedelta(seconds=30)),
            ("15m", timedelta(minutes=15)),
            ("2h", timedelta(hours=2)),
            ("3d", timedelta(days=3)),
        ],
    )
    def test_parse_duration_units(self, value, expected):
        """Test parsing every supported unit."""
        assert settings._parse_duration(value) == expected

    def test_parse_duration_invalid_format(self):
        """Test invalid duration format returns default."""
        assert settings._parse_duration("invalid") == timedelta(minutes=10)

    def test_parse_duration_empty_string(self):
        """Test empty string returns default."""
        assert settings._parse_duration("") == timedelta(minutes=10)

    def test_parse_duration_custom_default(self):
        """Test the default can be overridden."""
        assert settings._parse_duration("1.5s", timedelta(seconds=1)) == timedelta(seconds=1)

    def test_parse_duration_case_insensitive(self):
        """Test case insensitive parsing with surrounding whitespace."""
        assert settings._parse_duration(" 250MS ") == timedelta(milliseconds=250)


class TestIntegerParsing:
    """Test integer environment variable parsing."""

    def test_get_int_env(self):
        """Test parsing an integer value."""
        with patch.dict(os.environ, {"TEST_INT": " 42 "}):
            assert settings._get_int_env("TEST_INT", 0) == 42

    def test_get_int_env_negative(self):
        """Test parsing a negative value."""
        with patch.dict(os.environ, {"TEST_INT": "-1"}):
            assert settings._get_int_env("TEST_INT", 0) == -1

    def test_get_int_env_invalid(self):
        """Test invalid values return the default."""
        with patch.dict(os.environ, {"TEST_INT": "ten"}):
            assert settings._get_int_env("TEST_INT", 7) == 7

    def test_get_int_env_default_when_missing(self):
        """Test default value when environment variable is missing."""
        with patch.dict(os.environ, {}, clear=True):
            assert settings._get_int_env("MISSING_VAR", -1) == -1


class TestBooleanParsing:
    """Test boolean environment variable parsing."""

    def test_get_bool_env_true_values(self):
        """Test various true values."""
        true_values = ["true", "True", "TRUE", "1", "yes", "YES", "on", "ON"]
        for value in true_values:
            with patch.dict(os.environ, {"TEST_BOOL": value}):
                result = settings._get_bool_env("TEST_BOOL", False)
                assert result is True, f"Failed for value: {value}"

    def test_get_bool_env_false_values(self):
        """Test various false values."""
        false_values = ["false", "False", "FALSE", "0", "no", "NO", "off", "OFF", "invalid"]
        for value in false_values:
            with patch.dict(os.environ, {"TEST_BOOL": value}):
                result = settings._get_bool_env("TEST_BOOL", True)
                assert result is False, f"Failed for value: {value}"

    def test_get_bool_env_default_when_missing(self):
        """Test default value when environment variable is missing."""
        with patch.dict(os.environ, {}, clear=True):
            assert settings._get_bool_env("MISSING_VAR", True) is True
            assert settings._get_bool_env("MISSING_VAR", False) is False


class TestSettingsIntegration:
    """Test settings module integration."""

    def test_default_settings(self):
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(settings)

            assert settings.DRAIN_ACTION == "drain"
            assert settings.NODE_NAME == ""
            assert settings.IGNORE_DAEMONSETS is False
            assert settings.DELETE_LOCAL_DATA is False
            assert settings.FORCE is False
            assert settings.GRACE_PERIOD == -1
            assert settings.DRAIN_TIMEOUT == timedelta(seconds=600)
            assert settings.RETRY_BACKOFF == timedelta(milliseconds=1000)
            assert settings.MAX_BACKOFF == timedelta(milliseconds=10000)
            assert settings.SLACK_WEBHOOK_URL is None
            assert settings.LOG_LEVEL == "INFO"
            assert settings.ENABLE_JSON_LOGS is True
            assert settings.CLUSTER_NAME == "unknown"
            assert settings.TEST_KUBE_CONTEXT_NAME == "kind-nodedrain-test"
            assert settings.DRAIN_ARGS == ""

    def test_environment_variable_override(self):
        """Test environment variable overrides."""
        env_vars = {
            "DRAIN_ACTION": " Uncordon ",
            "NODE_NAME": "worker-3",
            "IGNORE_DAEMONSETS": "true",
            "DELETE_LOCAL_DATA": "yes",
            "FORCE": "1",
            "GRACE_PERIOD": "30",
            "DRAIN_TIMEOUT": "5m",
            "RETRY_BACKOFF": "250ms",
            "MAX_BACKOFF": "30s",
            "SLACK_WEBHOOK_URL": "https://hooks.slack.com/test",
            "LOG_LEVEL": "debug",
            "ENABLE_JSON_LOGS": "false",
            "CLUSTER_NAME": "test-cluster",
            "TEST_KUBE_CONTEXT_NAME": "kind-test",
            "DRAIN_ARGS": ' {"node_name": "worker-3"} ',
        }

        with patch.dict(os.environ, env_vars):
            importlib.reload(settings)

            assert settings.DRAIN_ACTION == "uncordon"
            assert settings.NODE_NAME == "worker-3"
            assert settings.IGNORE_DAEMONSETS is True
            assert settings.DELETE_LOCAL_DATA is True
            assert settings.FORCE is True
            assert settings.GRACE_PERIOD == 30
            assert settings.DRAIN_TIMEOUT == timedelta(minutes=5)
            assert settings.RETRY_BACKOFF == timedelta(milliseconds=250)
            assert settings.MAX_BACKOFF == timedelta(seconds=30)
            assert settings.SLACK_WEBHOOK_URL == "https://hooks.slack.com/test"
            assert settings.LOG_LEVEL == "DEBUG"
            assert settings.ENABLE_JSON_LOGS is False
            assert settings.CLUSTER_NAME == "test-cluster"
            assert settings.TEST_KUBE_CONTEXT_NAME == "kind-test"
            assert settings.DRAIN_ARGS == '{"node_name": "worker-3"}'

    def test_invalid_durations_fall_back(self):
        """Test unparsable durations use the documented defaults."""
        env_vars = {"DRAIN_TIMEOUT": "soon", "RETRY_BACKOFF": "-5ms", "MAX_BACKOFF": ""}

        with patch.dict(os.environ, env_vars):
            importlib.reload(settings)

            assert settings.DRAIN_TIMEOUT == timedelta(seconds=600)
            assert settings.RETRY_BACKOFF == timedelta(seconds=1)
            assert settings.MAX_BACKOFF == timedelta(seconds=10)

    def teardown_method(self):
        """Clean up after each test."""
        importlib.reload(settings)
