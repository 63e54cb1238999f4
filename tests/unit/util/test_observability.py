"""Unit tests for logfire setup helpers."""

import logging

import pytest

from atpark.config import ObservabilitySettings, Settings
from atpark.util.logging import log_level
from atpark.util.observability import should_send


class TestShouldSend:
    """Tests for should_send."""

    @pytest.mark.parametrize(
        ("token", "explicit", "expected"),
        [
            (None, None, False),
            ("lf_token", None, True),
            ("lf_token", False, False),
            (None, True, True),
        ],
    )
    def test_explicit_setting_wins_over_token(self, token, explicit, expected):
        settings = ObservabilitySettings(logfire_token=token, send_to_logfire=explicit)

        assert should_send(settings) is expected


class TestLogLevel:
    """Tests for log_level."""

    def test_debug_wins(self):
        assert log_level(Settings(debug=True, environment="test")) == logging.DEBUG

    def test_quiet_under_test(self):
        assert log_level(Settings(debug=False, environment="test")) == logging.WARNING

    def test_info_otherwise(self):
        assert log_level(Settings(debug=False, environment="production")) == logging.INFO
