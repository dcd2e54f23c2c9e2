"""
Tests for configuration and request validation utilities
"""
from datetime import time

import pytest

from config.settings import Config, SchedulingSettings, parse_clock, validate_scheduling_settings
from utils.validators import DataSanitizer, RequestValidator


class TestConfig:
    """Defaults and derived settings"""

    def test_scheduling_defaults(self):
        settings = Config.get_scheduling_settings()
        assert settings.workday_start == time(9, 0)
        assert settings.workday_end == time(17, 0)
        assert settings.slot_interval_minutes == 30
        assert settings.default_duration_minutes == 60
        assert settings.max_results == Config.MAX_SLOTS_TO_SHOW

    def test_model_config(self):
        config = Config.get_model_config("llama3:8b")
        assert config["model"] == "llama3:8b"
        assert config["base_url"] == Config.LLM_BASE_URL
        assert config["temperature"] == Config.TEMPERATURE
        assert Config.get_model_config()["model"] == Config.DEFAULT_MODEL

    def test_parse_clock(self):
        assert parse_clock(" 08:45 ") == time(8, 45)

    def test_valid_settings_have_no_problems(self):
        assert validate_scheduling_settings(Config.get_scheduling_settings()) == []

    def test_invalid_settings(self):
        problems = validate_scheduling_settings(SchedulingSettings(time(17, 0), time(9, 0), 0, -5, 0))
        assert len(problems) == 4


class TestRequestValidator:
    """/schedule body validation"""

    def test_valid(self):
        assert RequestValidator.validate_schedule_request({"message": "Meet", "now": "2025-07-16T10:00:00Z", "seed": 1}) == []

    @pytest.mark.parametrize("body", [None, [], "text"])
    def test_not_an_object(self, body):
        assert RequestValidator.validate_schedule_request(body) == ["Request body must be a JSON object"]

    def test_blank_message(self):
        assert RequestValidator.validate_schedule_request({"message": "   "}) == ["Missing required field: message"]

    def test_message_too_long(self):
        errors = RequestValidator.validate_schedule_request({"message": "x" * (RequestValidator.MAX_MESSAGE_LENGTH + 1)})
        assert errors and errors[0].startswith("Message too long")

    def test_boolean_seed_rejected(self):
        assert RequestValidator.validate_schedule_request({"message": "Meet", "seed": True}) == ["'seed' must be an integer"]

    @pytest.mark.parametrize("email,valid", [
        ("a@x.com", True), ("first.last+tag@sub.example.org", True),
        ("no-at-sign", False), ("a@b", False), (None, False),
    ])
    def test_validate_email(self, email, valid):
        assert RequestValidator.validate_email(email) is valid


class TestDataSanitizer:
    """Input cleanup"""

    def test_email(self):
        assert DataSanitizer.sanitize_email("  <Bob@Example.COM>, ") == "bob@example.com"

    def test_text(self):
        assert DataSanitizer.sanitize_text("  Meet\x00 next\n\n week  ") == "Meet next week"

    def test_request(self):
        assert DataSanitizer.sanitize_request({"message": " hi  there ", "seed": 3}) == {"message": "hi there", "seed": 3}
