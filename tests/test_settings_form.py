"""Tests for settings form validation."""

import pytest
from hypothesis import given, strategies as st

from steam_group_stats.ui.screens.settings import validate_settings_form


def form(**overrides: str) -> dict[str, str]:
    values = {
        "api_key": "ABCDEF0123456789",
        "request_timeout": "30",
        "proxy_url": "",
        "log_level": "INFO",
    }
    values.update(overrides)
    return values


class TestValidateSettingsForm:

    def test_valid_form_has_no_errors(self) -> None:
        assert validate_settings_form(form()) == {}

    def test_blank_api_key_is_allowed(self) -> None:
        assert validate_settings_form(form(api_key="")) == {}

    @pytest.mark.parametrize("api_key", ["abc-123", "key with space", "k3y!"])
    def test_api_key_must_be_alphanumeric(self, api_key: str) -> None:
        assert "api_key" in validate_settings_form(form(api_key=api_key))

    @pytest.mark.parametrize(
        ("timeout", "message"),
        [
            ("", "Request timeout is required"),
            ("fast", "Must be a valid number"),
            ("0.5", "Must be at least 1 second"),
            ("121", "Cannot exceed 120 seconds"),
        ],
    )
    def test_timeout_errors(self, timeout: str, message: str) -> None:
        assert validate_settings_form(form(request_timeout=timeout))["request_timeout"] == message

    @given(st.floats(min_value=1.0, max_value=120.0, allow_nan=False))
    def test_timeout_range_is_accepted(self, timeout: float) -> None:
        assert "request_timeout" not in validate_settings_form(form(request_timeout=str(timeout)))

    @pytest.mark.parametrize("proxy", ["http://proxy.local:8080/?url=", "https://proxy.local/"])
    def test_http_proxies_are_accepted(self, proxy: str) -> None:
        assert validate_settings_form(form(proxy_url=proxy)) == {}

    def test_proxy_needs_a_scheme(self) -> None:
        assert "proxy_url" in validate_settings_form(form(proxy_url="proxy.local:8080"))

    def test_unknown_log_level(self) -> None:
        assert "log_level" in validate_settings_form(form(log_level="LOUD"))

    def test_errors_are_reported_per_field(self) -> None:
        errors = validate_settings_form(form(api_key="bad key", request_timeout="0", log_level="LOUD"))
        assert set(errors) == {"api_key", "request_timeout", "log_level"}
