"""
Tests for RemoteCheck

HTTP is replaced by a fake session so no network access is needed.
"""
import asyncio

import pytest
import requests
from form_validation import (
    AsyncRuleError,
    FormValidator,
    Required,
    RemoteCheck,
    RuleConfigurationError,
    Validator,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.invalid_json:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class FakeSession:
    """Records requests and returns canned responses (or raises)."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def remote(session, **kwargs):
    return RemoteCheck(
        "https://example.com/check-username",
        "username_taken",
        session=session,
        rule_id="username_unique",
        **kwargs,
    )


class TestRemoteCheck:
    """Test RemoteCheck request and response handling."""

    def test_valid_response(self):
        """Test that valid=true yields no failures."""
        session = FakeSession(FakeResponse({"valid": True}))
        assert asyncio.run(remote(session).evaluate("jane")) == []

    def test_invalid_response_with_params(self):
        """Test that valid=false yields one failure with the returned params."""
        session = FakeSession(FakeResponse({"valid": False, "params": {"suggestion": "jane2"}}))
        failures = asyncio.run(remote(session).evaluate("jane"))
        assert len(failures) == 1
        assert failures[0].message_key == "username_taken"
        assert failures[0].params == {"suggestion": "jane2"}

    def test_response_params_with_reserved_names(self):
        """Test that server params named like Python arguments stay a normal failure."""
        params = {"self": "taken", "default_key": "other"}
        session = FakeSession(FakeResponse({"valid": False, "params": params}))
        failures = asyncio.run(remote(session).evaluate("jane"))
        assert [f.message_key for f in failures] == ["username_taken"]
        assert failures[0].params == params

    def test_request_shape(self):
        """Test the posted payload, headers and timeout."""
        session = FakeSession(FakeResponse({"valid": True}))
        rule = remote(session, timeout_ms=2500, headers={"Authorization": "Bearer t"})
        asyncio.run(rule.evaluate("jane"))
        assert session.calls == [{
            "url": "https://example.com/check-username",
            "json": {"value": "jane"},
            "headers": {"Authorization": "Bearer t"},
            "timeout": 2.5,
        }]

    def test_timeout_raises(self):
        """Test that a timeout is surfaced as AsyncRuleError."""
        session = FakeSession(error=requests.exceptions.Timeout("slow"))
        with pytest.raises(AsyncRuleError, match="timed out"):
            asyncio.run(remote(session).evaluate("jane"))

    def test_connection_error_raises(self):
        """Test that transport errors are surfaced as AsyncRuleError."""
        session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(AsyncRuleError) as exc_info:
            asyncio.run(remote(session).evaluate("jane"))
        assert exc_info.value.rule_id == "username_unique"

    def test_http_error_raises(self):
        """Test that HTTP error statuses are surfaced as AsyncRuleError."""
        session = FakeSession(FakeResponse({"valid": True}, status_code=503))
        with pytest.raises(AsyncRuleError):
            asyncio.run(remote(session).evaluate("jane"))

    @pytest.mark.parametrize("response", [
        FakeResponse(invalid_json=True),
        FakeResponse({"ok": True}),
        FakeResponse({"valid": "yes"}),
        FakeResponse(["valid"]),
        FakeResponse({"valid": False, "params": ["x"]}),
    ])
    def test_malformed_response_raises(self, response):
        """Test that malformed responses are never read as valid."""
        with pytest.raises(AsyncRuleError):
            asyncio.run(remote(FakeSession(response)).evaluate("jane"))

    @pytest.mark.parametrize("kwargs", [
        {"url": "", "message_key": "k"},
        {"url": "https://example.com", "message_key": ""},
        {"url": "https://example.com", "message_key": "k", "timeout_ms": 0},
    ])
    def test_configuration_errors(self, kwargs):
        """Test that bad remote check settings are rejected at construction."""
        with pytest.raises(RuleConfigurationError):
            RemoteCheck(**kwargs)


class TestRemoteCheckInForm:
    """Test RemoteCheck inside validators and forms."""

    def test_error_carries_field(self):
        """Test that a remote failure in a validator names the field."""
        session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
        validator = Validator("username", [Required(), remote(session)])
        with pytest.raises(AsyncRuleError) as exc_info:
            asyncio.run(validator.validate_async("jane"))
        assert exc_info.value.field == "username"

    def test_form_result(self):
        """Test a form combining required and remote checks."""
        session = FakeSession(FakeResponse({"valid": False}))
        form = FormValidator([Validator("username", [Required(), remote(session)])])
        result = asyncio.run(form.validate_all_async({"username": "jane"}))
        assert [e.message_key for e in result.errors_for("username")] == ["username_taken"]
