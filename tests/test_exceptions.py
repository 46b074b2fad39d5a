"""Tests for keyward exceptions."""

from keyward.exceptions import (
    ConfigurationError,
    KeyNotFoundError,
    KeywardError,
    ManagementAPIError,
    RateLimitError,
    WaitTimeoutError,
    WrappedKeyNotReadyError,
    is_status_not_found,
)


def test_keyward_error():
    """Test base KeywardError."""
    error = KeywardError("Test error", "TEST_CODE")
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.code == "TEST_CODE"


def test_management_api_error():
    """Test ManagementAPIError."""
    error = ManagementAPIError("Failed to read key", "read_key", status_code=500)
    assert "Failed to read key" in str(error)
    assert error.code == "MANAGEMENT_API_ERROR"
    assert error.operation == "read_key"
    assert error.status_code == 500


def test_key_not_found_error():
    """Test KeyNotFoundError."""
    error = KeyNotFoundError("kid-123")
    assert "kid-123" in str(error)
    assert error.code == "KEY_NOT_FOUND"
    assert error.status_code == 404
    assert error.operation == "read"
    assert isinstance(error, ManagementAPIError)


def test_rate_limit_error():
    """Test RateLimitError."""
    error = RateLimitError("list_keys")
    assert error.code == "TOO_MANY_REQUESTS"
    assert error.status_code == 429
    assert error.operation == "list_keys"


def test_is_status_not_found():
    """Test not-found classification."""
    assert is_status_not_found(KeyNotFoundError("kid"))
    assert is_status_not_found(ManagementAPIError("gone", "read_key", status_code=404))
    assert not is_status_not_found(ManagementAPIError("nope", "read_key", status_code=403))
    assert not is_status_not_found(ValueError("404"))


def test_wait_timeout_error():
    """Test WaitTimeoutError."""
    error = WaitTimeoutError(attempts=20, interval_ms=100)
    assert "20 attempts" in str(error)
    assert "100ms" in str(error)
    assert error.code == "WAIT_TIMEOUT"
    assert not isinstance(error, ManagementAPIError)


def test_wrapped_key_not_ready_error():
    """Test WrappedKeyNotReadyError."""
    error = WrappedKeyNotReadyError()
    assert "public_wrapping_key" in str(error)
    assert error.code == "WRAPPED_KEY_NOT_READY"


def test_configuration_error():
    """Test ConfigurationError."""
    error = ConfigurationError("domain is required", field="domain")
    assert error.code == "INVALID_CONFIGURATION"
    assert error.field == "domain"


def test_all_inherit_from_keyward_error():
    """Test every exception can be caught as KeywardError."""
    for error in (
        ManagementAPIError("x", "op"),
        KeyNotFoundError("kid"),
        RateLimitError("op"),
        WaitTimeoutError(1, 0),
        WrappedKeyNotReadyError(),
        ConfigurationError("x"),
    ):
        assert isinstance(error, KeywardError)
