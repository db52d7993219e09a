"""Tests for error types and codes."""

import pytest

from tsdiag.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    RoutingError,
    TsDiagError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.ROUTING_LOOKUP_FAILED, 3000),
            (ErrorCode.ROUTING_DELIVERY_FAILED, 3000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestTsDiagError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = TsDiagError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        error = TsDiagError(code=ErrorCode.INTERNAL_ERROR, message="Something broke")

        assert str(error) == "[9001] INTERNAL_ERROR: Something broke"

    def test_given_error_when_raised_then_catchable_as_exception(self) -> None:
        """Errors are real exceptions."""
        with pytest.raises(TsDiagError):
            raise RoutingError.lookup_failed("file:///a.ts", "boom")


class TestConfigError:
    """ConfigError factory method tests."""

    @pytest.mark.parametrize(
        ("factory", "kwargs", "expected_code"),
        [
            (
                "parse_error",
                {"path": "/foo", "reason": "bad yaml"},
                ErrorCode.CONFIG_PARSE_ERROR,
            ),
            (
                "invalid_value",
                {"field": "reload.debounce_sec", "value": -1, "reason": "negative"},
                ErrorCode.CONFIG_INVALID_VALUE,
            ),
        ],
    )
    def test_given_factory_when_called_then_correct_code(
        self, factory: str, kwargs: dict[str, object], expected_code: ErrorCode
    ) -> None:
        """Factory methods produce errors with correct error codes."""
        error = getattr(ConfigError, factory)(**kwargs)

        assert error.code == expected_code
        assert isinstance(error, ConfigError)

    def test_given_parse_error_when_created_then_path_in_details(self) -> None:
        """Parse error includes file path in details."""
        error = ConfigError.parse_error("/config.yaml", "invalid syntax")

        assert error.details["path"] == "/config.yaml"
        assert "invalid syntax" in error.message

    def test_given_invalid_value_when_created_then_value_stringified(self) -> None:
        """Invalid values are stored as strings for log records."""
        error = ConfigError.invalid_value("reload.debounce_sec", -1.0, "negative")

        assert error.details == {
            "field": "reload.debounce_sec",
            "value": "-1.0",
            "reason": "negative",
        }


class TestRoutingError:
    """RoutingError factory tests."""

    def test_given_lookup_failure_when_created_then_uri_in_details(self) -> None:
        """Lookup failures name the file they were routing."""
        error = RoutingError.lookup_failed("file:///p/a.ts", "session closed")

        assert error.code == ErrorCode.ROUTING_LOOKUP_FAILED
        assert error.details == {"uri": "file:///p/a.ts", "reason": "session closed"}

    def test_given_delivery_failure_when_created_then_handler_in_details(self) -> None:
        """Delivery failures name the handler that rejected the batch."""
        error = RoutingError.delivery_failed("typescript", "file:///p/a.ts", "boom")

        assert error.code == ErrorCode.ROUTING_DELIVERY_FAILED
        assert error.details["handler"] == "typescript"
        assert "typescript" in error.message


class TestInternalError:
    """InternalError tests."""

    def test_given_unexpected_error_when_created_then_includes_extras(self) -> None:
        """Unexpected error captures arbitrary extra details."""
        extras = {"foo": "bar", "count": 42}

        error = InternalError.unexpected("boom", **extras)

        assert error.details == extras
        assert error.code == ErrorCode.INTERNAL_ERROR
