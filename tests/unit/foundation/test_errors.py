"""Tests for the structured error system."""

import pytest

from bindwire.foundation.errors import (
    ERROR_MESSAGES,
    BindwireError,
    ErrorCode,
    config_error,
    conversion_error,
    invocation_error,
    lookup_error,
    registration_error,
)


class Widget:
    pass


class TestErrorCode:
    @pytest.mark.parametrize(
        "code,category",
        [
            (ErrorCode.REGISTRATION_FAILED, "registration"),
            (ErrorCode.CHANNEL_UNKNOWN, "lookup"),
            (ErrorCode.PARAMETER_COUNT_MISMATCH, "configuration"),
            (ErrorCode.INVOCATION_FAILED, "invocation"),
            (ErrorCode.CONVERSION_FAILED, "conversion"),
        ],
    )
    def test_category(self, code, category):
        assert code.category == category

    def test_every_code_has_a_message(self):
        assert set(ERROR_MESSAGES) == set(ErrorCode)


class TestBindwireError:
    def test_str_includes_error_id(self):
        err = BindwireError(ErrorCode.CHANNEL_UNKNOWN, {"channel": "count"})

        assert str(err) == "[BW-2001] No listener found for channel 'count'."
        assert err.error_id == "BW-2001"

    def test_missing_context_falls_back_to_template(self):
        err = BindwireError(ErrorCode.EXECUTOR_NOT_FOUND)

        assert err.message == ERROR_MESSAGES[ErrorCode.EXECUTOR_NOT_FOUND]

    def test_to_dict(self):
        err = BindwireError(ErrorCode.EXECUTOR_NOT_FOUND, {"executor": "sum"})

        assert err.to_dict() == {
            "error_id": "BW-2002",
            "code": 2002,
            "category": "lookup",
            "message": "Executor 'sum' not found.",
            "context": {"executor": "sum"},
        }

    def test_is_an_exception(self):
        with pytest.raises(BindwireError):
            raise BindwireError(ErrorCode.INVOCATION_FAILED)


class TestFactories:
    def test_registration_error_names_type(self):
        cause = ValueError("bad")

        err = registration_error(ErrorCode.REGISTRATION_FAILED, Widget(), detail="bad", cause=cause)

        assert err.context["owner"] == f"{__name__}.Widget"
        assert err.cause is cause
        assert "Widget" in str(err)

    def test_registration_error_extra_context(self):
        err = registration_error(ErrorCode.PROXY_NULL_VALUE, Widget, slot="value", channel="c")

        assert err.message == (
            f"Cannot create proxy for a null slot 'value' in '{__name__}.Widget' (channel 'c')."
        )

    def test_lookup_error(self):
        err = lookup_error(ErrorCode.EXECUTOR_NAME_MISSING, channel="count")

        assert err.context == {"channel": "count", "executor": ""}
        assert "count" in err.message

    def test_config_error(self):
        err = config_error(ErrorCode.PARAMETER_TYPE_MISMATCH, "sum", detail="wrong")

        assert err.message == "Parameter type mismatch for executor 'sum': wrong"

    def test_invocation_error_describes_cause(self):
        err = invocation_error(ErrorCode.INVOCATION_FAILED, executor="sum", cause=KeyError("k"))

        assert err.message == "Failed to invoke executor 'sum': KeyError: 'k'"
        assert isinstance(err.cause, KeyError)

    def test_conversion_error(self):
        err = conversion_error(
            ErrorCode.CONVERSION_FAILED, position=1, value="x", target="int", executor="e"
        )

        assert err.message == "Cannot convert argument 1 ('x') to int."
