"""Tests for error classification and HTTP status mapping."""

from __future__ import annotations

import pytest

from hydractl.api.errors import (
    ControlError,
    ErrorCode,
    classify,
    http_status_for,
)


class TestHttpStatusMapping:
    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (ErrorCode.UNAUTHENTICATED, 401),
            (ErrorCode.PERMISSION_DENIED, 403),
            (ErrorCode.UNIMPLEMENTED, 404),
            (ErrorCode.INVALID_ARGUMENT, 400),
            (ErrorCode.UNAVAILABLE, 503),
            (ErrorCode.UNKNOWN, 500),
        ],
    )
    def test_mapping(self, code: ErrorCode, status: int) -> None:
        assert http_status_for(code) == status

    def test_internal_maps_to_bad_request(self) -> None:
        assert http_status_for(ErrorCode.INTERNAL) == 400


class TestControlError:
    def test_carries_code_and_message(self) -> None:
        error = ControlError(ErrorCode.UNIMPLEMENTED, "unknown command GET foo")
        assert str(error) == "unknown command GET foo"
        assert error.code is ErrorCode.UNIMPLEMENTED

    def test_classify(self) -> None:
        assert classify(ControlError(ErrorCode.INTERNAL, "x")) is ErrorCode.INTERNAL
        assert classify(RuntimeError("boom")) is ErrorCode.UNKNOWN
