"""Tests for twinlayer/errors.py."""

from twinlayer.errors import (
    InvalidStateError,
    OutOfBoundsError,
    RulesViolationError,
    TwinlayerError,
)
from twinlayer.models import Position, RejectionKind


def test_base_error_formatting():
    err = TwinlayerError("boom", context={"turn": 3})
    assert str(err) == "[TWINLAYER_ERROR] boom (turn=3)"
    assert err.to_dict() == {
        "code": "TWINLAYER_ERROR",
        "message": "boom",
        "context": {"turn": 3},
    }


def test_rules_violation_carries_kind_and_capture_set():
    err = RulesViolationError(
        "need destinations",
        kind=RejectionKind.CAPTURE_REQUIRED,
        required_capture=[Position.outer(2, 1)],
    )
    assert err.kind == RejectionKind.CAPTURE_REQUIRED
    data = err.to_dict()
    assert data["code"] == "RULES_VIOLATION"
    assert data["context"]["kind"] == "CaptureRequired"
    assert data["requiredCapture"] == [{"layer": "outer", "x": 2, "y": 1}]


def test_out_of_bounds_is_a_rules_violation():
    err = OutOfBoundsError(Position.inner(3, 0))
    assert isinstance(err, RulesViolationError)
    assert err.kind == RejectionKind.OUT_OF_BOUNDS
    assert err.position == Position.inner(3, 0)
    assert "inner(3,0)" in err.message


def test_invalid_state_code():
    assert InvalidStateError("bad").code == "INVALID_STATE"


def test_context_is_copied_and_code_overridable():
    context = {"setting": "TWINLAYER_WIN_RULE"}
    err = TwinlayerError("bad value", code="CUSTOM", context=context)
    err.context["extra"] = 1
    assert context == {"setting": "TWINLAYER_WIN_RULE"}
    assert err.code == "CUSTOM"
    assert TwinlayerError("plain").code == "TWINLAYER_ERROR"
    assert err.details() == "setting=TWINLAYER_WIN_RULE, extra=1"
    assert str(TwinlayerError("plain")) == "[TWINLAYER_ERROR] plain"
