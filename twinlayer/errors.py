"""
Twinlayer Error Hierarchy

All custom exceptions inherit from TwinlayerError for easy catching and
filtering.

Rules violations are raised inside the engine and converted to
``MoveRejection`` values at the ``GameEngine.submit_move`` boundary, so
callers of ``submit_move`` never see them as exceptions.

Usage:
    from twinlayer.errors import RulesViolationError

    try:
        next_state = GameEngine.apply_move(state, move)
    except RulesViolationError as e:
        logger.warning(f"Invalid move: {e.message}, kind: {e.kind.value}")
"""

from typing import Any, List, Optional

from .models import Position, RejectionKind

__all__ = [
    "ConfigurationError",
    "InvalidStateError",
    "OutOfBoundsError",
    "RulesViolationError",
    "TwinlayerError",
]


class TwinlayerError(Exception):
    """Base exception for every error the package raises.

    ``code`` is a stable identifier clients can branch on; subclasses set
    it as a class attribute. ``context`` holds the values behind the message
    and travels with the error into HTTP responses.
    """
    code: str = "TWINLAYER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or type(self).code
        self.context: dict[str, Any] = dict(context or {})

    def details(self) -> str:
        """``key=value`` pairs from ``context`` in insertion order."""
        return ", ".join(f"{key}={value}" for key, value in self.context.items())

    def __str__(self) -> str:
        details = self.details()
        text = f"[{self.code}] {self.message}"
        return f"{text} ({details})" if details else text

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(TwinlayerError):
    """Move rejected by the game rules.

    Attributes:
        kind: Rejection category surfaced to callers
        required_capture: Positions awaiting a capture destination, set for
            ``CaptureRequired`` and ``InvalidCaptureAssignment``
    """
    code: str = "RULES_VIOLATION"

    def __init__(
        self,
        message: str,
        kind: RejectionKind,
        required_capture: Optional[List[Position]] = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.kind = kind
        self.required_capture = required_capture
        self.context["kind"] = kind.value

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.required_capture is not None:
            data["requiredCapture"] = [
                p.model_dump(mode="json") for p in self.required_capture
            ]
        return data


class OutOfBoundsError(RulesViolationError):
    """Position outside its layer's grid."""
    code: str = "OUT_OF_BOUNDS"

    def __init__(self, position: Position):
        super().__init__(
            f"{position.layer.value}({position.x},{position.y}) is outside the board",
            kind=RejectionKind.OUT_OF_BOUNDS,
            context={"position": position.to_key()},
        )
        self.position = position


class InvalidStateError(TwinlayerError):
    """Corrupted or unexpected game state.

    Raised when a state breaks an invariant that normal play cannot
    produce (e.g. more pieces on the board than a player owns).
    """
    code: str = "INVALID_STATE"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(TwinlayerError):
    """Invalid environment or runtime configuration."""
    code: str = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if setting:
            self.context["setting"] = setting
