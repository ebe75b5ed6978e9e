"""Environment-driven settings for the Twinlayer rules service.

Every setting is read with ``os.getenv`` under the ``TWINLAYER_`` prefix:

    TWINLAYER_LOG_LEVEL        logging level name (default INFO)
    TWINLAYER_STARTING_PLAYER  first | second (default first)
    TWINLAYER_CAPTURE_RULE     sweep | triplet (default sweep)
    TWINLAYER_WIN_RULE         exact | at_least (default exact)
    TWINLAYER_MOVEMENT_RULE    adjacent | any (default adjacent)
    TWINLAYER_CORS_ORIGINS     comma separated origins (default *)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, TypeVar

from .errors import ConfigurationError
from .models import CaptureRule, MovementRule, Player, RuleSet, WinRule

_E = TypeVar("_E", bound=Enum)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _parse_enum(
    env: Mapping[str, str], name: str, enum_cls: type[_E], default: _E
) -> _E:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"{name}={raw!r} is not one of: {allowed}", setting=name
        ) from None


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    starting_player: Player = Player.FIRST
    rules: RuleSet = field(default_factory=RuleSet)
    cors_origins: tuple[str, ...] = ("*",)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ``).

    Raises:
        ConfigurationError: on an unknown level, player or rule name.
    """
    if env is None:
        env = os.environ

    log_level = env.get("TWINLAYER_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigurationError(
            f"TWINLAYER_LOG_LEVEL={log_level!r} is not a logging level",
            setting="TWINLAYER_LOG_LEVEL",
        )

    rules = RuleSet(
        capture_rule=_parse_enum(
            env, "TWINLAYER_CAPTURE_RULE", CaptureRule, CaptureRule.SWEEP
        ),
        win_rule=_parse_enum(env, "TWINLAYER_WIN_RULE", WinRule, WinRule.EXACT),
        movement_rule=_parse_enum(
            env,
            "TWINLAYER_MOVEMENT_RULE",
            MovementRule,
            MovementRule.ADJACENT,
        ),
    )

    origins = tuple(
        origin.strip()
        for origin in env.get("TWINLAYER_CORS_ORIGINS", "*").split(",")
        if origin.strip()
    )

    return Settings(
        log_level=log_level,
        starting_player=_parse_enum(
            env, "TWINLAYER_STARTING_PLAYER", Player, Player.FIRST
        ),
        rules=rules,
        cors_origins=origins or ("*",),
    )
