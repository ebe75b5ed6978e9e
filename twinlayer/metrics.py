"""Prometheus metrics for the Twinlayer rules service.

Counters are recorded by the HTTP layer only; the engine itself stays a
pure function and never touches them.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram

from .models import MoveResult, MoveType


MOVES_SUBMITTED: Final[Counter] = Counter(
    "twinlayer_moves_submitted_total",
    "Total number of submitted moves, labeled by move_type and outcome.",
    labelnames=("move_type", "outcome"),
)

MOVE_REJECTIONS: Final[Counter] = Counter(
    "twinlayer_move_rejections_total",
    "Total number of rejected moves, labeled by rejection kind.",
    labelnames=("kind",),
)

GAMES_DECIDED: Final[Counter] = Counter(
    "twinlayer_games_decided_total",
    "Total number of moves that decided a game, labeled by result.",
    labelnames=("result",),
)

SUBMIT_LATENCY: Final[Histogram] = Histogram(
    "twinlayer_submit_move_latency_seconds",
    "Latency of /rules/submit_move requests in seconds.",
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.05, 0.1),
)


def observe_move_result(move_type: MoveType, result: MoveResult) -> None:
    """Record one ``GameEngine.submit_move`` result."""
    MOVES_SUBMITTED.labels(
        move_type=move_type.value, outcome=result.outcome.value
    ).inc()
    if result.rejection is not None:
        MOVE_REJECTIONS.labels(kind=result.rejection.kind.value).inc()
    elif result.state is not None and result.state.is_over:
        GAMES_DECIDED.labels(result=result.state.winner.value).inc()
