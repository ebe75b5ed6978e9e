"""
Shared pytest fixtures for twinlayer tests.

Boards are drawn as lists of row strings, top row first:
``.`` empty, ``F`` first, ``S`` second.

    state = state_factory(
        outer=["..F.", "..S.", "....", "...."],
        placements=(3, 3),
        turn_count=2,
    )
"""

from pathlib import Path
import sys
from typing import Callable, Optional, Sequence, Tuple

import pytest

# Ensure the repository root is on sys.path so `import twinlayer` works when
# running pytest without an editable install.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from twinlayer.board_manager import BoardManager  # noqa: E402
from twinlayer.models import (  # noqa: E402
    BOARD_SIZES,
    Board,
    BoardLayer,
    CellState,
    GamePhase,
    GameState,
    Layer,
    Player,
    Winner,
)

_SYMBOLS = {
    ".": CellState.EMPTY,
    "F": CellState.FIRST,
    "S": CellState.SECOND,
}


def parse_layer(layer: Layer, rows: Optional[Sequence[str]]) -> BoardLayer:
    width, height = BOARD_SIZES[layer]
    if rows is None:
        return BoardManager.create_layer(layer)
    assert len(rows) == height, f"{layer.value} needs {height} rows"
    cells = []
    for row in rows:
        assert len(row) == width, f"{layer.value} rows are {width} wide"
        cells.append([_SYMBOLS[ch] for ch in row])
    return BoardLayer(width=width, height=height, cells=cells)


def build_state(
    outer: Optional[Sequence[str]] = None,
    inner: Optional[Sequence[str]] = None,
    phase: GamePhase = GamePhase.PLACING,
    active: Player = Player.FIRST,
    placements: Tuple[int, int] = (4, 4),
    turn_count: int = 1,
    consecutive_passes: int = 0,
    winner: Optional[Winner] = None,
) -> GameState:
    return GameState(
        board=Board(
            outer=parse_layer(Layer.OUTER, outer),
            inner=parse_layer(Layer.INNER, inner),
        ),
        phase=phase,
        activePlayer=active,
        winner=winner,
        placementsRemaining={
            Player.FIRST: placements[0],
            Player.SECOND: placements[1],
        },
        turnCount=turn_count,
        consecutivePasses=consecutive_passes,
    )


@pytest.fixture
def state_factory() -> Callable[..., GameState]:
    """Factory for GameState instances drawn from row strings."""
    return build_state


@pytest.fixture
def moving_state_factory() -> Callable[..., GameState]:
    """Factory for moving-phase states (no placements left)."""

    def _create(**kwargs) -> GameState:
        kwargs.setdefault("phase", GamePhase.MOVING)
        kwargs.setdefault("placements", (0, 0))
        kwargs.setdefault("turn_count", 8)
        return build_state(**kwargs)

    return _create
