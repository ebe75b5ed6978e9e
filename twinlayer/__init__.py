"""Rules engine for Twinlayer, a two-layer placement and capture game.

    from twinlayer import GameEngine, Move, Position, Layer

    state = GameEngine.create_initial_state()
    result = GameEngine.submit_move(
        state, Move.place(Position(layer=Layer.OUTER, x=1, y=1))
    )
    if result.success:
        state = result.state

Layout:
- models.py: pydantic wire models (GameState, Move, MoveResult, ...)
- board_manager.py: grid access and cross-layer geometry
- game_engine.py: move legality, captures, win/draw detection
- errors.py: exception hierarchy
- config.py: TWINLAYER_* environment settings
- main.py: stateless FastAPI rules service
"""

from .board_manager import BoardManager
from .game_engine import GameEngine
from .models import (
    CaptureAssignment,
    CellState,
    GamePhase,
    GameState,
    Layer,
    Move,
    MoveOutcome,
    MoveRejection,
    MoveResult,
    MoveType,
    Player,
    Position,
    RejectionKind,
    RuleSet,
    Winner,
)

__all__ = [
    "BoardManager",
    "CaptureAssignment",
    "CellState",
    "GameEngine",
    "GamePhase",
    "GameState",
    "Layer",
    "Move",
    "MoveOutcome",
    "MoveRejection",
    "MoveResult",
    "MoveType",
    "Player",
    "Position",
    "RejectionKind",
    "RuleSet",
    "Winner",
]
