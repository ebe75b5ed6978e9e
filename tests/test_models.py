"""Tests for twinlayer/models.py - wire shapes and lossless round trips."""

import json

import pytest
from pydantic import ValidationError

from twinlayer.game_engine import GameEngine
from twinlayer.models import (
    Board,
    BoardLayer,
    CaptureAssignment,
    CellState,
    GameState,
    Move,
    MoveResult,
    MoveType,
    Player,
    Position,
    Winner,
)


class TestGameStateSerialization:
    def test_round_trip_initial_state(self):
        state = GameEngine.create_initial_state()
        restored = GameState.model_validate_json(state.model_dump_json(by_alias=True))
        assert restored == state

    def test_round_trip_after_play(self, state_factory):
        state = state_factory(
            outer=["..F.", "..S.", "....", "...."],
            inner=["S..", "...", "..F"],
            placements=(2, 2),
            turn_count=4,
            consecutive_passes=0,
        )
        state = state.model_copy(update={"last_action": "second placed at inner(1,1)"})
        wire = state.model_dump_json(by_alias=True)
        restored = GameState.model_validate_json(wire)
        assert restored == state
        assert restored.model_dump_json(by_alias=True) == wire

    def test_wire_uses_camel_case(self):
        data = json.loads(
            GameEngine.create_initial_state().model_dump_json(by_alias=True)
        )
        assert data["activePlayer"] == "first"
        assert data["placementsRemaining"] == {"first": 4, "second": 4}
        assert data["winner"] is None
        assert data["phase"] == "placing"
        assert data["board"]["outer"]["cells"][0] == ["empty"] * 4

    def test_decided_state_round_trip(self, moving_state_factory):
        state = moving_state_factory(winner=Winner.DRAW, consecutive_passes=2)
        restored = GameState.model_validate_json(state.model_dump_json(by_alias=True))
        assert restored.winner == Winner.DRAW
        assert restored.is_over

    def test_board_shape_is_validated(self):
        with pytest.raises(ValidationError):
            BoardLayer(width=3, height=3, cells=[[CellState.EMPTY] * 3] * 2)
        good_inner = BoardLayer(width=3, height=3, cells=[[CellState.EMPTY] * 3 for _ in range(3)])
        with pytest.raises(ValidationError):
            Board(outer=good_inner, inner=good_inner)


class TestMoveModel:
    def test_step_wire_shape(self):
        move = Move.step(
            Position.outer(1, 1),
            Position.inner(0, 0),
            capture_assignment=[
                CaptureAssignment(from_pos=Position.inner(1, 0), to=Position.outer(3, 3))
            ],
        )
        data = json.loads(move.model_dump_json(by_alias=True))
        assert data["type"] == "step"
        assert data["from"] == {"layer": "outer", "x": 1, "y": 1}
        assert data["captureAssignment"][0]["from"] == {"layer": "inner", "x": 1, "y": 0}
        assert Move.model_validate(data) == move

    def test_move_fields_are_checked(self):
        with pytest.raises(ValidationError):
            Move(type=MoveType.PLACE)
        with pytest.raises(ValidationError):
            Move(type=MoveType.STEP, to=Position.outer(0, 0))
        with pytest.raises(ValidationError):
            Move(type=MoveType.PASS, to=Position.outer(0, 0))

    def test_with_capture_assignment_keeps_base_move(self):
        base = Move.place(Position.outer(2, 2))
        assignment = [CaptureAssignment(from_pos=Position.outer(2, 1), to=Position.inner(0, 0))]
        move = base.with_capture_assignment(assignment)
        assert move.to == base.to
        assert move.capture_assignment == assignment
        assert base.capture_assignment is None

    def test_positions_compare_by_value(self):
        assert Position.outer(1, 2) == Position(layer="outer", x=1, y=2)
        assert Position.outer(1, 2) != Position.inner(1, 2)
        assert len({Position.outer(0, 0), Position.outer(0, 0)}) == 1

    def test_opponent(self):
        assert Player.FIRST.opponent == Player.SECOND
        assert Player.SECOND.opponent == Player.FIRST


class TestMoveResultShape:
    def test_capture_required_wire_shape(self, state_factory):
        state = state_factory(outer=["..F.", "..S.", "....", "...."], placements=(3, 3))
        result = GameEngine.submit_move(state, Move.place(Position.outer(2, 2)))
        data = json.loads(result.model_dump_json(by_alias=True))
        assert data["outcome"] == "capture_required"
        assert data["state"] is None
        assert data["rejection"]["kind"] == "CaptureRequired"
        assert data["rejection"]["requiredCapture"] == [{"layer": "outer", "x": 2, "y": 1}]
        assert MoveResult.model_validate(data) == result
