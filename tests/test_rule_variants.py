"""Tests for the alternate capture and movement rule variants."""

import pytest

from twinlayer.game_engine import GameEngine
from twinlayer.models import (
    CaptureRule,
    Move,
    MoveOutcome,
    MovementRule,
    Player,
    Position,
    RejectionKind,
    RuleSet,
)

TRIPLET = RuleSet(capture_rule=CaptureRule.TRIPLET)
ANYWHERE = RuleSet(movement_rule=MovementRule.ANY)


class TestTripletCapture:
    def test_simple_sandwich_matches_sweep(self, state_factory):
        state = state_factory(outer=["....", "FS..", "....", "...."], placements=(3, 3))
        move = Move.place(Position.outer(2, 1))
        sweep = GameEngine.submit_move(state, move)
        triplet = GameEngine.submit_move(state, move, TRIPLET)
        assert sweep.required_capture == [Position.outer(1, 1)]
        assert triplet.required_capture == [Position.outer(1, 1)]

    def test_long_run_is_not_a_triplet(self, state_factory):
        state = state_factory(outer=["FSS.", "....", "....", "...."], placements=(3, 2))
        move = Move.place(Position.outer(3, 0))
        assert GameEngine.submit_move(state, move).outcome == MoveOutcome.CAPTURE_REQUIRED
        assert GameEngine.submit_move(state, move, TRIPLET).success

    def test_triplet_scans_whole_board(self, state_factory):
        state = state_factory(
            outer=["....", "....", "....", "...."],
            inner=["FSF", "...", "..."],
            placements=(2, 3),
        )
        move = Move.place(Position.outer(3, 3))
        assert GameEngine.submit_move(state, move).success
        assert GameEngine.submit_move(state, move, TRIPLET).required_capture == [
            Position.inner(1, 0)
        ]


class TestAnywhereMovement:
    def _state(self, moving_state_factory):
        return moving_state_factory(
            outer=["F...", "....", "....", "...."], inner=["S..", "...", "..."]
        )

    def test_far_step_only_legal_under_variant(self, moving_state_factory):
        state = self._state(moving_state_factory)
        move = Move.step(Position.outer(0, 0), Position.inner(2, 2))
        assert GameEngine.submit_move(state, move).rejection.kind == (
            RejectionKind.NOT_ADJACENT_CROSS_LAYER
        )
        assert GameEngine.submit_move(state, move, ANYWHERE).success

    def test_same_layer_still_illegal(self, moving_state_factory):
        state = self._state(moving_state_factory)
        result = GameEngine.submit_move(
            state, Move.step(Position.outer(0, 0), Position.outer(3, 3)), ANYWHERE
        )
        assert result.rejection.kind == RejectionKind.NOT_ADJACENT_CROSS_LAYER

    def test_destinations_and_blocking(self, moving_state_factory):
        state = self._state(moving_state_factory)
        assert not GameEngine.has_legal_step(state, Player.FIRST)
        assert GameEngine.has_legal_step(state, Player.FIRST, ANYWHERE)
        assert len(GameEngine.legal_destinations(state, Position.outer(0, 0), ANYWHERE)) == 8

    @pytest.mark.parametrize("rules", [RuleSet(), ANYWHERE])
    def test_pass_follows_variant(self, moving_state_factory, rules):
        state = self._state(moving_state_factory)
        result = GameEngine.submit_move(state, Move.pass_turn(), rules)
        if rules.movement_rule == MovementRule.ANY:
            assert result.rejection.kind == RejectionKind.PASS_NOT_ALLOWED
        else:
            assert result.success
