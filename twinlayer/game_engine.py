"""Core rules engine for Twinlayer.

``GameEngine.submit_move`` is the only way a game advances. It is a pure
function of ``(state, move, rules)``: the caller's ``GameState`` is never
mutated, every illegal move comes back as a ``MoveRejection`` value, and
nothing is remembered between calls.

Captures are a two-step exchange. A place/step that sandwiches opponent
pieces is first answered with ``CaptureRequired`` and the exact set of
captured positions; the caller resubmits the same base move carrying a
``captureAssignment`` that sends each captured piece to an empty cell.
"""

from __future__ import annotations

from typing import List, Optional

from .board_manager import BoardManager
from .core.logging_config import get_logger
from .errors import InvalidStateError, RulesViolationError
from .models import (
    DEFAULT_RULES,
    MAX_PIECES_PER_PLAYER,
    Board,
    CaptureAssignment,
    CaptureRule,
    CellState,
    GamePhase,
    GameState,
    Layer,
    Move,
    MoveOutcome,
    MoveRejection,
    MoveResult,
    MovementRule,
    MoveType,
    Player,
    Position,
    RejectionKind,
    RuleSet,
    WinRule,
    Winner,
)

logger = get_logger(__name__)

# Capture sweep walks all eight directions; line checks only need one
# direction per axis.
SWEEP_DIRECTIONS = (
    (1, 0), (-1, 0), (0, 1), (0, -1),
    (1, 1), (1, -1), (-1, 1), (-1, -1),
)
LINE_DIRECTIONS = ((1, 0), (0, 1), (1, 1), (1, -1))
LINE_LENGTH = 3


def _reject(
    kind: RejectionKind,
    message: str,
    required_capture: Optional[List[Position]] = None,
) -> RulesViolationError:
    return RulesViolationError(
        message, kind=kind, required_capture=required_capture
    )


def _cell_at(board: Board, layer: Layer, x: int, y: int) -> Optional[CellState]:
    """Cell at ``(layer, x, y)`` or None when off the layer."""
    position = Position(layer=layer, x=x, y=y)
    if not BoardManager.is_valid_position(position):
        return None
    return BoardManager.get_cell(board, position)


class GameEngine:
    """Twinlayer rules engine.

    All methods are static; ``rules`` selects the capture, win and
    movement variants and defaults to the sweep / exact-three /
    adjacent-only rule set.
    """

    @staticmethod
    def create_initial_state(
        starting_player: Player = Player.FIRST,
    ) -> GameState:
        """Empty board, placing phase, four pieces in hand each."""
        return GameState(
            board=BoardManager.create_board(),
            phase=GamePhase.PLACING,
            activePlayer=starting_player,
            winner=None,
            placementsRemaining={
                Player.FIRST: MAX_PIECES_PER_PLAYER,
                Player.SECOND: MAX_PIECES_PER_PLAYER,
            },
            turnCount=0,
            consecutivePasses=0,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    @staticmethod
    def submit_move(
        state: GameState, move: Move, rules: RuleSet = DEFAULT_RULES
    ) -> MoveResult:
        """Validate and apply ``move``; never raises for illegal moves."""
        try:
            next_state = GameEngine.apply_move(state, move, rules)
        except RulesViolationError as e:
            logger.debug(
                "Rejected %s by %s: %s",
                move.type.value,
                state.active_player.value,
                e,
            )
            outcome = (
                MoveOutcome.CAPTURE_REQUIRED
                if e.kind == RejectionKind.CAPTURE_REQUIRED
                else MoveOutcome.REJECTED
            )
            return MoveResult(
                outcome=outcome,
                rejection=MoveRejection(
                    kind=e.kind,
                    message=e.message,
                    requiredCapture=e.required_capture,
                ),
            )

        if next_state.is_over:
            logger.info(
                "Game decided: %s after %d turns",
                next_state.winner.value,
                next_state.turn_count,
            )
        return MoveResult(outcome=MoveOutcome.COMMITTED, state=next_state)

    @staticmethod
    def apply_move(
        state: GameState, move: Move, rules: RuleSet = DEFAULT_RULES
    ) -> GameState:
        """Return the successor of ``state`` after ``move``.

        Raises:
            RulesViolationError: if the move is illegal or a capture
                assignment is missing or malformed.
        """
        if state.is_over:
            raise _reject(
                RejectionKind.GAME_ALREADY_ENDED, "The game is already decided"
            )

        if move.type == MoveType.PASS:
            return GameEngine._apply_pass(state, rules)

        player = state.active_player
        board = BoardManager.clone_board(state.board)
        placements = dict(state.placements_remaining)

        if move.type == MoveType.PLACE:
            GameEngine._place(state, board, move.to)
            placements[player] -= 1
            action = f"{player.value} placed at {GameEngine.describe_position(move.to)}"
        else:
            GameEngine._step(state, board, move.from_pos, move.to, rules)
            action = (
                f"{player.value} moved "
                f"{GameEngine.describe_position(move.from_pos)} -> "
                f"{GameEngine.describe_position(move.to)}"
            )

        required = GameEngine.find_required_captures(
            board, move.to, player, rules
        )
        if required:
            GameEngine.validate_capture_assignment(
                board, required, move.capture_assignment
            )
            GameEngine._relocate(board, move.capture_assignment)
            action = f"{action} / displaced {len(required)}"

        phase = state.phase
        if phase == GamePhase.PLACING and all(
            remaining == 0 for remaining in placements.values()
        ):
            phase = GamePhase.MOVING

        winner = None
        if GameEngine.find_winning_line(
            board, move.to.layer, player, rules, through=move.to
        ):
            winner = Winner(player.value)
            action = f"{player.value} completed a line of three"

        return state.model_copy(
            update={
                "board": board,
                "phase": phase,
                "active_player": player if winner else player.opponent,
                "winner": winner,
                "placements_remaining": placements,
                "turn_count": state.turn_count + 1,
                "consecutive_passes": 0,
                "last_action": action,
            }
        )

    # ------------------------------------------------------------------
    # Per-move legality
    # ------------------------------------------------------------------

    @staticmethod
    def _place(state: GameState, board: Board, to: Position) -> None:
        player = state.active_player
        if state.phase != GamePhase.PLACING:
            raise _reject(
                RejectionKind.WRONG_PHASE,
                "Pieces can only be placed during the placing phase",
            )
        if state.placements_remaining.get(player, 0) <= 0:
            raise _reject(
                RejectionKind.NO_PLACEMENTS_REMAINING,
                f"{player.value} has no pieces left to place",
            )
        if BoardManager.get_cell(board, to) != CellState.EMPTY:
            raise _reject(RejectionKind.CELL_OCCUPIED, "Target cell is occupied")
        if state.turn_count == 0 and not BoardManager.is_outer_central_cell(to):
            raise _reject(
                RejectionKind.FIRST_MOVE_RESTRICTED,
                "The first piece must go on the central 2x2 of the outer layer",
            )
        BoardManager.set_cell(board, to, CellState.of(player))

    @staticmethod
    def _step(
        state: GameState,
        board: Board,
        from_pos: Position,
        to: Position,
        rules: RuleSet,
    ) -> None:
        player = state.active_player
        if state.phase != GamePhase.MOVING:
            raise _reject(
                RejectionKind.WRONG_PHASE,
                "Pieces can only be moved during the moving phase",
            )
        source = BoardManager.get_cell(board, from_pos)
        BoardManager.require_valid_position(to)
        if source == CellState.EMPTY:
            raise _reject(RejectionKind.CELL_EMPTY, "Source cell is empty")
        if source != CellState.of(player):
            raise _reject(
                RejectionKind.NOT_OWN_PIECE,
                f"Source cell does not hold a {player.value} piece",
            )
        if BoardManager.get_cell(board, to) != CellState.EMPTY:
            raise _reject(
                RejectionKind.CELL_OCCUPIED, "Destination cell is occupied"
            )
        if from_pos.layer == to.layer:
            raise _reject(
                RejectionKind.NOT_ADJACENT_CROSS_LAYER,
                "A step must change layer",
            )
        if rules.movement_rule == MovementRule.ADJACENT and not (
            BoardManager.is_adjacent(from_pos, to)
        ):
            raise _reject(
                RejectionKind.NOT_ADJACENT_CROSS_LAYER,
                "A step must land on a neighbouring cell of the other layer",
            )
        BoardManager.set_cell(board, from_pos, CellState.EMPTY)
        BoardManager.set_cell(board, to, source)

    @staticmethod
    def _apply_pass(state: GameState, rules: RuleSet) -> GameState:
        player = state.active_player
        if state.phase != GamePhase.MOVING:
            raise _reject(
                RejectionKind.WRONG_PHASE,
                "Passing is only possible during the moving phase",
            )
        if GameEngine.has_legal_step(state, player, rules):
            raise _reject(
                RejectionKind.PASS_NOT_ALLOWED,
                f"{player.value} still has a legal step",
            )

        passes = state.consecutive_passes + 1
        if passes >= 2:
            winner = Winner.DRAW
            action = "both players passed; draw"
        else:
            winner = None
            action = f"{player.value} passed"

        return state.model_copy(
            update={
                "board": BoardManager.clone_board(state.board),
                "placements_remaining": dict(state.placements_remaining),
                "active_player": player if winner else player.opponent,
                "winner": winner,
                "consecutive_passes": passes,
                "last_action": action,
            }
        )

    # ------------------------------------------------------------------
    # Captures
    # ------------------------------------------------------------------

    @staticmethod
    def find_required_captures(
        board: Board,
        target: Position,
        player: Player,
        rules: RuleSet = DEFAULT_RULES,
    ) -> List[Position]:
        """Opponent pieces captured by ``player`` landing on ``target``.

        ``board`` must already hold the landed piece. Returned in
        ``BoardManager.sort_positions`` order.
        """
        if rules.capture_rule == CaptureRule.TRIPLET:
            captured = GameEngine._triplet_captures(board, player)
        else:
            captured = GameEngine._sweep_captures(board, target, player)
        return BoardManager.sort_positions(captured)

    @staticmethod
    def _sweep_captures(
        board: Board, target: Position, player: Player
    ) -> set[Position]:
        own = CellState.of(player)
        opponent = CellState.of(player.opponent)
        captured: set[Position] = set()

        for dx, dy in SWEEP_DIRECTIONS:
            run: list[Position] = []
            x, y = target.x + dx, target.y + dy
            while True:
                cell = _cell_at(board, target.layer, x, y)
                if cell is None or cell == CellState.EMPTY:
                    # Unterminated run.
                    break
                if cell == own:
                    captured.update(run)
                    break
                if cell == opponent:
                    run.append(Position(layer=target.layer, x=x, y=y))
                x += dx
                y += dy
        return captured

    @staticmethod
    def _triplet_captures(board: Board, player: Player) -> set[Position]:
        own = CellState.of(player)
        opponent = CellState.of(player.opponent)
        captured: set[Position] = set()

        for layer in Layer:
            for start in BoardManager.list_positions(layer):
                for dx, dy in LINE_DIRECTIONS:
                    cells = [
                        _cell_at(board, layer, start.x + dx * i, start.y + dy * i)
                        for i in range(3)
                    ]
                    if cells == [own, opponent, own]:
                        captured.add(
                            Position(layer=layer, x=start.x + dx, y=start.y + dy)
                        )
        return captured

    @staticmethod
    def validate_capture_assignment(
        board: Board,
        required: List[Position],
        assignment: Optional[List[CaptureAssignment]],
    ) -> None:
        """Check ``assignment`` is a bijection from ``required`` onto empty cells.

        Destinations are checked against ``board`` as it stands after the
        landing, before any relocation.

        Raises:
            RulesViolationError: ``CaptureRequired`` when the assignment is
                missing or has the wrong size, ``InvalidCaptureAssignment``
                when it is malformed. Both carry ``required``.
        """
        if not assignment or len(assignment) != len(required):
            raise _reject(
                RejectionKind.CAPTURE_REQUIRED,
                f"{len(required)} captured piece(s) need a destination",
                required_capture=list(required),
            )

        def invalid(message: str) -> RulesViolationError:
            return _reject(
                RejectionKind.INVALID_CAPTURE_ASSIGNMENT,
                message,
                required_capture=list(required),
            )

        required_set = set(required)
        sources: set[Position] = set()
        destinations: set[Position] = set()
        for entry in assignment:
            if entry.from_pos not in required_set:
                raise invalid(
                    f"{GameEngine.describe_position(entry.from_pos)} is not a captured piece"
                )
            if entry.from_pos in sources:
                raise invalid(
                    f"{GameEngine.describe_position(entry.from_pos)} is assigned twice"
                )
            if not BoardManager.is_valid_position(entry.to):
                raise invalid("Capture destination is outside the board")
            if BoardManager.get_cell(board, entry.to) != CellState.EMPTY:
                raise invalid(
                    f"{GameEngine.describe_position(entry.to)} is not empty"
                )
            if entry.to in destinations:
                raise invalid(
                    f"{GameEngine.describe_position(entry.to)} is used as a destination twice"
                )
            sources.add(entry.from_pos)
            destinations.add(entry.to)

    @staticmethod
    def _relocate(board: Board, assignment: List[CaptureAssignment]) -> None:
        for entry in assignment:
            piece = BoardManager.get_cell(board, entry.from_pos)
            BoardManager.set_cell(board, entry.from_pos, CellState.EMPTY)
            BoardManager.set_cell(board, entry.to, piece)

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    @staticmethod
    def find_winning_line(
        board: Board,
        layer: Layer,
        player: Player,
        rules: RuleSet = DEFAULT_RULES,
        through: Optional[Position] = None,
    ) -> Optional[List[Position]]:
        """First line of three ``player`` cells on ``layer``, or None.

        Under ``WinRule.EXACT`` a run that continues past either end
        (four or more in a row) does not count. When ``through`` is given
        only lines containing that cell are considered.
        """
        own = CellState.of(player)
        for start in BoardManager.list_positions(layer):
            for dx, dy in LINE_DIRECTIONS:
                line = [
                    Position(layer=layer, x=start.x + dx * i, y=start.y + dy * i)
                    for i in range(LINE_LENGTH)
                ]
                if through is not None and through not in line:
                    continue
                if any(
                    _cell_at(board, layer, p.x, p.y) != own for p in line
                ):
                    continue
                if rules.win_rule == WinRule.EXACT:
                    before = _cell_at(board, layer, start.x - dx, start.y - dy)
                    after = _cell_at(
                        board,
                        layer,
                        start.x + dx * LINE_LENGTH,
                        start.y + dy * LINE_LENGTH,
                    )
                    if before == own or after == own:
                        continue
                return line
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def _step_destinations(
        board: Board, from_pos: Position, rules: RuleSet
    ) -> set[Position]:
        if rules.movement_rule == MovementRule.ANY:
            other = Layer.INNER if from_pos.layer == Layer.OUTER else Layer.OUTER
            return BoardManager.empty_positions(board, other)
        return {
            pos for pos in BoardManager.adjacent_positions(from_pos)
            if BoardManager.get_cell(board, pos) == CellState.EMPTY
        }

    @staticmethod
    def legal_destinations(
        state: GameState, from_pos: Position, rules: RuleSet = DEFAULT_RULES
    ) -> set[Position]:
        """Cells the active player's piece at ``from_pos`` can step to.

        Empty when the game is decided, the phase is not ``moving``, or
        ``from_pos`` does not hold an active-player piece.
        """
        if state.is_over or state.phase != GamePhase.MOVING:
            return set()
        if not BoardManager.is_valid_position(from_pos):
            return set()
        if BoardManager.get_cell(state.board, from_pos) != CellState.of(
            state.active_player
        ):
            return set()
        return GameEngine._step_destinations(state.board, from_pos, rules)

    @staticmethod
    def has_legal_step(
        state: GameState, player: Player, rules: RuleSet = DEFAULT_RULES
    ) -> bool:
        """True if any ``player`` piece has an empty cell to step to."""
        return any(
            GameEngine._step_destinations(state.board, pos, rules)
            for pos in BoardManager.player_positions(state.board, player)
        )

    @staticmethod
    def get_valid_moves(
        state: GameState, rules: RuleSet = DEFAULT_RULES
    ) -> List[Move]:
        """Every bare legal move for the active player.

        Moves are listed without capture assignments; a listed move may
        still be answered with ``CaptureRequired``.
        """
        if state.is_over:
            return []

        player = state.active_player
        if state.phase == GamePhase.PLACING:
            if state.placements_remaining.get(player, 0) <= 0:
                return []
            targets = BoardManager.all_empty_positions(state.board)
            if state.turn_count == 0:
                targets = [
                    pos for pos in targets
                    if BoardManager.is_outer_central_cell(pos)
                ]
            return [Move.place(pos) for pos in targets]

        moves = [
            Move.step(from_pos, to)
            for from_pos in BoardManager.player_positions(state.board, player)
            for to in BoardManager.sort_positions(
                GameEngine._step_destinations(state.board, from_pos, rules)
            )
        ]
        return moves or [Move.pass_turn()]

    @staticmethod
    def check_invariants(state: GameState) -> None:
        """Reject states normal play cannot reach.

        Raises:
            InvalidStateError: if a player has more than four pieces in
                total, placements remain in the moving phase, or the
                counters are negative.
        """
        for player in Player:
            remaining = state.placements_remaining.get(player)
            if remaining is None or remaining < 0:
                raise InvalidStateError(
                    f"placementsRemaining for {player.value} is missing or negative"
                )
            on_board = BoardManager.count_pieces(state.board, player)
            if on_board + remaining > MAX_PIECES_PER_PLAYER:
                raise InvalidStateError(
                    f"{player.value} owns more than {MAX_PIECES_PER_PLAYER} pieces",
                    context={"on_board": on_board, "remaining": remaining},
                )
            if state.phase == GamePhase.MOVING and remaining != 0:
                raise InvalidStateError(
                    "moving phase with placements remaining",
                    context={"player": player.value, "remaining": remaining},
                )
        if state.turn_count < 0 or state.consecutive_passes < 0:
            raise InvalidStateError("turn counters must be non-negative")

    @staticmethod
    def describe_position(position: Position) -> str:
        """One-based label used in ``lastAction`` text, e.g. ``outer(2,3)``."""
        return f"{position.layer.value}({position.x + 1},{position.y + 1})"
