"""
Pydantic Models for Twinlayer Game State
Wire shapes use camelCase aliases so a whole GameState can be re-sent
between authority and clients after every committed move.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Tuple
from enum import Enum


class Layer(str, Enum):
    """Board layer enumeration"""
    OUTER = "outer"
    INNER = "inner"


class Player(str, Enum):
    """Player (side) enumeration"""
    FIRST = "first"
    SECOND = "second"

    @property
    def opponent(self) -> "Player":
        return Player.SECOND if self is Player.FIRST else Player.FIRST


class CellState(str, Enum):
    """Cell content enumeration"""
    EMPTY = "empty"
    FIRST = "first"
    SECOND = "second"

    @classmethod
    def of(cls, player: Player) -> "CellState":
        return cls(player.value)


class GamePhase(str, Enum):
    """Game phase enumeration"""
    PLACING = "placing"
    MOVING = "moving"


class Winner(str, Enum):
    """Decided result. An undecided game carries ``winner = None``."""
    FIRST = "first"
    SECOND = "second"
    DRAW = "draw"


class MoveType(str, Enum):
    """Move type enumeration"""
    PLACE = "place"
    STEP = "step"
    PASS = "pass"


class RejectionKind(str, Enum):
    """Reasons a submitted move is not committed."""
    WRONG_PHASE = "WrongPhase"
    OUT_OF_BOUNDS = "OutOfBounds"
    CELL_OCCUPIED = "CellOccupied"
    CELL_EMPTY = "CellEmpty"
    NOT_OWN_PIECE = "NotOwnPiece"
    NOT_ADJACENT_CROSS_LAYER = "NotAdjacentCrossLayer"
    FIRST_MOVE_RESTRICTED = "FirstMoveRestricted"
    PASS_NOT_ALLOWED = "PassNotAllowed"
    GAME_ALREADY_ENDED = "GameAlreadyEnded"
    CAPTURE_REQUIRED = "CaptureRequired"
    INVALID_CAPTURE_ASSIGNMENT = "InvalidCaptureAssignment"
    NO_PLACEMENTS_REMAINING = "NoPlacementsRemaining"


class MoveOutcome(str, Enum):
    """Top-level shape of a submit_move result."""
    COMMITTED = "committed"
    CAPTURE_REQUIRED = "capture_required"
    REJECTED = "rejected"


class CaptureRule(str, Enum):
    """Capture detection variants"""
    SWEEP = "sweep"
    TRIPLET = "triplet"


class WinRule(str, Enum):
    """Line-of-three variants"""
    EXACT = "exact"
    AT_LEAST = "at_least"


class MovementRule(str, Enum):
    """Step reachability variants"""
    ADJACENT = "adjacent"
    ANY = "any"


# (width, height) per layer. Layers are never resized.
BOARD_SIZES: Dict[Layer, Tuple[int, int]] = {
    Layer.OUTER: (4, 4),
    Layer.INNER: (3, 3),
}

MAX_PIECES_PER_PLAYER = 4


class Position(BaseModel):
    """Board position on one of the two layers"""
    layer: Layer
    x: int
    y: int

    class Config:
        frozen = True

    @classmethod
    def outer(cls, x: int, y: int) -> "Position":
        return cls(layer=Layer.OUTER, x=x, y=y)

    @classmethod
    def inner(cls, x: int, y: int) -> "Position":
        return cls(layer=Layer.INNER, x=x, y=y)

    def to_key(self) -> str:
        """Convert position to string key"""
        return f"{self.layer.value}:{self.x},{self.y}"


class BoardLayer(BaseModel):
    """Dense grid of cells, indexed ``cells[y][x]``"""
    width: int
    height: int
    cells: List[List[CellState]]

    @model_validator(mode="after")
    def _check_shape(self) -> "BoardLayer":
        if len(self.cells) != self.height or any(
            len(row) != self.width for row in self.cells
        ):
            raise ValueError(
                f"cells must be {self.height} rows of {self.width} cells"
            )
        return self


class Board(BaseModel):
    """Both layers of the board"""
    outer: BoardLayer
    inner: BoardLayer

    @model_validator(mode="after")
    def _check_sizes(self) -> "Board":
        for layer in Layer:
            grid = self.layer(layer)
            if (grid.width, grid.height) != BOARD_SIZES[layer]:
                raise ValueError(
                    f"{layer.value} layer must be "
                    f"{BOARD_SIZES[layer][0]}x{BOARD_SIZES[layer][1]}"
                )
        return self

    def layer(self, layer: Layer) -> BoardLayer:
        return self.outer if layer == Layer.OUTER else self.inner


class CaptureAssignment(BaseModel):
    """Destination chosen for one captured piece"""
    from_pos: Position = Field(alias="from")
    to: Position

    class Config:
        populate_by_name = True
        frozen = True


class Move(BaseModel):
    """Move representation.

    - ``place`` carries ``to``.
    - ``step`` carries ``from`` and ``to``.
    - ``pass`` carries neither.

    ``capture_assignment`` is only meaningful on place/step and is
    filled in when resubmitting a move that was answered with
    ``CaptureRequired``.
    """

    type: MoveType
    from_pos: Optional[Position] = Field(None, alias="from")
    to: Optional[Position] = None
    capture_assignment: Optional[List[CaptureAssignment]] = Field(
        None, alias="captureAssignment"
    )

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def _check_fields(self) -> "Move":
        if self.type == MoveType.PLACE:
            if self.to is None or self.from_pos is not None:
                raise ValueError("place moves carry 'to' only")
        elif self.type == MoveType.STEP:
            if self.to is None or self.from_pos is None:
                raise ValueError("step moves carry both 'from' and 'to'")
        else:
            if (
                self.to is not None
                or self.from_pos is not None
                or self.capture_assignment
            ):
                raise ValueError("pass moves carry no positions")
        return self

    @classmethod
    def place(
        cls,
        to: Position,
        capture_assignment: Optional[List[CaptureAssignment]] = None,
    ) -> "Move":
        return cls(
            type=MoveType.PLACE,
            to=to,
            captureAssignment=capture_assignment,
        )

    @classmethod
    def step(
        cls,
        from_pos: Position,
        to: Position,
        capture_assignment: Optional[List[CaptureAssignment]] = None,
    ) -> "Move":
        return cls(
            type=MoveType.STEP,
            from_pos=from_pos,
            to=to,
            captureAssignment=capture_assignment,
        )

    @classmethod
    def pass_turn(cls) -> "Move":
        return cls(type=MoveType.PASS)

    def with_capture_assignment(
        self, assignment: List[CaptureAssignment]
    ) -> "Move":
        """Return the same base move carrying ``assignment``."""
        return self.model_copy(update={"capture_assignment": list(assignment)})


class GameState(BaseModel):
    """Complete game state"""
    board: Board
    phase: GamePhase
    active_player: Player = Field(alias="activePlayer")
    winner: Optional[Winner] = None
    placements_remaining: Dict[Player, int] = Field(
        alias="placementsRemaining"
    )
    turn_count: int = Field(0, alias="turnCount")
    consecutive_passes: int = Field(0, alias="consecutivePasses")
    # Free-text annotation for display. Never read by the rules.
    last_action: Optional[str] = Field(None, alias="lastAction")

    class Config:
        populate_by_name = True

    @property
    def is_over(self) -> bool:
        return self.winner is not None


class MoveRejection(BaseModel):
    """Structured reason a move was not committed"""
    kind: RejectionKind
    message: str
    required_capture: Optional[List[Position]] = Field(
        None, alias="requiredCapture"
    )

    class Config:
        populate_by_name = True


class MoveResult(BaseModel):
    """Result of ``GameEngine.submit_move``.

    Exactly one of ``state`` (committed) or ``rejection`` (capture
    required / rejected) is set.
    """
    outcome: MoveOutcome
    state: Optional[GameState] = None
    rejection: Optional[MoveRejection] = None

    class Config:
        populate_by_name = True

    @property
    def success(self) -> bool:
        return self.outcome == MoveOutcome.COMMITTED

    @property
    def required_capture(self) -> List[Position]:
        if self.rejection is None or self.rejection.required_capture is None:
            return []
        return self.rejection.required_capture


class RuleSet(BaseModel):
    """Rule variant selection"""
    capture_rule: CaptureRule = Field(CaptureRule.SWEEP, alias="captureRule")
    win_rule: WinRule = Field(WinRule.EXACT, alias="winRule")
    movement_rule: MovementRule = Field(
        MovementRule.ADJACENT, alias="movementRule"
    )

    class Config:
        populate_by_name = True
        frozen = True


DEFAULT_RULES = RuleSet()
