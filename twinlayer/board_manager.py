"""Board-level helpers for the Twinlayer rules engine.

The board is two dense grids: the outer 4x4 layer and the inner 3x3
layer. Movement between them is defined on a unified 7x7 grid where
outer cells sit on even rows/columns and inner cells on odd ones; two
cells are adjacent when they are diagonal neighbours on that grid.
"""
from __future__ import annotations

import hashlib
import json
from typing import Iterable, Optional

from .errors import OutOfBoundsError
from .models import (
    BOARD_SIZES,
    Board,
    BoardLayer,
    CellState,
    GameState,
    Layer,
    Player,
    Position,
)

__all__ = ["BoardManager", "UNIFIED_SIZE"]

UNIFIED_SIZE = 7

_DIAGONALS = ((-1, -1), (-1, 1), (1, -1), (1, 1))
_LAYER_ORDER = {Layer.OUTER: 0, Layer.INNER: 1}


class BoardManager:
    """Helper for board-level operations.

    Everything here is a static function over ``Board`` values. The only
    mutating helper is ``set_cell``, which writes into the board it is
    handed; the engine only ever hands it a private clone.
    """

    @staticmethod
    def create_layer(layer: Layer) -> BoardLayer:
        width, height = BOARD_SIZES[layer]
        return BoardLayer(
            width=width,
            height=height,
            cells=[[CellState.EMPTY] * width for _ in range(height)],
        )

    @staticmethod
    def create_board() -> Board:
        """Return an empty board."""
        return Board(
            outer=BoardManager.create_layer(Layer.OUTER),
            inner=BoardManager.create_layer(Layer.INNER),
        )

    @staticmethod
    def clone_board(board: Board) -> Board:
        """Deep copy; mutating the clone never touches ``board``."""
        return board.model_copy(deep=True)

    @staticmethod
    def is_valid_position(position: Position) -> bool:
        """Return True if ``position`` lies inside its layer."""
        width, height = BOARD_SIZES[position.layer]
        return 0 <= position.x < width and 0 <= position.y < height

    @staticmethod
    def require_valid_position(position: Position) -> None:
        if not BoardManager.is_valid_position(position):
            raise OutOfBoundsError(position)

    @staticmethod
    def get_cell(board: Board, position: Position) -> CellState:
        """Return the cell at ``position``.

        Raises:
            OutOfBoundsError: if ``position`` is outside its layer.
        """
        BoardManager.require_valid_position(position)
        return board.layer(position.layer).cells[position.y][position.x]

    @staticmethod
    def set_cell(board: Board, position: Position, value: CellState) -> Board:
        """Write ``value`` at ``position`` and return ``board``.

        Raises:
            OutOfBoundsError: if ``position`` is outside its layer.
        """
        BoardManager.require_valid_position(position)
        board.layer(position.layer).cells[position.y][position.x] = value
        return board

    @staticmethod
    def list_positions(layer: Layer) -> list[Position]:
        """All positions of ``layer`` in row-major order."""
        width, height = BOARD_SIZES[layer]
        return [
            Position(layer=layer, x=x, y=y)
            for y in range(height)
            for x in range(width)
        ]

    @staticmethod
    def empty_positions(board: Board, layer: Layer) -> set[Position]:
        return {
            pos for pos in BoardManager.list_positions(layer)
            if BoardManager.get_cell(board, pos) == CellState.EMPTY
        }

    @staticmethod
    def all_empty_positions(board: Board) -> list[Position]:
        """Empty cells of both layers, outer first, row-major."""
        return [
            pos
            for layer in Layer
            for pos in BoardManager.list_positions(layer)
            if BoardManager.get_cell(board, pos) == CellState.EMPTY
        ]

    @staticmethod
    def player_positions(board: Board, player: Player) -> list[Position]:
        owned = CellState.of(player)
        return [
            pos
            for layer in Layer
            for pos in BoardManager.list_positions(layer)
            if BoardManager.get_cell(board, pos) == owned
        ]

    @staticmethod
    def count_pieces(board: Board, player: Player) -> int:
        owned = CellState.of(player)
        return sum(
            row.count(owned)
            for layer in Layer
            for row in board.layer(layer).cells
        )

    @staticmethod
    def is_outer_central_cell(position: Position) -> bool:
        """True for the central 2x2 block of the outer layer."""
        return (
            position.layer == Layer.OUTER
            and 1 <= position.x <= 2
            and 1 <= position.y <= 2
        )

    # ------------------------------------------------------------------
    # Cross-layer geometry
    # ------------------------------------------------------------------

    @staticmethod
    def to_unified(position: Position) -> tuple[int, int]:
        """Return ``(row, col)`` of ``position`` on the 7x7 unified grid."""
        if position.layer == Layer.OUTER:
            return 2 * position.y, 2 * position.x
        return 2 * position.y + 1, 2 * position.x + 1

    @staticmethod
    def from_unified(row: int, col: int) -> Optional[Position]:
        """Inverse of ``to_unified``; None for mixed-parity or off-grid cells."""
        if not (0 <= row < UNIFIED_SIZE and 0 <= col < UNIFIED_SIZE):
            return None
        if row % 2 == 0 and col % 2 == 0:
            return Position(layer=Layer.OUTER, x=col // 2, y=row // 2)
        if row % 2 == 1 and col % 2 == 1:
            return Position(layer=Layer.INNER, x=col // 2, y=row // 2)
        return None

    @staticmethod
    def adjacent_positions(position: Position) -> set[Position]:
        """Cells on the other layer reachable by one step.

        Raises:
            OutOfBoundsError: if ``position`` is outside its layer.
        """
        BoardManager.require_valid_position(position)
        row, col = BoardManager.to_unified(position)
        neighbours = set()
        for dr, dc in _DIAGONALS:
            candidate = BoardManager.from_unified(row + dr, col + dc)
            if candidate is not None:
                neighbours.add(candidate)
        return neighbours

    @staticmethod
    def is_adjacent(a: Position, b: Position) -> bool:
        if a.layer == b.layer:
            return False
        (ra, ca), (rb, cb) = BoardManager.to_unified(a), BoardManager.to_unified(b)
        return abs(ra - rb) == 1 and abs(ca - cb) == 1

    # ------------------------------------------------------------------
    # Ordering and hashing
    # ------------------------------------------------------------------

    @staticmethod
    def sort_positions(positions: Iterable[Position]) -> list[Position]:
        """Deterministic order: outer before inner, then row-major."""
        return sorted(
            positions, key=lambda p: (_LAYER_ORDER[p.layer], p.y, p.x)
        )

    @staticmethod
    def hash_game_state(state: GameState) -> str:
        """
        Canonical hash of a GameState used by tests and hosts to detect
        state changes. Built from the sorted-key JSON wire form, so two
        states hash equal iff they serialize equal.
        """
        payload = json.dumps(
            state.model_dump(mode="json", by_alias=True),
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
