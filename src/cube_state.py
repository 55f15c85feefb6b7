"""
cube_state.py — owned, mutable state of one puzzle
==================================================

`CubeState` holds the 26 pieces (position, six sticker colors, per-piece
history) and the global move log used for whole-cube reversal.

Ownership rules
- A CubeState is created solved by its constructor or by `reset()`; those are
  the only ways to obtain a solved state. Read accessors (`snapshot`,
  `pieces`, ...) never mutate.
- Two CubeState instances never share Piece objects. `clone()` deep-copies.
- Mutation happens through `move_engine.apply_move`, which commits through
  `_commit` while holding the state's move lock.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Dict, Iterable, List, Tuple

from app_types import (
    Colors,
    Move,
    MoveRecord,
    Piece,
    PieceMove,
    Position,
    StateInvariantViolation,
)
from piece_catalog import PIECE_COUNT, all_solved_positions, solved_colors, solved_position

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_EXPECTED_POSITIONS = frozenset(all_solved_positions())


def _build_solved_pieces() -> List[Piece]:
    return [
        Piece(piece_id=i, position=solved_position(i), colors=solved_colors(i))
        for i in range(PIECE_COUNT)
    ]


class CubeState:
    def __init__(self):
        self._pieces: List[Piece] = _build_solved_pieces()
        self.global_move_log: List[MoveRecord] = []
        # held by move_engine for the whole duration of one move
        self.move_lock = threading.Lock()

    # ----- construction -----

    def reset(self) -> None:
        """Replace all pieces with fresh solved ones and clear every log."""
        self._pieces = _build_solved_pieces()
        self.global_move_log = []
        logger.debug("Cube state reset to solved")

    def clone(self) -> "CubeState":
        """Independent deep copy (no shared Piece objects, fresh lock)."""
        other = CubeState.__new__(CubeState)
        other._pieces = copy.deepcopy(self._pieces)
        other.global_move_log = copy.deepcopy(self.global_move_log)
        other.move_lock = threading.Lock()
        return other

    # ----- read accessors -----

    @property
    def pieces(self) -> Tuple[Piece, ...]:
        return tuple(self._pieces)

    def piece(self, piece_id: int) -> Piece:
        return self._pieces[piece_id]

    def positions(self) -> Dict[int, Position]:
        return {p.piece_id: p.position for p in self._pieces}

    def snapshot(self) -> List[Dict[str, Any]]:
        """Ordered list of {id, position, colors}; copies only."""
        return [p.to_dict() for p in self._pieces]

    def state_key(self) -> Tuple:
        """Hashable (position, colors) summary, used to compare two states."""
        return tuple(
            (p.piece_id, p.position, tuple(p.colors[f] for f in sorted(p.colors)))
            for p in self._pieces
        )

    @property
    def move_count(self) -> int:
        return len(self.global_move_log)

    def has_history(self) -> bool:
        return bool(self.global_move_log) or any(p.history for p in self._pieces)

    def merged_piece_history(self) -> List[Move]:
        """
        Rebuild the move sequence from the per-piece histories: entries are
        de-duplicated per move, since one move appears in the history of every
        piece it touched, and ordered by the move's log sequence. Timestamps
        are informational only; the wall clock can step backwards.
        """
        seen: Dict[int, Move] = {}
        for piece in self._pieces:
            for entry in piece.history:
                seen.setdefault(entry.sequence, entry.move)
        return [seen[k] for k in sorted(seen)]

    def effective_history(self) -> List[Move]:
        """Global log with adjacent move/inverse pairs cancelled."""
        stack: List[Move] = []
        for record in self.global_move_log:
            move = record.move
            if stack and stack[-1] == move.inverse():
                stack.pop()
            else:
                stack.append(move)
        return stack

    # ----- invariants -----

    def check_invariants(self) -> None:
        """Raise StateInvariantViolation if positions are not the 26-slot bijection."""
        found = [p.position for p in self._pieces]
        check_positions(found)
        ids = [p.piece_id for p in self._pieces]
        if ids != list(range(PIECE_COUNT)):
            raise StateInvariantViolation(f"piece ids out of order: {ids}")

    # ----- mutation (move engine only) -----

    def _commit(self, move: Move, updates: Iterable[Tuple[Piece, Position, Colors]],
                timestamp: float) -> None:
        sequence = len(self.global_move_log)
        for piece, new_position, new_colors in updates:
            piece.history.append(PieceMove(
                slice=move.slice,
                direction=move.direction,
                from_position=piece.position,
                to_position=new_position,
                timestamp=timestamp,
                sequence=sequence,
            ))
            piece.position = new_position
            piece.colors = new_colors
        self.global_move_log.append(MoveRecord(move.slice, move.direction, timestamp))

    def clear_history(self) -> None:
        """Forget every recorded move without touching positions or colors."""
        for piece in self._pieces:
            piece.history.clear()
        self.global_move_log = []

    def __repr__(self) -> str:
        return f"CubeState(moves={self.move_count})"


def check_positions(found: List[Position]) -> None:
    if len(found) != PIECE_COUNT or len(set(found)) != PIECE_COUNT:
        dupes = sorted({p for p in found if found.count(p) > 1})
        raise StateInvariantViolation(f"pieces share positions: {dupes}")
    if set(found) != _EXPECTED_POSITIONS:
        raise StateInvariantViolation(
            f"positions outside the cube: {sorted(set(found) - _EXPECTED_POSITIONS)}"
        )
