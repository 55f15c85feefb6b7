"""
cube_solver.py — reversal solver and move notation
===========================================================================

The reversal solver is the guaranteed-correct solver of the engine. Slice
rotations form a group under composition, so the inverse of a product is the
product of the inverses in reverse order: reversing the recorded move log and
inverting every move returns every piece to its position and colors at the
time the log started.

### Notation

Engine moves print as "R" (clockwise) and "R'" (counterclockwise). A "2"
suffix ("R2") is the notation-only *double* tag: it is parsed into two
identical quarter turns before anything is replayed and is its own inverse.

### No optimisation

`optimize_move_sequence` deliberately returns its input. Cancelling or
merging moves is easy to get subtly wrong and the reversal guarantee only
holds for the exact inverse sequence.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from app_types import DOUBLE, Direction, InvalidMoveError, Move, Slice, Solution
from cube_state import CubeState

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

METHOD_ALREADY_SOLVED = "Already Solved"
METHOD_REVERSAL = "Reversal"

_SUFFIX_TO_DIRECTION = {
    "": Direction.CLOCKWISE,
    "'": Direction.COUNTERCLOCKWISE,
    "2": DOUBLE,
}


# ---------------- Notation ----------------

def parse_move_token(token: str) -> List[Move]:
    """
    Parse one notation token into engine moves.
    "R" -> [R cw], "R'" -> [R ccw], "R2" -> [R cw, R cw].
    """
    tok = (token or "").strip()
    if not tok:
        raise InvalidMoveError("Empty move token")
    base, suffix = tok[0], tok[1:]
    slice_ = Slice.parse(base)
    if suffix not in _SUFFIX_TO_DIRECTION:
        raise InvalidMoveError(f"Unknown move token: {token!r}")
    direction = _SUFFIX_TO_DIRECTION[suffix]
    if direction == DOUBLE:
        return [Move(slice_, Direction.CLOCKWISE), Move(slice_, Direction.CLOCKWISE)]
    return [Move(slice_, direction)]


def parse_sequence(seq: str) -> List[Move]:
    """Parse a space separated sequence ("R U' F2") into quarter-turn moves."""
    moves: List[Move] = []
    if not seq:
        return moves
    for tok in seq.strip().split():
        moves.extend(parse_move_token(tok))
    return moves


def format_move(move: Move) -> str:
    return str(move)


def format_sequence(moves: Sequence[Move]) -> str:
    return " ".join(format_move(m) for m in moves)


def invert_token(token: str) -> str:
    """Invert one notation token; a double is its own inverse."""
    tok = token.strip()
    if tok.endswith("2"):
        parse_move_token(tok)
        return tok
    moves = parse_move_token(tok)
    return format_move(moves[0].inverse())


def invert_sequence(moves: Sequence[Move]) -> List[Move]:
    """Reverse the order and invert every move."""
    return [m.inverse() for m in reversed(moves)]


def optimize_move_sequence(moves: Sequence[Move]) -> List[Move]:
    """Intentionally a no-op; see module docstring."""
    return list(moves)


# ---------------- Reversal solver ----------------

def solve_by_reversal(state: CubeState, source: str = "global") -> Solution:
    """
    Build the inverse of the recorded move history.

    source="global" reads the global move log; source="pieces" rebuilds the
    sequence from the merged per-piece histories. Both give the same answer
    for any state driven through the move engine.
    """
    if source == "global":
        history = [record.move for record in state.global_move_log]
    elif source == "pieces":
        history = state.merged_piece_history()
    else:
        raise ValueError(f"Unknown history source: {source!r}")

    if not history:
        logger.debug("No moves recorded; cube considered solved")
        return Solution(moves=[], success=True, method=METHOD_ALREADY_SOLVED)

    moves = optimize_move_sequence(invert_sequence(history))
    logger.info("Reversal solution: %d moves", len(moves))
    return Solution(moves=moves, success=True, method=METHOD_REVERSAL)
