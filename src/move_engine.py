"""
move_engine.py — the single mutating entry point of the puzzle
==============================================================

`apply_move(state, slice, direction)`:

1. parses the slice and direction (unknown values are rejected and reported
   as `(False, reason)`; nothing is mutated);
2. selects the pieces whose *current* position lies on the slice;
3. computes every new position and color set before touching anything and,
   when VERIFY_INVARIANTS is on, checks that the 26 positions stay a
   bijection;
4. commits positions, colors and per-piece history, then appends one entry
   to the global move log.

A move is atomic from the caller's point of view. Moves on one CubeState are
strictly serial: re-entering `apply_move` on the same state while a move is
in flight raises MoveInFlightError. Independent states do not interact.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, List, Tuple, Union

import config
from app_types import Direction, InvalidMoveError, Move, MoveInFlightError, Slice
from cube_state import CubeState, check_positions
from slice_transform import affects, permute_colors, rotate_position

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _plan(state: CubeState, move: Move):
    updates = []
    for piece in state.pieces:
        if not affects(move.slice, piece.position):
            continue
        new_position = rotate_position(piece.position, move.slice, move.direction)
        new_colors = permute_colors(piece.colors, move.slice, move.direction)
        updates.append((piece, new_position, new_colors))
    return updates


def _verify(state: CubeState, updates) -> None:
    moved = {piece.piece_id: pos for piece, pos, _ in updates}
    found = [moved.get(p.piece_id, p.position) for p in state.pieces]
    check_positions(found)


def apply_move(state: CubeState, slice_: Union[str, Slice],
               direction: Union[str, Direction]) -> Tuple[bool, str]:
    """
    Apply one quarter turn to `state`.
    Returns (ok, message). Invalid slice/direction values give (False, reason)
    and leave the state untouched.
    """
    try:
        move = Move.of(slice_, direction)
    except InvalidMoveError as e:
        logger.warning("Rejected move %r %r: %s", slice_, direction, e)
        return False, str(e)

    if not state.move_lock.acquire(blocking=False):
        raise MoveInFlightError(f"Move {move} requested while another move is in flight")
    try:
        updates = _plan(state, move)
        if config.VERIFY_INVARIANTS:
            _verify(state, updates)
        state._commit(move, updates, time.time())
    finally:
        state.move_lock.release()

    logger.debug("Applied %s (%d pieces, %d moves logged)", move, len(updates), state.move_count)
    return True, f"Applied {move}"


def apply_moves(state: CubeState, moves: Iterable[Union[Move, Tuple[str, str]]]) -> Tuple[bool, str]:
    """
    Apply a sequence of moves in order. Stops at the first rejected move and
    reports it; moves before it stay applied.
    """
    count = 0
    for item in moves:
        if isinstance(item, Move):
            slice_, direction = item.slice, item.direction
        else:
            slice_, direction = item
        ok, msg = apply_move(state, slice_, direction)
        if not ok:
            return False, f"Move {count + 1} rejected: {msg}"
        count += 1
    return True, f"Applied {count} moves"


def pieces_on_slice(state: CubeState, slice_: Union[str, Slice]) -> List[int]:
    """Ids of the pieces currently on the slice."""
    slice_ = Slice.parse(slice_)
    return [p.piece_id for p in state.pieces if affects(slice_, p.position)]
