"""
kociemba_solver.py — best-effort two-phase solver on top of the piece model
===========================================================================

The reversal solver in `cube_solver` is the guaranteed solver of the engine.
This module is the *heuristic* alternative: it reads the visible stickers
into a facelet string and asks the kociemba two-phase solver for a short
face-turn solution, independent of how the cube got scrambled.

### Limits

* Only the six outer faces appear in a kociemba solution. If a middle slice
  left the centers displaced, a face-turn solution could only restore the
  cube up to a whole-cube rotation, so such states are refused.
* The S slice does not move stickers; after an S move the sticker pattern
  may be unsolvable and kociemba rejects it. That shows up as a failed
  Solution, never as an exception.

### Direction convention

An engine clockwise quarter turn is the *inverse* of the standard-notation
turn of the same letter (the engine looks down the positive axis). Standard
"R" therefore maps to engine (R, counterclockwise), "R'" to (R, clockwise)
and "R2" to two quarter turns.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from typing import Dict, List, Optional

try:
    import kociemba
except Exception:
    kociemba = None

from app_types import Direction, InvalidMoveError, Move, Slice, Solution
from config import SOLVED_FACELETS
from cube_state import CubeState
from facelets import centers_home, to_facelet_string

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

METHOD_KOCIEMBA = "Kociemba"
METHOD_ALREADY_SOLVED = "Already Solved"

# standard notation suffix -> engine direction, quarter-turn count
_STANDARD_SUFFIX = {
    "": (Direction.COUNTERCLOCKWISE, 1),
    "'": (Direction.CLOCKWISE, 1),
    "2": (Direction.CLOCKWISE, 2),
}
_FACE_SLICES = {s.value for s in (Slice.U, Slice.R, Slice.F, Slice.D, Slice.L, Slice.B)}

# Thread pool for asynchronous solves (single worker, the solver is CPU bound)
_EXECUTOR = concurrent.futures.ThreadPoolExecutor(max_workers=1)


def translate_solution(solution: str) -> List[Move]:
    """
    Convert a kociemba solution string ("R U2 F'") into engine quarter turns.
    """
    moves: List[Move] = []
    for tok in (solution or "").split():
        base, suffix = tok[0].upper(), tok[1:]
        if base not in _FACE_SLICES or suffix not in _STANDARD_SUFFIX:
            raise InvalidMoveError(f"Unexpected solver token: {tok!r}")
        direction, times = _STANDARD_SUFFIX[suffix]
        moves.extend([Move(Slice(base), direction)] * times)
    return moves


class KociembaSolver:
    def __init__(self):
        self._solve_cache: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def available() -> bool:
        return kociemba is not None

    def _solve(self, facelets: str) -> Optional[str]:
        """
        Solve using kociemba (with caching).
        Returns solution string or None on failure.
        """
        with self._lock:
            if facelets in self._solve_cache:
                logger.debug("Solver cache hit for facelets")
                return self._solve_cache[facelets]
        try:
            sol = kociemba.solve(facelets)
        except Exception as e:
            logger.exception("Solver exception: %s", e)
            sol = None
        # failed facelets are cached too, they will fail again
        with self._lock:
            self._solve_cache[facelets] = sol
        return sol

    def solve(self, state: CubeState) -> Solution:
        """Best-effort face-turn solution for the current sticker pattern."""
        if kociemba is None:
            return Solution(success=False, method=METHOD_KOCIEMBA, error="kociemba not available")
        if not centers_home(state):
            return Solution(
                success=False,
                method=METHOD_KOCIEMBA,
                error="Centers displaced by a middle-slice move; use the reversal solver",
            )

        try:
            facelets = to_facelet_string(state)
        except ValueError as e:
            logger.warning("Cannot build facelet string: %s", e)
            return Solution(success=False, method=METHOD_KOCIEMBA, error=str(e))

        if facelets == SOLVED_FACELETS:
            return Solution(moves=[], success=True, method=METHOD_ALREADY_SOLVED)

        sol = self._solve(facelets)
        if not sol:
            return Solution(success=False, method=METHOD_KOCIEMBA, error="kociemba failed to solve the cube")

        try:
            moves = translate_solution(sol)
        except InvalidMoveError as e:
            logger.exception("Could not translate solver output %r", sol)
            return Solution(success=False, method=METHOD_KOCIEMBA, error=str(e))

        logger.info("Kociemba solution: %s (%d quarter turns)", sol, len(moves))
        return Solution(moves=moves, success=True, method=METHOD_KOCIEMBA)

    # asynchronous convenience wrapper: returns Future
    def solve_async(self, state: CubeState) -> "concurrent.futures.Future[Solution]":
        return _EXECUTOR.submit(self.solve, state.clone())

    def clear_cache(self) -> None:
        """Clear the internal solve cache."""
        with self._lock:
            self._solve_cache.clear()
