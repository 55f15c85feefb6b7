"""
cube_status.py — one puzzle and everything a client can do with it
==================================================================

`CubeStatus` is the facade the HTTP API (and any other front end) talks to.
It owns exactly one `CubeState`; there is no module-level puzzle, so two
CubeStatus objects are two fully independent cubes.

Responsibilities
- Gate user-facing moves on the per-puzzle rotation configuration (S is
  disabled by default). The move engine underneath accepts all nine slices.
- Scramble through the normal move path, so scrambles are recorded and can be
  reversed like any other moves.
- Pick and replay solutions (reversal, kociemba or the shorter of both).
- Serialise access with one re-entrant lock per puzzle.

Rotation permissions
- Enabling/disabling slices requires a permission grant first. Everything
  defaults to denied, so configuration cannot be changed by accident from a
  client.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import concurrent.futures
import copy
import logging
import random
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import config
import cube_analysis
import move_engine
from app_types import ComplexityReport, Direction, InvalidMoveError, Move, Slice, Solution
from cube_solver import parse_sequence, solve_by_reversal
from cube_state import CubeState
from kociemba_solver import KociembaSolver

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SOLVE_METHODS = ("reversal", "kociemba", "auto")


class RotationPermissions:
    """Admin switches guarding changes to the rotation configuration."""

    KEYS = ("can_toggle", "can_enable", "can_disable")

    def __init__(self):
        self._perms: Dict[str, bool] = {k: False for k in self.KEYS}

    def grant(self, **overrides: bool) -> None:
        """Grant all permissions, optionally keeping some of them off."""
        perms = {k: True for k in self.KEYS}
        perms.update(overrides)
        self.set(**perms)

    def revoke(self) -> None:
        self.set(**{k: False for k in self.KEYS})

    def set(self, **perms: bool) -> None:
        for key, value in perms.items():
            if key not in self._perms:
                raise KeyError(f"Unknown rotation permission: {key!r}")
            self._perms[key] = bool(value)

    def has(self, key: str) -> bool:
        return self._perms.get(key) is True

    def as_dict(self) -> Dict[str, bool]:
        return dict(self._perms)


class CubeStatus:
    def __init__(self, rotation_config: Optional[Dict[str, Dict[str, Any]]] = None):
        self.state = CubeState()
        self.rotation_config = copy.deepcopy(rotation_config or config.ROTATION_CONFIG)
        self.permissions = RotationPermissions()
        self.kociemba = KociembaSolver()
        self._lock = threading.RLock()

    # ----- rotation configuration -----

    def is_enabled(self, slice_: Union[str, Slice]) -> bool:
        code = Slice.parse(slice_).value
        return self.rotation_config.get(code, {}).get("enabled") is True

    def enabled_slices(self) -> List[Slice]:
        return [Slice(code) for code, info in self.rotation_config.items() if info.get("enabled")]

    def disabled_slices(self) -> List[Dict[str, Any]]:
        return [
            {"slice": code, **info}
            for code, info in self.rotation_config.items()
            if not info.get("enabled")
        ]

    def toggle_rotation(self, slice_: Union[str, Slice]) -> bool:
        """Flip a slice's enabled flag. Returns the new flag, False without permission."""
        if not self.permissions.has("can_toggle"):
            logger.warning("Toggle of %s refused: no permission", slice_)
            return False
        code = Slice.parse(slice_).value
        info = self.rotation_config[code]
        info["enabled"] = not info.get("enabled")
        logger.info("Rotation %s %s", code, "enabled" if info["enabled"] else "disabled")
        return info["enabled"]

    def set_rotation_enabled(self, slice_: Union[str, Slice], enabled: bool) -> bool:
        """Returns True when the change was allowed and applied."""
        needed = "can_enable" if enabled else "can_disable"
        if not self.permissions.has(needed):
            logger.warning("Setting %s enabled=%s refused: no permission", slice_, enabled)
            return False
        code = Slice.parse(slice_).value
        self.rotation_config[code]["enabled"] = bool(enabled)
        logger.info("Rotation %s %s", code, "enabled" if enabled else "disabled")
        return True

    # ----- state access -----

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self.state.snapshot()

    def reset(self) -> None:
        with self._lock:
            self.state.reset()
        logger.info("Cube reset")

    # ----- moves -----

    def apply_move(self, slice_: Union[str, Slice], direction: Union[str, Direction]) -> Tuple[bool, str]:
        """User-facing move: rejects unknown and disabled slices with (False, msg)."""
        try:
            move = Move.of(slice_, direction)
        except InvalidMoveError as e:
            logger.warning("Rejected move %r %r: %s", slice_, direction, e)
            return False, str(e)
        if not self.is_enabled(move.slice):
            reason = self.rotation_config.get(move.slice.value, {}).get("reason", "disabled")
            logger.warning("Rejected move %s: slice disabled (%s)", move, reason)
            return False, f"Rotation {move.slice.value} is disabled: {reason}"
        with self._lock:
            return move_engine.apply_move(self.state, move.slice, move.direction)

    def apply_sequence(self, moves: Union[str, Sequence[str]]) -> Tuple[bool, str]:
        """
        Apply a notation sequence ("R U' F2") or a list of tokens. The whole
        sequence is parsed before anything moves; application stops at the
        first rejected move.
        """
        if isinstance(moves, str):
            text = moves
        elif isinstance(moves, (list, tuple)) and all(isinstance(m, str) for m in moves):
            text = " ".join(moves)
        else:
            logger.warning("Rejected sequence %r: not notation text", moves)
            return False, "Sequence must be a string or a list of notation tokens"
        try:
            parsed = parse_sequence(text)
        except InvalidMoveError as e:
            logger.warning("Rejected sequence %r: %s", text, e)
            return False, str(e)
        with self._lock:
            for i, move in enumerate(parsed):
                ok, msg = self.apply_move(move.slice, move.direction)
                if not ok:
                    return False, f"Move {i + 1} rejected: {msg}"
        return True, f"Applied {len(parsed)} moves"

    def scramble(self, n: int = config.DEFAULT_SCRAMBLE_LENGTH, seed: Optional[int] = None) -> List[Move]:
        """
        Apply `n` random quarter turns on enabled slices, never turning the
        same slice twice in a row. Returns the moves applied.
        """
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise ValueError(f"Scramble length must be a non-negative integer, got {n!r}")
        if n > config.MAX_SCRAMBLE_LENGTH:
            raise ValueError(f"Scramble length {n} exceeds the maximum of {config.MAX_SCRAMBLE_LENGTH}")
        enabled = self.enabled_slices()
        if not enabled:
            raise ValueError("No rotations enabled; cannot scramble")

        rng = random.Random(seed)
        directions = [Direction.CLOCKWISE, Direction.COUNTERCLOCKWISE]
        applied: List[Move] = []
        last: Optional[Slice] = None
        with self._lock:
            for _ in range(n):
                candidates = [s for s in enabled if s != last] or enabled
                move = Move(rng.choice(candidates), rng.choice(directions))
                move_engine.apply_move(self.state, move.slice, move.direction)
                applied.append(move)
                last = move.slice
        logger.info("Scramble (%d moves): %s", n, " ".join(str(m) for m in applied))
        return applied

    # ----- solving -----

    def solve_by_reversal(self) -> Solution:
        with self._lock:
            return solve_by_reversal(self.state)

    def solve(self, method: str = "reversal") -> Solution:
        """
        reversal: guaranteed inverse of the recorded history.
        kociemba: best-effort face-turn solution from the stickers.
        auto:     the shorter successful one of both, reversal on a tie.
        """
        if method is None:
            method = "reversal"
        if not isinstance(method, str) or method.lower() not in SOLVE_METHODS:
            raise ValueError(f"Unknown solve method: {method!r}")
        method = method.lower()
        if method == "reversal":
            return self.solve_by_reversal()
        if method == "kociemba":
            with self._lock:
                future = self.kociemba.solve_async(self.state)
            return self._await_heuristic(future)
        with self._lock:
            reversal = solve_by_reversal(self.state)
            if not self.kociemba.available():
                return reversal
            future = self.kociemba.solve_async(self.state)
        heuristic = self._await_heuristic(future)
        if heuristic.success and len(heuristic.moves) < len(reversal.moves):
            return heuristic
        if not heuristic.success:
            logger.debug("Heuristic solver unavailable for auto: %s", heuristic.error)
        return reversal

    def _await_heuristic(self, future: "concurrent.futures.Future[Solution]") -> Solution:
        """Wait for a kociemba solve on a state copy, at most SOLVER_TIMEOUT seconds."""
        try:
            return future.result(timeout=config.SOLVER_TIMEOUT)
        except concurrent.futures.TimeoutError:
            logger.warning("Kociemba solve abandoned after %.1fs", config.SOLVER_TIMEOUT)
            return Solution(success=False, method="Kociemba", error="kociemba timed out")

    def apply_solution(self, solution: Solution) -> Tuple[bool, str]:
        """
        Replay a solution move by move. When the cube ends with every piece
        home and every face uniform, the spent move logs are cleared so the
        puzzle reports solved again.
        """
        if not solution.success:
            return False, solution.error or "Solution not successful"
        with self._lock:
            ok, msg = move_engine.apply_moves(self.state, solution.moves)
            if not ok:
                return False, msg
            if cube_analysis.pieces_home(self.state) and cube_analysis.faces_uniform(self.state):
                self.state.clear_history()
                logger.info("Solution (%s, %d moves) restored the cube", solution.method, len(solution.moves))
                return True, "Solved"
        logger.warning("Solution (%s) applied but cube is not solved", solution.method)
        return True, f"Applied {len(solution.moves)} moves"

    # ----- queries -----

    def is_solved(self) -> bool:
        with self._lock:
            return cube_analysis.is_solved(self.state)

    def analyze_complexity(self) -> ComplexityReport:
        with self._lock:
            return cube_analysis.analyze_complexity(self.state)

    def misplaced_pieces(self) -> List[Dict[str, Any]]:
        with self._lock:
            return cube_analysis.misplaced_pieces(self.state)

    def piece_report(self, piece_id: int) -> Dict[str, Any]:
        with self._lock:
            return cube_analysis.piece_report(self.state, piece_id)

    def effective_history(self) -> List[Move]:
        with self._lock:
            return self.state.effective_history()

    @property
    def move_count(self) -> int:
        return self.state.move_count
