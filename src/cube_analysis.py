"""
cube_analysis.py — solved-state classifier and complexity heuristic
===================================================================

Read-only queries over a CubeState.

* `is_solved` is a triple check: every piece home, every history empty and
  every face uniform. Position equality alone is not enough evidence because
  a broken color permutation would leave pieces home with wrong stickers.
* `analyze_complexity` is a heuristic score in [0, 100] with a difficulty
  tier. It is NOT a move-count estimate and must never be presented as a
  lower bound on solution length.
* `piece_report` / `misplaced_pieces` list which pieces are away from home,
  for the "identify incorrect pieces" view of a client.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import config
from app_types import ComplexityReport
from cube_state import CubeState
from piece_catalog import face_color, is_on_face, solved_position

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def face_uniformity(state: CubeState, face: str) -> float:
    """
    Fraction of the pieces on `face` whose sticker in that slot shows the
    face's canonical color. A face with no pieces counts as uniform.
    """
    expected = face_color(face)
    on_face = [p for p in state.pieces if is_on_face(p.position, face)]
    if not on_face:
        return 1.0
    matching = sum(1 for p in on_face if p.colors.get(face) == expected)
    return matching / len(on_face)


def all_face_uniformity(state: CubeState) -> Dict[str, float]:
    return {face: face_uniformity(state, face) for face in config.FACE_DIRECTIONS}


def pieces_home(state: CubeState) -> bool:
    return all(p.position == solved_position(p.piece_id) for p in state.pieces)


def faces_uniform(state: CubeState) -> bool:
    return all(u == 1.0 for u in all_face_uniformity(state).values())


def is_solved(state: CubeState) -> bool:
    if not pieces_home(state):
        return False
    if any(p.history for p in state.pieces):
        return False
    return faces_uniform(state)


def difficulty_for(score: float) -> str:
    for bound, label in config.DIFFICULTY_TIERS:
        if score < bound:
            return label
    return config.DIFFICULTY_FALLBACK


def analyze_complexity(state: CubeState) -> ComplexityReport:
    score = 0.0
    misplaced = 0
    moved = 0
    for piece in state.pieces:
        if piece.position != solved_position(piece.piece_id):
            misplaced += 1
            score += config.MISPLACED_PIECE_PENALTY
        if piece.history:
            moved += 1
            score += config.MOVED_PIECE_PENALTY

    uniformity = all_face_uniformity(state)
    mean_uniformity = sum(uniformity.values()) / len(uniformity)
    face_complexity = config.FACE_UNIFORMITY_WEIGHT * (1.0 - mean_uniformity)
    score += face_complexity

    if misplaced or moved:
        score += config.SCRAMBLED_BASE_PENALTY

    score = max(0.0, min(float(config.MAX_COMPLEXITY_SCORE), score))
    report = ComplexityReport(
        score=round(score, 2),
        difficulty=difficulty_for(score),
        misplaced_pieces=misplaced,
        moved_pieces=moved,
        total_pieces=len(state.pieces),
        face_complexity=round(face_complexity, 2),
    )
    logger.debug("Complexity: %s", report)
    return report


def piece_report(state: CubeState, piece_id: int) -> Dict[str, Any]:
    expected = solved_position(piece_id)
    piece = state.piece(piece_id)
    return {
        "piece_id": piece_id,
        "current_position": list(piece.position),
        "expected_position": list(expected),
        "is_correct": piece.position == expected,
        "move_count": len(piece.history),
    }


def misplaced_pieces(state: CubeState) -> List[Dict[str, Any]]:
    return [
        piece_report(state, p.piece_id)
        for p in state.pieces
        if p.position != solved_position(p.piece_id)
    ]
