"""
facelets.py — CubeState -> 54-character facelet string
======================================================

Builds the standard URFDLB facelet string (the input format of the kociemba
two-phase solver) from the piece model. Each face is read in the usual net
orientation; the layout vectors live in `config.FACELET_LAYOUT`.

Letters are assigned from the colors shown by the six center pieces, the same
way a scanned color string is turned into face letters: whatever color sits
on the U center is 'U', and so on. This only describes a solvable cube when
every center is at home, which `centers_home` checks.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from config import FACE_LETTER_TO_DIRECTION, FACE_NORMALS, FACE_ORDER, FACELET_LAYOUT
from cube_state import CubeState
from piece_catalog import is_on_face, piece_id_at, solved_position

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

CENTER_IDS: Dict[str, int] = {
    face: piece_id_at(FACE_NORMALS[FACE_LETTER_TO_DIRECTION[face]]) for face in FACE_ORDER
}


def _dot(a: Tuple[int, int, int], b: Tuple[int, int, int]) -> int:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def centers_home(state: CubeState) -> bool:
    """True when all six center pieces sit at their solved positions."""
    return all(
        state.piece(pid).position == solved_position(pid) for pid in CENTER_IDS.values()
    )


def color_grid(state: CubeState) -> Dict[str, List[str]]:
    """
    Colors per face letter, 9 stickers each in net order.
    """
    grid: Dict[str, List[str]] = {}
    for face in FACE_ORDER:
        direction = FACE_LETTER_TO_DIRECTION[face]
        _normal, col_axis, row_axis = FACELET_LAYOUT[face]
        stickers: List[str] = [""] * 9
        for piece in state.pieces:
            if not is_on_face(piece.position, direction):
                continue
            row = _dot(row_axis, piece.position) + 1
            col = _dot(col_axis, piece.position) + 1
            stickers[3 * row + col] = piece.colors[direction]
        grid[face] = stickers
    return grid


def to_facelet_string(state: CubeState) -> str:
    """
    Return the 54-char URFDLB facelet string for `state`.
    Raises ValueError if two centers show the same color.
    """
    grid = color_grid(state)
    color_to_face: Dict[str, str] = {}
    for face in FACE_ORDER:
        center = grid[face][4]
        if center in color_to_face:
            raise ValueError(
                f"Duplicate center color {center!r} between {color_to_face[center]!r} and {face!r}"
            )
        color_to_face[center] = face

    facelets = "".join(color_to_face[c] for face in FACE_ORDER for c in grid[face])
    logger.debug("Built facelet string: %s", facelets)
    return facelets
