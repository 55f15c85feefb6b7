"""
piece_catalog.py — stable piece identities and their solved configuration
==========================================================================

Piece ids 0..25 are assigned by enumerating x, y, z over (-1, 0, 1) in
row-major order and skipping the hidden core (0, 0, 0). This ordering is the
canonical id <-> position mapping; any two cubes built from this module agree
on piece identity.

Everything here is a pure function of the id. Results are precomputed once
at import time and copied out so callers can mutate what they receive.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import itertools
from typing import Dict, List, Tuple

from app_types import Colors, Position
from config import FACE_COLORS, FACE_DIRECTIONS, FACE_NORMALS, HIDDEN_SLOT_COLORS

PIECE_COUNT = 26

_SOLVED_POSITIONS: List[Position] = [
    p for p in itertools.product((-1, 0, 1), repeat=3) if p != (0, 0, 0)
]
_POSITION_TO_ID: Dict[Position, int] = {p: i for i, p in enumerate(_SOLVED_POSITIONS)}


def _check_id(piece_id: int) -> None:
    if not isinstance(piece_id, int) or not 0 <= piece_id < PIECE_COUNT:
        raise ValueError(f"piece_id must be in 0..{PIECE_COUNT - 1}, got {piece_id!r}")


def solved_position(piece_id: int) -> Position:
    """Return the (x, y, z) the piece occupies in the solved cube."""
    _check_id(piece_id)
    return _SOLVED_POSITIONS[piece_id]


def piece_id_at(position: Position) -> int:
    """Inverse of solved_position."""
    try:
        return _POSITION_TO_ID[tuple(position)]
    except KeyError:
        raise ValueError(f"Not a piece position: {position!r}") from None


def all_solved_positions() -> List[Position]:
    return list(_SOLVED_POSITIONS)


def is_valid_position(position: Tuple[int, ...]) -> bool:
    return tuple(position) in _POSITION_TO_ID


def face_color(face: str) -> str:
    """Canonical solved color of a face direction ('front', 'top', ...)."""
    try:
        return FACE_COLORS[face]
    except KeyError:
        raise ValueError(f"Unknown face direction: {face!r}") from None


def is_on_face(position: Position, face: str) -> bool:
    """True when the position lies on the outer layer of `face`."""
    normal = FACE_NORMALS[face]
    axis = next(i for i, v in enumerate(normal) if v != 0)
    return position[axis] == normal[axis]


def _build_solved_colors(position: Position) -> Colors:
    # hidden slots first, then the faces this position actually shows
    colors = {face: HIDDEN_SLOT_COLORS[face] for face in FACE_DIRECTIONS}
    for face in FACE_DIRECTIONS:
        if is_on_face(position, face):
            colors[face] = FACE_COLORS[face]
    return colors


_SOLVED_COLORS: List[Colors] = [_build_solved_colors(p) for p in _SOLVED_POSITIONS]


def solved_colors(piece_id: int) -> Colors:
    """Return a fresh dict of the piece's six sticker colors when solved."""
    _check_id(piece_id)
    return dict(_SOLVED_COLORS[piece_id])


def visible_faces(position: Position) -> List[str]:
    """Face directions that are outward-facing at `position`."""
    return [face for face in FACE_DIRECTIONS if is_on_face(position, face)]
