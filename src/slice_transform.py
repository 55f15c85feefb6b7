"""
slice_transform.py — per-slice position and sticker algebra
===========================================================

For every slice and turn direction this module defines three things:

* a **membership predicate**: which coordinate must equal which value
  (outer faces test an extreme, middle slices test 0);
* a **position rotation**: a signed 90° rotation in the plane orthogonal to
  the slice axis, stored as an integer numpy matrix;
* a **color permutation**: which color slot each sticker lands in.

The color permutation is not tabled by hand. It is derived from the same
matrix as the position rotation by rotating the six face normals, so a piece's
geometry and its stickers always turn together: the two slots on the rotation
axis are fixed and the other four form a 4-cycle. The S slice is the one
exception and keeps its stickers in place (see FIXED_COLOR_SLICES in config).

All 18 (slice, direction) entries are precomputed at import time, in the
manner of the rotation maps used for facelet strings.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

import numpy as np

from app_types import Colors, Direction, Position, Slice
from config import FACE_DIRECTIONS, FACE_NORMALS, FIXED_COLOR_SLICES, SLICE_TABLE

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_NORMAL_TO_FACE: Dict[Tuple[int, int, int], str] = {n: f for f, n in FACE_NORMALS.items()}

# (slice, direction) -> 3x3 int matrix
_ROTATIONS: Dict[Tuple[Slice, Direction], np.ndarray] = {}
# (slice, direction) -> {destination slot: source slot}
_COLOR_MAPS: Dict[Tuple[Slice, Direction], Dict[str, str]] = {}


def _rotate_vector(matrix: np.ndarray, vec) -> Tuple[int, int, int]:
    out = matrix @ np.asarray(vec, dtype=int)
    return (int(out[0]), int(out[1]), int(out[2]))


def _derive_color_map(matrix: np.ndarray) -> Dict[str, str]:
    # the sticker that faced normal n now faces matrix @ n
    mapping = {}
    for face in FACE_DIRECTIONS:
        dest = _NORMAL_TO_FACE[_rotate_vector(matrix, FACE_NORMALS[face])]
        mapping[dest] = face
    return mapping


for _code, (_axis, _value, _rows) in SLICE_TABLE.items():
    _slice = Slice(_code)
    _cw = np.array(_rows, dtype=int)
    for _direction, _matrix in ((Direction.CLOCKWISE, _cw), (Direction.COUNTERCLOCKWISE, _cw.T.copy())):
        _ROTATIONS[(_slice, _direction)] = _matrix
        if _code in FIXED_COLOR_SLICES:
            _COLOR_MAPS[(_slice, _direction)] = {face: face for face in FACE_DIRECTIONS}
        else:
            _COLOR_MAPS[(_slice, _direction)] = _derive_color_map(_matrix)


def slice_axis(slice_: Slice) -> Tuple[int, int]:
    """Return (axis index, required coordinate) of the slice's layer."""
    axis, value, _ = SLICE_TABLE[Slice.parse(slice_).value]
    return axis, value


def affects(slice_: Slice, position: Position) -> bool:
    """Membership predicate: is a piece at `position` part of the slice?"""
    axis, value = slice_axis(slice_)
    return position[axis] == value


def rotation_matrix(slice_: Slice, direction: Direction) -> np.ndarray:
    """Copy of the integer rotation matrix for (slice, direction)."""
    return _ROTATIONS[(Slice.parse(slice_), Direction.parse(direction))].copy()


def rotate_position(position: Position, slice_: Slice, direction: Direction) -> Position:
    matrix = _ROTATIONS[(Slice.parse(slice_), Direction.parse(direction))]
    return _rotate_vector(matrix, position)


def color_map(slice_: Slice, direction: Direction) -> Dict[str, str]:
    """{destination slot: source slot} for (slice, direction)."""
    return dict(_COLOR_MAPS[(Slice.parse(slice_), Direction.parse(direction))])


def permute_colors(colors: Colors, slice_: Slice, direction: Direction) -> Colors:
    """Return a new colors dict with stickers moved to their new slots."""
    mapping = _COLOR_MAPS[(Slice.parse(slice_), Direction.parse(direction))]
    return {dest: colors[src] for dest, src in mapping.items()}


def fixed_slots(slice_: Slice) -> List[str]:
    """The two color slots lying on the slice's rotation axis."""
    axis, _ = slice_axis(slice_)
    return [face for face in FACE_DIRECTIONS if FACE_NORMALS[face][axis] != 0]


def color_cycle(slice_: Slice, direction: Direction) -> List[str]:
    """
    The color 4-cycle as an ordered list [a, b, c, d] meaning the sticker in
    slot a moves to b, b to c, c to d and d back to a. Empty for slices whose
    stickers do not rotate.
    """
    mapping = _COLOR_MAPS[(Slice.parse(slice_), Direction.parse(direction))]
    forward = {src: dest for dest, src in mapping.items() if src != dest}
    if not forward:
        return []
    start = next(face for face in FACE_DIRECTIONS if face in forward)
    cycle = [start]
    nxt = forward[start]
    while nxt != start:
        cycle.append(nxt)
        nxt = forward[nxt]
    return cycle
