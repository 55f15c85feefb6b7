"""config.py — project configuration
------------------------------------

This file centralizes default runtime constants for the puzzle engine.
Keep in mind these are *defaults*; `main.py` exposes the few values worth
overriding at runtime (API binding, log file, invariant checks).

Notes / warnings
- Coordinates follow the renderer convention: +x right, +y up, +z front.
  Every table below (slice axes, face normals, facelet layout) assumes it.
- The slice rotation signs are the single most error-prone part of the
  engine. They are validated by the order-4 and bijectivity tests; do not
  edit SLICE_TABLE without running them.

-------------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from pathlib import Path
from typing import Dict, List, Tuple

# ---------------- Faces and colors ----------------

# The six color slots every piece carries, in the renderer's order.
FACE_DIRECTIONS: List[str] = ['front', 'back', 'right', 'left', 'top', 'bottom']

# Outward unit normal of each face direction.
FACE_NORMALS: Dict[str, Tuple[int, int, int]] = {
    'front':  (0, 0, 1),
    'back':   (0, 0, -1),
    'right':  (1, 0, 0),
    'left':   (-1, 0, 0),
    'top':    (0, 1, 0),
    'bottom': (0, -1, 0),
}

# Canonical solved color per face direction.
FACE_COLORS: Dict[str, str] = {
    'front':  'white',
    'back':   'yellow',
    'right':  'red',
    'left':   'orange',
    'top':    'blue',
    'bottom': 'green',
}

# Color a slot receives when the piece does not sit on that face in the
# solved state. Hidden slots are filled with the face's own
# canonical color, which keeps permutations total and gives the uniformity
# check a target for every piece.
HIDDEN_SLOT_COLORS: Dict[str, str] = dict(FACE_COLORS)

# Kociemba facelet order and the face direction each letter stands for.
FACE_ORDER: List[str] = ['U', 'R', 'F', 'D', 'L', 'B']
FACE_LETTER_TO_DIRECTION: Dict[str, str] = {
    'U': 'top', 'R': 'right', 'F': 'front', 'D': 'bottom', 'L': 'left', 'B': 'back',
}

# Standard net layout for each face: (normal, column axis, row axis) as
# signed unit vectors. Sticker index = 3 * row + col with
# row = dot(row_axis, pos) + 1 and col = dot(col_axis, pos) + 1.
FACELET_LAYOUT: Dict[str, Tuple[Tuple[int, int, int], Tuple[int, int, int], Tuple[int, int, int]]] = {
    'U': ((0, 1, 0),  (1, 0, 0),  (0, 0, 1)),
    'R': ((1, 0, 0),  (0, 0, -1), (0, -1, 0)),
    'F': ((0, 0, 1),  (1, 0, 0),  (0, -1, 0)),
    'D': ((0, -1, 0), (1, 0, 0),  (0, 0, -1)),
    'L': ((-1, 0, 0), (0, 0, 1),  (0, -1, 0)),
    'B': ((0, 0, -1), (-1, 0, 0), (0, -1, 0)),
}

SOLVED_FACELETS: str = "UUUUUUUUURRRRRRRRRFFFFFFFFFDDDDDDDDDLLLLLLLLLBBBBBBBBB"


# ---------------- Slices ----------------

# slice -> (axis index, required coordinate value, clockwise rotation matrix)
# The matrix acts on column vectors (x, y, z). Counterclockwise is its
# transpose. Outer faces select an extreme coordinate, middle slices select 0.
SLICE_TABLE: Dict[str, Tuple[int, int, Tuple[Tuple[int, int, int], ...]]] = {
    # F: (x, y) -> (-y, x)
    'F': (2, 1,  ((0, -1, 0), (1, 0, 0), (0, 0, 1))),
    # B: (x, y) -> (y, -x)
    'B': (2, -1, ((0, 1, 0), (-1, 0, 0), (0, 0, 1))),
    # R: (y, z) -> (-z, y)
    'R': (0, 1,  ((1, 0, 0), (0, 0, -1), (0, 1, 0))),
    # L: (y, z) -> (z, -y)
    'L': (0, -1, ((1, 0, 0), (0, 0, 1), (0, -1, 0))),
    # U: (x, z) -> (z, -x)
    'U': (1, 1,  ((0, 0, 1), (0, 1, 0), (-1, 0, 0))),
    # D: (x, z) -> (-z, x)
    'D': (1, -1, ((0, 0, -1), (0, 1, 0), (1, 0, 0))),
    # M turns like R, E like U
    'M': (0, 0,  ((1, 0, 0), (0, 0, -1), (0, 1, 0))),
    'E': (1, 0,  ((0, 0, 1), (0, 1, 0), (-1, 0, 0))),
    # S: (x, y) -> (y, -x)
    'S': (2, 0,  ((0, 1, 0), (-1, 0, 0), (0, 0, 1))),
}

# Slices whose stickers stay put while the pieces move.
# Only S, which ROTATION_CONFIG also disables; see DESIGN.md.
FIXED_COLOR_SLICES: Tuple[str, ...] = ('S',)

# Which rotations are reachable from scramble / UI / API. Disabled slices are
# rejected by CubeStatus but still accepted by the bare move engine.
ROTATION_CONFIG: Dict[str, Dict[str, object]] = {
    'R': {'enabled': True,  'name': 'Right'},
    'L': {'enabled': True,  'name': 'Left'},
    'U': {'enabled': True,  'name': 'Up'},
    'D': {'enabled': True,  'name': 'Down'},
    'F': {'enabled': True,  'name': 'Front'},
    'B': {'enabled': True,  'name': 'Back'},
    'M': {'enabled': True,  'name': 'Middle'},
    'E': {'enabled': True,  'name': 'Equatorial'},
    'S': {'enabled': False, 'name': 'Standing', 'reason': 'Color shift issues'},
}

DEFAULT_SCRAMBLE_LENGTH: int = 25
# Upper bound for one scramble request; each move holds the puzzle lock.
MAX_SCRAMBLE_LENGTH: int = 1000

# Raise StateInvariantViolation if a move ever breaks the position bijection.
VERIFY_INVARIANTS: bool = True


# ---------------- Complexity heuristic ----------------

MISPLACED_PIECE_PENALTY: int = 3
MOVED_PIECE_PENALTY: int = 2
FACE_UNIFORMITY_WEIGHT: float = 10.0
SCRAMBLED_BASE_PENALTY: int = 15
MAX_COMPLEXITY_SCORE: int = 100

# (upper bound exclusive, label); anything above the last bound is the fallback.
DIFFICULTY_TIERS: List[Tuple[float, str]] = [
    (20, 'Easy'),
    (45, 'Medium'),
    (75, 'Hard'),
]
DIFFICULTY_FALLBACK: str = 'Very Hard'


# ---------------- Heuristic solver ----------------

# Seconds CubeStatus.solve waits for a kociemba solve before giving up.
SOLVER_TIMEOUT: float = 10.0


# ---------------- HTTP API ----------------

API_HOST: str = "127.0.0.1"
API_PORT: int = 5001

LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Plain-text sink for POST /write-log. Relative to the working directory.
LOG_FILE_PATH: Path = Path.cwd() / "cube-debug.log"
