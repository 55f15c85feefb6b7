from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

Position = Tuple[int, int, int]
Colors = Dict[str, str]


# ---------------- Errors ----------------

class CubeError(Exception):
    """Base class for puzzle engine errors."""
    pass


class InvalidMoveError(CubeError, ValueError):
    """Raised for an unknown slice, direction or notation token."""
    pass


class StateInvariantViolation(CubeError, AssertionError):
    """Raised when a move would leave two pieces on the same position."""
    pass


class MoveInFlightError(CubeError, RuntimeError):
    """Raised when apply_move is re-entered before the previous move committed."""
    pass


# ---------------- Moves ----------------

class Slice(str, Enum):
    F = 'F'
    B = 'B'
    R = 'R'
    L = 'L'
    U = 'U'
    D = 'D'
    M = 'M'
    E = 'E'
    S = 'S'

    @classmethod
    def parse(cls, value: Union[str, "Slice"]) -> "Slice":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidMoveError(f"Unknown slice: {value!r}") from None


class Direction(str, Enum):
    CLOCKWISE = 'clockwise'
    COUNTERCLOCKWISE = 'counterclockwise'

    @classmethod
    def parse(cls, value: Union[str, "Direction"]) -> "Direction":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        aliases = {'cw': cls.CLOCKWISE, 'ccw': cls.COUNTERCLOCKWISE}
        if text in aliases:
            return aliases[text]
        try:
            return cls(text)
        except ValueError:
            raise InvalidMoveError(f"Unknown direction: {value!r}") from None

    def inverse(self) -> "Direction":
        if self is Direction.CLOCKWISE:
            return Direction.COUNTERCLOCKWISE
        return Direction.CLOCKWISE


# Notation-only tag for a half turn. Never stored in logs: expanded to two
# quarter turns before replay.
DOUBLE = 'double'


@dataclass(frozen=True)
class Move:
    slice: Slice
    direction: Direction

    @classmethod
    def of(cls, slice_: Union[str, Slice], direction: Union[str, Direction]) -> "Move":
        return cls(Slice.parse(slice_), Direction.parse(direction))

    def inverse(self) -> "Move":
        return Move(self.slice, self.direction.inverse())

    def __str__(self) -> str:
        suffix = "" if self.direction is Direction.CLOCKWISE else "'"
        return f"{self.slice.value}{suffix}"

    def to_dict(self) -> Dict[str, str]:
        return {"slice": self.slice.value, "direction": self.direction.value}


@dataclass
class MoveRecord:
    """One entry of the global move log."""
    slice: Slice
    direction: Direction
    timestamp: float = field(default_factory=time.time)

    @property
    def move(self) -> Move:
        return Move(self.slice, self.direction)

    def to_dict(self) -> Dict[str, Any]:
        return {"slice": self.slice.value, "direction": self.direction.value,
                "timestamp": self.timestamp}


@dataclass
class PieceMove:
    """One entry of a piece's own history."""
    slice: Slice
    direction: Direction
    from_position: Position
    to_position: Position
    timestamp: float = field(default_factory=time.time)
    sequence: int = 0  # global log index of the move, ties piece entries together

    @property
    def move(self) -> Move:
        return Move(self.slice, self.direction)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slice": self.slice.value,
            "direction": self.direction.value,
            "from_position": list(self.from_position),
            "to_position": list(self.to_position),
            "timestamp": self.timestamp,
        }


# ---------------- Pieces ----------------

@dataclass
class Piece:
    piece_id: int
    position: Position
    colors: Colors
    history: List[PieceMove] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.piece_id,
            "position": list(self.position),
            "colors": dict(self.colors),
        }


# ---------------- Results ----------------

@dataclass
class Solution:
    moves: List[Move] = field(default_factory=list)
    success: bool = True
    method: str = "Reversal"
    notation: str = ""
    error: Optional[str] = None

    def __post_init__(self):
        if not self.notation and self.moves:
            self.notation = " ".join(str(m) for m in self.moves)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "success": self.success,
            "method": self.method,
            "solution": [m.to_dict() for m in self.moves],
            "notation": self.notation,
            "moves": len(self.moves),
        }
        if self.error:
            out["error"] = self.error
        return out


@dataclass
class ComplexityReport:
    score: float
    difficulty: str
    misplaced_pieces: int = 0
    moved_pieces: int = 0
    total_pieces: int = 0
    face_complexity: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "difficulty": self.difficulty,
            "misplaced_pieces": self.misplaced_pieces,
            "moved_pieces": self.moved_pieces,
            "total_pieces": self.total_pieces,
            "face_complexity": self.face_complexity,
        }
