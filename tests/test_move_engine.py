import random
from types import SimpleNamespace

import pytest

import move_engine
from app_types import Direction, Move, MoveInFlightError, Slice, StateInvariantViolation
from cube_solver import solve_by_reversal
from cube_state import CubeState
from move_engine import apply_move, apply_moves, pieces_on_slice
from piece_catalog import solved_position


def test_apply_move_updates_log_and_piece_history(state):
    ok, msg = apply_move(state, "R", "clockwise")
    assert ok, msg
    assert state.move_count == 1
    record = state.global_move_log[0]
    assert record.slice is Slice.R and record.direction is Direction.CLOCKWISE

    moved = [p for p in state.pieces if p.history]
    assert len(moved) == 9
    for piece in moved:
        entry = piece.history[0]
        assert entry.from_position == solved_position(piece.piece_id)
        assert entry.to_position == piece.position
        assert entry.sequence == 0


def test_middle_slice_moves_eight_pieces(state):
    apply_move(state, "E", "cw")
    assert sum(1 for p in state.pieces if p.history) == 8


def test_invalid_slice_is_a_noop(state):
    before = state.state_key()
    ok, msg = apply_move(state, "X", "clockwise")
    assert not ok
    assert "slice" in msg.lower()
    assert state.state_key() == before
    assert state.move_count == 0


def test_invalid_direction_is_a_noop(state):
    before = state.state_key()
    ok, _ = apply_move(state, "R", "sideways")
    assert not ok
    assert state.state_key() == before
    assert not state.has_history()


def test_move_then_inverse_restores_pieces(state):
    fresh = CubeState().state_key()
    apply_move(state, "R", "clockwise")
    apply_move(state, "R", "counterclockwise")
    assert state.state_key() == fresh
    # history is append-only; the pair is still recorded
    assert state.move_count == 2


def test_overlapping_move_raises(state):
    state.move_lock.acquire()
    try:
        with pytest.raises(MoveInFlightError):
            apply_move(state, "U", "clockwise")
    finally:
        state.move_lock.release()
    assert state.move_count == 0
    ok, _ = apply_move(state, "U", "clockwise")
    assert ok


def test_broken_rotation_raises_invariant_violation(state, monkeypatch):
    before = state.state_key()
    monkeypatch.setattr(move_engine, "rotate_position", lambda pos, s, d: (1, 1, 1))
    with pytest.raises(StateInvariantViolation):
        apply_move(state, "R", "clockwise")
    assert state.state_key() == before
    assert not state.move_lock.locked()


def test_independent_states_do_not_share_pieces():
    a, b = CubeState(), CubeState()
    assert a.piece(0) is not b.piece(0)
    apply_move(a, "F", "clockwise")
    assert b.state_key() == CubeState().state_key()
    assert b.move_count == 0


def test_clone_is_independent(state):
    apply_move(state, "L", "clockwise")
    copy = state.clone()
    apply_move(copy, "D", "clockwise")
    assert state.move_count == 1
    assert copy.move_count == 2
    assert state.piece(0) is not copy.piece(0)


def test_apply_moves_stops_at_first_rejection(state):
    ok, msg = apply_moves(state, [("R", "cw"), ("X", "cw"), ("U", "cw")])
    assert not ok
    assert msg.startswith("Move 2")
    assert state.move_count == 1


def test_apply_moves_accepts_move_objects(state):
    ok, _ = apply_moves(state, [Move(Slice.U, Direction.CLOCKWISE), Move(Slice.M, Direction.COUNTERCLOCKWISE)])
    assert ok
    assert state.move_count == 2


def test_pieces_on_slice_follow_current_positions(state):
    assert len(pieces_on_slice(state, "R")) == 9
    apply_move(state, "U", "clockwise")
    on_r = set(pieces_on_slice(state, "R"))
    assert on_r == {p.piece_id for p in state.pieces if p.position[0] == 1}


def test_positions_stay_a_bijection_under_random_moves(state):
    rng = random.Random(7)
    for _ in range(200):
        apply_move(state, rng.choice(list(Slice)), rng.choice(list(Direction)))
    state.check_invariants()
    assert len(set(state.positions().values())) == 26


def test_merged_piece_history_matches_global_log(state):
    rng = random.Random(11)
    for _ in range(30):
        apply_move(state, rng.choice(list(Slice)), rng.choice(list(Direction)))
    assert state.merged_piece_history() == [r.move for r in state.global_move_log]


def test_effective_history_cancels_adjacent_inverses(state):
    apply_move(state, "R", "clockwise")
    apply_move(state, "U", "clockwise")
    apply_move(state, "U", "counterclockwise")
    assert state.effective_history() == [Move(Slice.R, Direction.CLOCKWISE)]
    apply_move(state, "R", "counterclockwise")
    assert state.effective_history() == []


def test_reset_restores_solved_state(state):
    apply_move(state, "B", "clockwise")
    state.reset()
    assert state.state_key() == CubeState().state_key()
    assert not state.has_history()


def test_merged_piece_history_ignores_a_backwards_clock(state, monkeypatch):
    ticks = iter(range(100, 0, -1))
    monkeypatch.setattr(move_engine, "time", SimpleNamespace(time=lambda: float(next(ticks))))
    for token in ("R", "U", "F"):
        ok, _ = apply_move(state, token, "clockwise")
        assert ok
    stamps = [r.timestamp for r in state.global_move_log]
    assert stamps == sorted(stamps, reverse=True)
    assert state.merged_piece_history() == [r.move for r in state.global_move_log]
    assert solve_by_reversal(state, source="pieces").moves == solve_by_reversal(state).moves
