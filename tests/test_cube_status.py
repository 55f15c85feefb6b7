import pytest

import config
from app_types import Direction, Slice
from cube_state import CubeState
from cube_status import CubeStatus, RotationPermissions
from move_engine import apply_move


def test_standing_slice_disabled_by_default(status):
    assert not status.is_enabled("S")
    ok, msg = status.apply_move("S", "clockwise")
    assert not ok
    assert "Color shift issues" in msg
    assert status.move_count == 0
    # the bare engine still accepts it
    ok, _ = apply_move(status.state, "S", "clockwise")
    assert ok


def test_enabled_slices_exclude_standing(status):
    enabled = status.enabled_slices()
    assert Slice.S not in enabled
    assert len(enabled) == 8
    assert status.disabled_slices()[0]["slice"] == "S"


def test_toggle_requires_permission(status):
    assert status.toggle_rotation("S") is False
    assert not status.is_enabled("S")

    status.permissions.grant()
    assert status.toggle_rotation("S") is True
    ok, _ = status.apply_move("S", "clockwise")
    assert ok

    status.permissions.revoke()
    assert status.set_rotation_enabled("S", False) is False
    assert status.is_enabled("S")


def test_partial_grant(status):
    status.permissions.grant(can_disable=False)
    assert status.set_rotation_enabled("M", False) is False
    assert status.set_rotation_enabled("S", True) is True


def test_rotation_config_is_per_puzzle():
    a, b = CubeStatus(), CubeStatus()
    a.permissions.grant()
    a.set_rotation_enabled("S", True)
    assert a.is_enabled("S")
    assert not b.is_enabled("S")


def test_unknown_permission_rejected():
    with pytest.raises(KeyError):
        RotationPermissions().set(can_fly=True)


def test_apply_sequence_expands_doubles(status):
    ok, msg = status.apply_sequence("R U' F2")
    assert ok, msg
    assert status.move_count == 4


def test_apply_sequence_parses_before_moving(status):
    ok, _ = status.apply_sequence("R Q")
    assert not ok
    assert status.move_count == 0


def test_apply_sequence_stops_at_disabled_slice(status):
    ok, msg = status.apply_sequence(["R", "S", "U"])
    assert not ok
    assert msg.startswith("Move 2")
    assert status.move_count == 1


def test_scramble_is_reproducible_and_never_repeats_a_slice():
    a, b = CubeStatus(), CubeStatus()
    moves = a.scramble(40, seed=123)
    assert moves == b.scramble(40, seed=123)
    assert len(moves) == 40
    assert a.move_count == 40
    assert all(m.slice is not Slice.S for m in moves)
    assert all(x.slice != y.slice for x, y in zip(moves, moves[1:]))
    assert a.state.state_key() == b.state.state_key()


def test_scramble_length_validation(status):
    with pytest.raises(ValueError):
        status.scramble(-1)
    with pytest.raises(ValueError):
        status.scramble(config.MAX_SCRAMBLE_LENGTH + 1)
    with pytest.raises(ValueError):
        status.scramble(True)
    assert status.move_count == 0
    assert status.scramble(0) == []


def test_scramble_then_reverse_solves(status):
    status.scramble(25, seed=9)
    assert not status.is_solved()
    solution = status.solve_by_reversal()
    assert len(solution.moves) == 25
    ok, msg = status.apply_solution(solution)
    assert ok and msg == "Solved"
    assert status.is_solved()
    assert status.effective_history() == []


def test_failed_solution_is_not_applied(status):
    from app_types import Solution

    ok, msg = status.apply_solution(Solution(success=False, error="nope"))
    assert not ok
    assert msg == "nope"


def test_unknown_solve_method(status):
    with pytest.raises(ValueError):
        status.solve("guess")
    with pytest.raises(ValueError):
        status.solve(5)


def test_apply_sequence_rejects_non_notation(status):
    for bad in (5, [1], ["R", None], {"moves": "R"}):
        ok, msg = status.apply_sequence(bad)
        assert not ok
        assert "notation" in msg
    assert status.move_count == 0
    assert status.apply_sequence(["R", "U'"]) == (True, "Applied 2 moves")


def test_reset(status):
    status.apply_move("R", Direction.CLOCKWISE)
    status.reset()
    assert status.is_solved()
    assert status.state.state_key() == CubeState().state_key()


def test_snapshot_is_a_copy(status):
    snap = status.snapshot()
    assert len(snap) == 26
    snap[0]["colors"]["front"] = "purple"
    snap[0]["position"][0] = 9
    assert status.state.piece(0).colors["front"] == "white"
    assert status.state.piece(0).position == (-1, -1, -1)
