import math

import pytest

from kinematics.linkage import LinkageState, distance
from kinematics.solvers import (
    AnalyticTwoLink,
    Solver,
    UnknownSolverError,
    get_solver,
    solve,
    solve_state,
)

TOL = 1e-4


def _assert_consistent(first, second, clamped, joints):
    base, elbow, end = joints
    assert base == (0.0, 0.0)
    for p in joints:
        assert not any(math.isnan(c) for c in p)
    assert distance(base, elbow) == pytest.approx(first, abs=TOL)
    assert distance(elbow, end) == pytest.approx(second, abs=TOL)
    assert distance(base, end) == pytest.approx(clamped, abs=TOL)
    assert abs(first - second) - TOL <= clamped <= first + second + TOL


@pytest.mark.parametrize("first, second", [(128.0, 128.0), (200.0, 50.0), (50.0, 200.0), (0.001, 256.0)])
@pytest.mark.parametrize("angle", [0.0, 1.0, math.pi, 5.5])
@pytest.mark.parametrize("requested", [0.0, 10.0, 120.0, 249.9, 1000.0])
def test_segment_lengths_preserved(first, second, angle, requested):
    clamped, joints = solve(first, second, angle, requested)
    _assert_consistent(first, second, clamped, joints)


def test_upper_clamp():
    phi = 0.7
    clamped, (_, elbow, end) = solve(128.0, 128.0, phi, 500.0)
    assert clamped == 256.0
    assert end == pytest.approx((256.0 * math.cos(phi), 256.0 * math.sin(phi)))
    assert elbow == pytest.approx((128.0 * math.cos(phi), 128.0 * math.sin(phi)))


@pytest.mark.parametrize("first, second", [(200.0, 50.0), (50.0, 200.0)])
def test_lower_clamp_is_symmetric(first, second):
    clamped, joints = solve(first, second, 0.0, 10.0)
    assert clamped == 150.0
    _assert_consistent(first, second, clamped, joints)


def test_straight_line():
    clamped, (_, elbow, end) = solve(100.0, 100.0, 0.0, 200.0)
    assert clamped == 200.0
    assert elbow == pytest.approx((100.0, 0.0), abs=TOL)
    assert end == pytest.approx((200.0, 0.0), abs=TOL)


def test_equal_links_folded_onto_base():
    clamped, (base, elbow, end) = solve(100.0, 100.0, 0.0, 0.0)
    assert clamped == 0.0
    assert end == pytest.approx((0.0, 0.0), abs=TOL)
    assert elbow == pytest.approx((100.0, 0.0), abs=TOL)


@pytest.mark.parametrize(
    "first, second, requested",
    [
        (0.1, 0.2, 0.1 + 0.2),
        (0.3, 0.1, 0.3 - 0.1),
        (0.1, 0.3, 0.3 - 0.1),
        (123.456, 78.9, 123.456 + 78.9),
        (123.456, 78.9, 123.456 - 78.9),
    ],
)
def test_boundary_is_stable(first, second, requested):
    clamped, joints = solve(first, second, 2.0, requested)
    _assert_consistent(first, second, clamped, joints)


@pytest.mark.parametrize("scale", [1.0, 1e-3, 1e-7, 1e-12])
def test_segment_lengths_independent_of_scale(scale):
    first, second = 1.0 * scale, 2.0 * scale
    clamped, (base, elbow, end) = solve(first, second, 0.5, 2.0 * scale)
    assert clamped == 2.0 * scale
    assert distance(base, elbow) == pytest.approx(first, rel=1e-9)
    assert distance(elbow, end) == pytest.approx(second, rel=1e-9)
    assert distance(base, end) == pytest.approx(clamped, rel=1e-9)


def test_base_angle_clamps_ratio():
    # Slightly past full extension without going through the distance clamp.
    assert AnalyticTwoLink.base_angle(1.0, 1.0, 2.0 + 1e-12) == 0.0


def test_solve_is_deterministic():
    assert solve(30.0, 40.0, 1.2, 55.0) == solve(30.0, 40.0, 1.2, 55.0)


def test_solve_state_returns_new_clamped_state():
    state = LinkageState.initial(200.0, 50.0).with_request(target_distance=10.0)
    solved = solve_state(state)
    assert solved is not state
    assert state.target_distance == 10.0
    assert solved.target_distance == 150.0
    _assert_consistent(200.0, 50.0, solved.target_distance, solved.joints)


def test_solve_state_uses_given_solver():
    class Folded(Solver):
        name = "folded"

        def solve(self, first_length, second_length, direction_angle, requested_distance):
            return 0.0, ((0.0, 0.0), (first_length, 0.0), (0.0, 0.0))

    solved = solve_state(LinkageState.initial(1.0, 1.0), Folded())
    assert solved.target_distance == 0.0
    assert solved.elbow == (1.0, 0.0)


def test_get_solver():
    assert isinstance(get_solver("analytic"), AnalyticTwoLink)
    with pytest.raises(UnknownSolverError):
        get_solver("fabrik")
