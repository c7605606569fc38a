import math

import numpy as np
import pytest

from nubot_sim3d.physics.shot_solver import (
    ShotMode, ShotParams, ShotRequest, clamp_force, make_request, solve_shot,
)

PARAMS = ShotParams()


class TestRunShot:

    def test_velocity_is_antiparallel_to_kick_vector(self):
        kick = np.array([0.6, 0.8, 0.0])
        result = solve_shot(ShotRequest(ShotMode.RUN, 5.0), (0, 0, 0), kick, (0.3, 0.4, 0.1))
        assert result.accepted
        v = result.velocity
        assert v[2] == 0.0
        cos = np.dot(v, kick) / (np.linalg.norm(v) * np.linalg.norm(kick))
        assert cos == pytest.approx(-1.0)

    def test_magnitude_scales_linearly_with_force(self):
        kick = (1.0, 0.0, 0.0)
        v1 = solve_shot(ShotRequest(ShotMode.RUN, 2.0), (0, 0, 0), kick, (0.3, 0, 0)).velocity
        v2 = solve_shot(ShotRequest(ShotMode.RUN, 6.0), (0, 0, 0), kick, (0.3, 0, 0)).velocity
        assert np.linalg.norm(v1) == pytest.approx(2.0 * PARAMS.run_gain)
        assert np.linalg.norm(v2) == pytest.approx(3.0 * np.linalg.norm(v1))

    def test_request_force_is_clamped_once(self):
        request = make_request(40.0, 1, max_force=15.0)
        assert request.force == 15.0
        v = solve_shot(request, (0, 0, 0), (1, 0, 0), (0.3, 0, 0)).velocity
        assert np.linalg.norm(v) == pytest.approx(15.0 * PARAMS.run_gain)

    def test_solver_uses_request_force_as_given(self):
        v = solve_shot(ShotRequest(ShotMode.RUN, 20.0), (0, 0, 0), (1, 0, 0), (0.3, 0, 0)).velocity
        assert np.linalg.norm(v) == pytest.approx(20.0 * PARAMS.run_gain)

    def test_vertical_kick_component_is_ignored(self):
        v = solve_shot(ShotRequest(ShotMode.RUN, 1.0), (0, 0, 0), (1, 0, 0.2), (0.3, 0, 0)).velocity
        assert v[2] == 0.0


class TestFlyShot:

    def test_symmetric_setup_matches_closed_form(self):
        # robot and ball on the goal axis, ball 5 m from the goal line
        result = solve_shot(ShotRequest(ShotMode.FLY, 10.0),
                            (3.6, 0.0, 0.0), (1.0, 0.0, 0.0), (4.0, 0.0, 0.11),
                            ShotParams(goal_x=9.0, clearance=0.8, gravity=9.8))
        assert result.accepted
        np.testing.assert_allclose(result.crosspoint, [9.0, 0.0], atol=1e-12)

        D, h, g = 5.0, 0.8, 9.8
        vx = D * math.sqrt(g / (2 * h)) / 2.0
        b = h / D + g * D / (2 * vx * vx)
        assert vx == pytest.approx(6.187184335, abs=1e-6)
        assert b == pytest.approx(0.8, abs=1e-9)
        np.testing.assert_allclose(result.velocity, [-vx, 0.0, b * vx], atol=1e-9)

    def test_force_does_not_change_fly_velocity(self):
        args = ((3.6, 0.0, 0.0), (1.0, 0.0, 0.0), (4.0, 0.0, 0.11))
        low = solve_shot(ShotRequest(ShotMode.FLY, 1.0), *args).velocity
        high = solve_shot(ShotRequest(ShotMode.FLY, 15.0), *args).velocity
        np.testing.assert_allclose(low, high)

    def test_negative_kick_direction_targets_other_goal(self):
        result = solve_shot(ShotRequest(ShotMode.FLY, 10.0),
                            (-3.6, 0.0, 0.0), (-1.0, 0.0, 0.0), (-4.0, 0.0, 0.11))
        assert result.accepted
        assert result.crosspoint[0] == pytest.approx(-9.0)
        assert result.velocity[0] > 0

    def test_far_lateral_crosspoint_is_rejected(self):
        kick = np.array([1.0, 2.5, 0.0]) / math.hypot(1.0, 2.5)
        result = solve_shot(ShotRequest(ShotMode.FLY, 10.0), (0, 0, 0), kick, kick * 0.3)
        assert not result.accepted
        assert result.velocity is None
        assert abs(result.crosspoint[1]) >= 10.0

    def test_kick_parallel_to_goal_line_is_rejected(self):
        result = solve_shot(ShotRequest(ShotMode.FLY, 10.0), (0, 0, 0), (0, 1, 0), (0, 0.3, 0))
        assert not result.accepted
        assert result.velocity is None

    def test_ball_on_goal_line_is_rejected(self):
        result = solve_shot(ShotRequest(ShotMode.FLY, 10.0), (8.6, 0, 0), (1, 0, 0), (9.0, 0, 0))
        assert not result.accepted


def test_clamp_force():
    assert clamp_force(20.0, 15.0) == 15.0
    assert clamp_force(-1.0, 15.0) == 0.0
    assert clamp_force(7.5, 15.0) == 7.5


def test_make_request_rejects_unknown_mode():
    assert make_request(5, -1).mode is ShotMode.FLY
    assert make_request(50, 1).force == 15.0
    with pytest.raises(ValueError):
        make_request(5, 0)
