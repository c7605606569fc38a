import pytest

from nubot_sim3d.physics.stuck_detector import StuckDetector, StuckFilterState

FORWARD = (1.0, 0.0, 0.0)
NO_SPIN = (0.0, 0.0, 0.0)
STILL = (0.0, 0.0, 0.0)


def run(detector, state, times, observed_linear=STILL, observed_angular=STILL,
        linear=FORWARD, angular=NO_SPIN):
    result = None
    for _ in range(times):
        detector.arm(state, linear, angular)
        result = detector.evaluate(state, observed_linear, observed_angular)
    return result


def test_unarmed_detector_reports_unknown():
    detector = StuckDetector()
    state = StuckFilterState()
    assert detector.evaluate(state, STILL, STILL) is None
    assert state.consecutive_count == 0


def test_latches_after_sustained_stall():
    detector = StuckDetector(scale=0.5, tick_limit=40)
    state = StuckFilterState()
    assert run(detector, state, 41) is False
    assert state.consecutive_count == 40
    assert run(detector, state, 1) is True
    assert state.consecutive_count == 0


def test_full_motion_resets_streak():
    detector = StuckDetector(scale=0.5, tick_limit=40)
    state = StuckFilterState()
    run(detector, state, 42)
    assert state.is_stuck is True

    assert run(detector, state, 1, observed_linear=FORWARD) is False
    assert state.was_stuck_last_tick is False

    run(detector, state, 1)
    assert state.consecutive_count == 0


def test_evaluation_disarms():
    detector = StuckDetector(tick_limit=0)
    state = StuckFilterState()
    run(detector, state, 1)
    count = state.consecutive_count
    assert detector.evaluate(state, STILL, STILL) is False
    assert state.consecutive_count == count
    assert state.armed is False


def test_unarmed_returns_last_status():
    detector = StuckDetector(tick_limit=1)
    state = StuckFilterState()
    run(detector, state, 3)
    assert state.is_stuck is True
    assert detector.evaluate(state, FORWARD, STILL) is True


def test_rotation_stall_is_detected():
    detector = StuckDetector(tick_limit=2)
    state = StuckFilterState()
    result = run(detector, state, 4, observed_linear=FORWARD,
                 angular=(0.0, 0.0, 2.0), observed_angular=(0.0, 0.0, 0.1))
    assert result is True


def test_zero_command_is_never_stuck():
    detector = StuckDetector(tick_limit=0)
    state = StuckFilterState()
    assert run(detector, state, 5, linear=STILL, angular=NO_SPIN) is False


def test_half_speed_is_not_a_stall():
    detector = StuckDetector(scale=0.5, tick_limit=0)
    state = StuckFilterState()
    assert run(detector, state, 3, observed_linear=(0.5, 0.0, 0.0)) is False


def test_invalid_parameters():
    with pytest.raises(ValueError):
        StuckDetector(scale=0.0)
    with pytest.raises(ValueError):
        StuckDetector(tick_limit=-1)
