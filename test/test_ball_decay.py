import numpy as np
import pytest

from nubot_sim3d.physics.ball_decay import BallDecayModel, DecayState


@pytest.fixture
def model():
    return BallDecayModel(mu=0.3, mass=0.41, gravity=9.8, ground_height=0.12)


def test_friction_opposes_velocity(model):
    state = DecayState()
    step = model.step(state, (3.0, 4.0, 0.0), height=0.11)
    assert not step.stop
    np.testing.assert_allclose(step.force, np.array([-0.6, -0.8, 0.0]) * 0.3 * 0.41 * 9.8)
    assert state.last_speed == pytest.approx(5.0)


def test_decelerating_ball_keeps_decaying(model):
    state = DecayState(last_speed=2.0)
    assert model.step(state, (1.5, 0.0, 0.0), height=0.11).force is not None


def test_accelerating_ball_gets_no_force(model):
    state = DecayState(last_speed=1.0)
    step = model.step(state, (2.0, 0.0, 0.0), height=0.11)
    assert step.force is None and not step.stop
    assert state.last_speed == pytest.approx(2.0)


def test_airborne_ball_gets_no_force(model):
    state = DecayState()
    step = model.step(state, (2.0, 0.0, 1.0), height=0.8)
    assert step.force is None


def test_zero_crossing_stops_once(model):
    state = DecayState()
    model.step(state, (0.5, 0.0, 0.0), height=0.11)

    step = model.step(state, (0.0, 0.0, 0.0), height=0.11)
    assert step.stop
    assert step.force is None

    for _ in range(3):
        step = model.step(state, (0.0, 0.0, 0.0), height=0.11)
        assert not step.stop
        assert step.force is None


def test_ball_at_rest_needs_no_stop(model):
    state = DecayState()
    step = model.step(state, (0.0, 0.0, 0.0), height=0.11)
    assert not step.stop and step.force is None


def test_reset_forgets_last_speed(model):
    state = DecayState(last_speed=3.0)
    state.reset()
    assert state.last_speed is None
    assert model.friction_force == pytest.approx(0.3 * 0.41 * 9.8)


def test_friction_brings_rolling_ball_to_rest(model):
    """Integrasi v += F/m·dt: bola harus berhenti, bukan bolak-balik di sekitar nol."""
    state = DecayState()
    v = np.array([1.0, 0.0, 0.0])
    stops = 0
    for _ in range(2000):
        step = model.step(state, v, height=0.11)
        if step.stop:
            stops += 1
            v = np.zeros(3)
        elif step.force is not None:
            v = v + step.force / model.mass * model.dt
    assert stops == 1
    assert np.linalg.norm(v) == 0.0


def test_halt_speed_matches_one_tick_of_friction(model):
    assert model.halt_speed == pytest.approx(0.3 * 9.8 * 0.01)
    assert BallDecayModel(dt=1e-6).halt_speed == pytest.approx(1e-4)
    with pytest.raises(ValueError):
        BallDecayModel(dt=0.0)


def test_reversal_after_slow_roll_stops(model):
    state = DecayState()
    model.step(state, (0.02, 0.0, 0.0), height=0.11)
    step = model.step(state, (-0.009, 0.0, 0.0), height=0.11)
    assert step.stop and step.force is None
    assert state.last_speed == 0.0


def test_fast_bounce_is_not_a_stop(model):
    state = DecayState()
    model.step(state, (2.0, 0.0, 0.0), height=0.11)
    step = model.step(state, (-1.5, 0.0, 0.0), height=0.11)
    assert not step.stop
    assert step.force is not None


def test_slow_ball_in_the_air_is_not_stopped(model):
    state = DecayState()
    model.step(state, (0.0, 0.0, 0.05), height=0.8)
    step = model.step(state, (0.0, 0.0, 0.01), height=0.9)
    assert not step.stop
