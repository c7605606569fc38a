"""Shared fixtures: snapshot builder (robot-convention coordinates) & fake actuator."""

import math

import numpy as np
import pytest

from nubot_sim3d.controller import BodyActuator, RivalController
from nubot_sim3d.physics.body_state import BodyState, Pose, Twist, WorldSnapshot


def yaw_quaternion(yaw: float) -> list[float]:
    return [0.0, 0.0, math.sin(yaw / 2.0), math.cos(yaw / 2.0)]


def body(name, position, yaw=0.0, linear=(0.0, 0.0, 0.0), angular=(0.0, 0.0, 0.0),
         mirror=True):
    """BodyState in simulator world frame from robot-convention coordinates.

    With the 180° convention the kick vector of a robot with world yaw θ is
    (cos θ, sin θ), and positions/velocities only flip their x, y sign.
    """
    p = np.array(position, dtype=float)
    if p.size == 2:
        p = np.append(p, 0.0)
    v = np.array(linear, dtype=float)
    if mirror:
        p[:2] *= -1.0
        v[:2] *= -1.0
    return BodyState(name, Pose(p, yaw_quaternion(yaw)), Twist(v, angular))


def make_snapshot(robot=(0.0, 0.0), kick_yaw=0.0, ball=(0.3, 0.0, 0.11),
                  ball_velocity=(0.0, 0.0, 0.0), robot_linear=(0.0, 0.0, 0.0),
                  robot_angular=(0.0, 0.0, 0.0), others=(), robot_name="rival1",
                  ball_name="football", stamp=1.0):
    bodies = [
        body(robot_name, robot, kick_yaw, robot_linear, robot_angular),
        body(ball_name, ball, 0.0, ball_velocity),
    ]
    bodies.extend(body(name, pos) for name, pos in others)
    return WorldSnapshot(bodies, stamp)


class FakeActuator(BodyActuator):
    """Records every actuation call."""

    def __init__(self):
        self.robot_velocity = []
        self.ball_velocity = []
        self.ball_pose = []
        self.ball_force = []
        self.snapshots = []
        self.flushes = 0

    def begin(self, snapshot):
        self.snapshots.append(snapshot)

    def set_robot_velocity(self, linear, angular):
        self.robot_velocity.append((np.array(linear), np.array(angular)))

    def set_ball_velocity(self, linear):
        self.ball_velocity.append(np.array(linear))

    def set_ball_pose(self, position, orientation):
        self.ball_pose.append((np.array(position), np.array(orientation)))

    def apply_ball_force(self, force):
        self.ball_force.append(np.array(force))

    def flush(self):
        self.flushes += 1


@pytest.fixture
def actuator():
    return FakeActuator()


@pytest.fixture
def controller(actuator):
    return RivalController(actuator)
