"""
body_state.py — Tipe data state rigid body (pure data, tanpa ROS/Gazebo).

    Pose          : position (m) + orientation quaternion (x, y, z, w)
    Twist         : linear (m/s) + angular (rad/s)
    BodyState     : nama model + Pose + Twist
    WorldSnapshot : semua body dari pose source pada satu sim time
"""

from dataclasses import dataclass, field

import numpy as np


def _vec3(values) -> np.ndarray:
    v = np.asarray(values, dtype=float).reshape(-1)
    if v.size != 3:
        raise ValueError(f"expected 3 components, got {v.size}")
    return v


@dataclass
class Pose:
    """Posisi + orientasi. Quaternion selalu dinormalisasi."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(
        default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))

    def __post_init__(self):
        self.position = _vec3(self.position)
        q = np.asarray(self.orientation, dtype=float).reshape(-1)
        if q.size != 4:
            raise ValueError(f"quaternion needs 4 components, got {q.size}")
        n = np.linalg.norm(q)
        if n < 1e-12:
            raise ValueError("zero quaternion is not a valid rotation")
        self.orientation = q / n


@dataclass
class Twist:
    linear: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.linear = _vec3(self.linear)
        self.angular = _vec3(self.angular)


@dataclass
class BodyState:
    name: str
    pose: Pose = field(default_factory=Pose)
    twist: Twist = field(default_factory=Twist)

    @property
    def position(self) -> np.ndarray:
        return self.pose.position

    @property
    def linear_velocity(self) -> np.ndarray:
        return self.twist.linear


@dataclass
class WorldSnapshot:
    """Snapshot semua model dari simulator (world frame mentah)."""

    bodies: list[BodyState] = field(default_factory=list)
    stamp: float = 0.0

    def find(self, name: str) -> BodyState | None:
        """Cari body berdasarkan nama persis, None jika tidak ada."""
        for body in self.bodies:
            if body.name == name:
                return body
        return None
