"""
frame_transform.py — Konversi snapshot world frame (Gazebo) ke frame robot.

Konvensi deployment (bukan hukum fisika, bisa dimatikan lewat config):
    rotate_180_about_z = True
        posisi & linear velocity : (x, y, z) → (−x, −y, z)
        orientasi robot           : q → q ⊗ Rz(180°)
        orientasi bola, angular   : tidak diubah

Kick vector = R(orientasi robot) · kick_vector_body, yaitu arah dari pusat
robot ke mekanisme kicker. kick_vector_body ditentukan oleh model fisik robot.

Semua fungsi pure: snapshot yang sama → hasil yang sama (kecuali noise aktif).
"""

from dataclasses import dataclass, field

import numpy as np
from scipy.spatial.transform import Rotation

from nubot_sim3d.physics.body_state import BodyState, Pose, Twist, WorldSnapshot


def rotate_180_z(orientation: np.ndarray) -> np.ndarray:
    """q ⊗ Rz(180°) untuk quaternion (x, y, z, w)."""
    x, y, z, w = orientation
    return np.array([y, -x, w, -z])


def yaw_of(orientation: np.ndarray) -> float:
    """Heading (rad) dari quaternion (x, y, z, w)."""
    return float(Rotation.from_quat(orientation).as_euler('zyx')[0])


# ======================================================================
# GaussianNoise — model noise opsional untuk pose source
# ======================================================================

class GaussianNoise:
    """Noise Gaussian pada x/y posisi & linear velocity (dan ω_z robot)."""

    def __init__(self, sigma: float = 0.0167, seed: int | None = None):
        """
        Parameters
        ----------
        sigma : float
            Standar deviasi noise (meter, m/s, rad/s).
        seed : int | None
            Seed untuk np.random.default_rng, agar bisa direproduksi.
        """
        self.sigma = sigma
        self.rng = np.random.default_rng(seed)

    def perturb(self, body: BodyState, angular_z: bool = False) -> BodyState:
        position = body.pose.position.copy()
        linear = body.twist.linear.copy()
        angular = body.twist.angular.copy()
        position[:2] += self.sigma * self.rng.standard_normal(2)
        linear[:2] += self.sigma * self.rng.standard_normal(2)
        if angular_z:
            angular[2] += self.sigma * self.rng.standard_normal()
        return BodyState(body.name,
                         Pose(position, body.pose.orientation.copy()),
                         Twist(linear, angular))


# ======================================================================
# RobotFrame — hasil transform satu tick
# ======================================================================

@dataclass
class RobotFrame:
    """Besaran turunan untuk satu tick (frame konvensi robot)."""

    robot: BodyState
    ball: BodyState
    kick_vector: np.ndarray           # unit, world/convention frame
    ball_vector: np.ndarray           # bola − robot (3D)
    others: list[BodyState] = field(default_factory=list)
    raw: WorldSnapshot | None = None

    @property
    def ball_distance(self) -> float:
        return float(np.linalg.norm(self.ball_vector))

    @property
    def kick_vector_planar(self) -> np.ndarray:
        k = self.kick_vector.copy()
        k[2] = 0.0
        return k


class FrameTransform:
    """Mengubah WorldSnapshot mentah menjadi RobotFrame."""

    def __init__(self, robot_name: str, ball_name: str,
                 kick_vector_body=(-1.0, 0.0, 0.0),
                 rotate_180_about_z: bool = True,
                 noise: GaussianNoise | None = None):
        """
        Parameters
        ----------
        robot_name, ball_name : str
            Nama model di simulator.
        kick_vector_body : sequence of 3 float
            Arah pusat robot → kicker di frame body robot.
        rotate_180_about_z : bool
            Aktifkan konvensi rotasi 180° terhadap sumbu Z.
        noise : GaussianNoise | None
            Model noise opsional; None = data eksak.
        """
        k = np.asarray(kick_vector_body, dtype=float).reshape(-1)
        n = np.linalg.norm(k)
        if k.size != 3 or n < 1e-9:
            raise ValueError("kick_vector_body must be a non-zero 3-vector")
        self.robot_name = robot_name
        self.ball_name = ball_name
        self.kick_vector_body = k / n
        self.rotate_180_about_z = rotate_180_about_z
        self.noise = noise

    # ------------------------------------------------------------------
    # World ↔ convention
    # ------------------------------------------------------------------

    def to_world(self, vec) -> np.ndarray:
        """Vektor/posisi frame konvensi → frame simulator (involusi)."""
        v = np.asarray(vec, dtype=float).copy()
        if self.rotate_180_about_z:
            v[0] = -v[0]
            v[1] = -v[1]
        return v

    from_world = to_world

    def orientation_to_world(self, orientation: np.ndarray) -> np.ndarray:
        if self.rotate_180_about_z:
            return rotate_180_z(orientation)
        return np.asarray(orientation, dtype=float).copy()

    def _convert(self, body: BodyState, is_robot: bool) -> BodyState:
        orientation = body.pose.orientation.copy()
        if is_robot and self.rotate_180_about_z:
            orientation = rotate_180_z(orientation)
        return BodyState(
            body.name,
            Pose(self.from_world(body.pose.position), orientation),
            Twist(self.from_world(body.twist.linear), body.twist.angular.copy()),
        )

    # ------------------------------------------------------------------

    def kick_vector(self, orientation: np.ndarray) -> np.ndarray:
        """R(q) · kick_vector_body."""
        return Rotation.from_quat(orientation).apply(self.kick_vector_body)

    def transform(self, snapshot: WorldSnapshot) -> RobotFrame | None:
        """Hitung RobotFrame; None jika robot/bola tidak ada di snapshot."""
        robot_raw = snapshot.find(self.robot_name)
        ball_raw = snapshot.find(self.ball_name)
        if robot_raw is None or ball_raw is None:
            return None

        if self.noise is not None:
            robot_raw = self.noise.perturb(robot_raw, angular_z=True)
            ball_raw = self.noise.perturb(ball_raw)

        robot = self._convert(robot_raw, is_robot=True)
        ball = self._convert(ball_raw, is_robot=False)
        others = [self._convert(b, is_robot=False) for b in snapshot.bodies
                  if b.name not in (self.robot_name, self.ball_name)]

        return RobotFrame(
            robot=robot,
            ball=ball,
            kick_vector=self.kick_vector(robot.pose.orientation),
            ball_vector=ball.position - robot.position,
            others=others,
            raw=snapshot,
        )
