"""
controller.py — Tick loop untuk satu robot: possession, stuck, dribble,
shoot, ball decay (tanpa ROS; ROS glue ada di rival_node.py).

Alur per tick (lock dipegang dari awal sampai akhir):
    snapshot → FrameTransform → perintah gerak tertunda → possession/stuck
    → bola keluar? → dribble / shoot → telemetry → decay (jika free-roll)

Callback asinkron (model_states, velcmd, service) hanya menyimpan snapshot
atau request flag; semua aksi fisik terjadi di tick().
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from nubot_sim3d.objects.field import GRAVITY, BallConfig, FieldConfig
from nubot_sim3d.objects.robot import RobotConfig
from nubot_sim3d.objects.vision_info import CM2M, VisionInfo, build_vision_info
from nubot_sim3d.physics.ball_decay import BallDecayModel, DecayState, DecayStep
from nubot_sim3d.physics.body_state import WorldSnapshot
from nubot_sim3d.physics.frame_transform import FrameTransform, GaussianNoise, RobotFrame
from nubot_sim3d.physics.possession import PossessionStatus, check_possession
from nubot_sim3d.physics.shot_solver import (
    ShotParams, ShotRequest, ShotResult, make_request, solve_shot,
)
from nubot_sim3d.physics.stuck_detector import StuckDetector, StuckFilterState

Z_AXIS = np.array([0.0, 0.0, 1.0])


# ======================================================================
# BodyActuator — sink aksi ke rigid body simulator
# ======================================================================

class BodyActuator(ABC):
    """Semua argumen dalam frame simulator (world), SI unit."""

    @abstractmethod
    def set_robot_velocity(self, linear: np.ndarray, angular: np.ndarray):
        ...

    @abstractmethod
    def set_ball_velocity(self, linear: np.ndarray):
        ...

    @abstractmethod
    def set_ball_pose(self, position: np.ndarray, orientation: np.ndarray):
        ...

    @abstractmethod
    def apply_ball_force(self, force: np.ndarray):
        ...

    def begin(self, snapshot: WorldSnapshot):
        """Awal tick: snapshot yang dipakai tick ini (opsional)."""

    def flush(self):
        """Kirim aksi yang di-batch selama tick (opsional)."""


@dataclass
class VelocityCommand:
    vx: float      # cm/s, maju (arah kicker)
    vy: float      # cm/s, lateral
    w: float       # rad/s


@dataclass
class TickResult:
    waiting: bool = False
    possession: PossessionStatus | None = None
    is_stuck: bool | None = None
    dribbled: bool = False
    shot: ShotResult | None = None
    ball_reset: bool = False
    decay: DecayStep | None = None
    vision: VisionInfo | None = None


# ======================================================================
# RivalController
# ======================================================================

class RivalController:
    """Decision & physical-interaction logic untuk satu robot."""

    def __init__(self, actuator: BodyActuator,
                 robot_cfg: RobotConfig | None = None,
                 field_cfg: FieldConfig | None = None,
                 ball_cfg: BallConfig | None = None,
                 noise: GaussianNoise | None = None,
                 logger=None):
        """
        Parameters
        ----------
        actuator : BodyActuator
            Sink untuk set velocity/pose dan gaya ke simulator.
        robot_cfg, field_cfg, ball_cfg
            Konfigurasi; None = default.
        noise : GaussianNoise | None
            Noise opsional pada pose source.
        logger
            Logger dengan method debug/info/warning/error (rclpy node logger
            atau logging.Logger).
        """
        self.actuator = actuator
        self.robot_cfg = robot_cfg or RobotConfig()
        self.field_cfg = field_cfg or FieldConfig()
        self.ball_cfg = ball_cfg or BallConfig()
        self.logger = logger or logging.getLogger(__name__)

        self.frame_transform = FrameTransform(
            self.robot_cfg.name, self.ball_cfg.name,
            kick_vector_body=self.robot_cfg.kick_vector_body,
            rotate_180_about_z=self.robot_cfg.rotate_180_about_z,
            noise=noise)
        self.stuck_detector = StuckDetector(
            self.robot_cfg.stuck_scale, self.robot_cfg.stuck_tick_limit)
        self.decay_model = BallDecayModel(
            mu=self.ball_cfg.mu, mass=self.ball_cfg.mass, gravity=GRAVITY,
            ground_height=self.ball_cfg.ground_height,
            stop_speed=self.ball_cfg.stop_speed,
            dt=self.ball_cfg.tick_period)
        self.shot_params = ShotParams(
            run_gain=self.robot_cfg.run_gain,
            goal_x=self.field_cfg.goal_x,
            clearance=self.field_cfg.clearance,
            gravity=GRAVITY,
            fly_speed_fraction=self.robot_cfg.fly_speed_fraction,
            max_crosspoint_y=self.robot_cfg.max_crosspoint_y)

        self._lock = threading.Lock()
        self.reset()

    @property
    def name(self) -> str:
        return self.robot_cfg.name

    def reset(self):
        """Kembalikan semua state ke kondisi awal (world reset)."""
        self._snapshot: WorldSnapshot | None = None
        self._pending_command: VelocityCommand | None = None
        self._dribble_requested = False
        self._shot_request: ShotRequest | None = None
        self._possession: PossessionStatus | None = None
        self._ball_imposed = False
        self.stuck_state = StuckFilterState()
        self.decay_state = DecayState()

    # ------------------------------------------------------------------
    # Input asinkron (dipanggil dari thread callback)
    # ------------------------------------------------------------------

    def update_world(self, snapshot: WorldSnapshot):
        with self._lock:
            self._snapshot = snapshot

    def set_dribble_thresholds(self, distance: float | None = None,
                               angle_deg: float | None = None):
        with self._lock:
            if distance is not None:
                self.robot_cfg.dribble_distance_thres = float(distance)
            if angle_deg is not None:
                self.robot_cfg.dribble_angle_thres = float(angle_deg)

    def handle_velocity_command(self, vx: float, vy: float, w: float):
        """Simpan perintah gerak (cm/s, cm/s, rad/s); dieksekusi tick berikutnya."""
        with self._lock:
            self._pending_command = VelocityCommand(vx, vy, w)

    def _is_holding(self) -> bool:
        return self._possession is not None and self._possession.possessing

    def handle_ball_handle(self, enable: bool) -> bool:
        """Request dribble. Return True jika bola sedang dipegang."""
        with self._lock:
            holding = self._is_holding()
            if not enable:
                self._dribble_requested = False
                return holding

            if not holding:
                self._dribble_requested = False
                p = self._possession
                if p is None:
                    self.logger.info(f"[{self.name}] dribble: no possession data yet")
                else:
                    self.logger.info(
                        f"[{self.name}] dribble: cannot dribble ball. "
                        f"angle error: {p.angle_error_deg:.2f} distance: {p.distance:.3f}")
                return False

            self._dribble_requested = True
            return True

    def handle_shoot(self, strength: float, mode) -> bool:
        """Request shoot. Return True jika diterima."""
        with self._lock:
            self._shot_request = None
            max_force = self.robot_cfg.max_shot_force
            try:
                request = make_request(strength, mode, max_force)
            except (TypeError, ValueError):
                self.logger.error(f"[{self.name}] shoot: incorrect mode {mode!r}")
                return False

            if float(strength) > max_force:
                self.logger.warning(
                    f"[{self.name}] shoot: force {float(strength):.2f} too great, "
                    f"clamped to {max_force:.2f}")

            if request.force <= 0.0:
                # force 0 = kicker selesai charging, tidak ada aksi
                return True

            if not self._is_holding():
                return False

            self._dribble_requested = False
            self._shot_request = request
            self.logger.info(
                f"[{self.name}] shoot accepted: mode={request.mode.name} "
                f"force={request.force:.2f}")
            return True

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> TickResult:
        """Satu langkah simulasi: read → compute → apply di bawah satu lock."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None:
                self.logger.debug(f"[{self.name}] waiting for model_states messages")
                return TickResult(waiting=True)

            frame = self.frame_transform.transform(snapshot)
            if frame is None:
                self.logger.warning(
                    f"[{self.name}] model '{self.robot_cfg.name}' or "
                    f"'{self.ball_cfg.name}' not in model_states, skipping tick")
                return TickResult(waiting=True)

            result = TickResult()
            self._ball_imposed = False
            self.actuator.begin(snapshot)

            self._apply_pending_command(frame)
            self._possession = check_possession(
                frame.ball_vector, frame.kick_vector,
                angle_thres_deg=self.robot_cfg.dribble_angle_thres,
                distance_thres=self.robot_cfg.dribble_distance_thres)
            result.possession = self._possession
            result.is_stuck = self.stuck_detector.evaluate(
                self.stuck_state, frame.robot.twist.linear, frame.robot.twist.angular)

            result.ball_reset = self._detect_ball_out(frame)

            if frame.robot.position[2] < self.robot_cfg.airborne_height:
                if self._dribble_requested:
                    self._dribble_ball(frame)
                    result.dribbled = True
                if self._shot_request is not None:
                    result.shot = self._kick_ball(frame, self._shot_request)
                    self._shot_request = None
            else:
                self.logger.warning(
                    f"[{self.name}] in the air (z={frame.robot.position[2]:.2f})")

            result.vision = build_vision_info(
                frame, self.robot_cfg.cyan_prefix, self.robot_cfg.magenta_prefix,
                is_stuck=result.is_stuck)

            if not self._ball_imposed:
                result.decay = self._decay_ball(frame)

            self.actuator.flush()
            return result

    # ------------------------------------------------------------------
    # Aksi
    # ------------------------------------------------------------------

    def _impose_ball_velocity(self, velocity: np.ndarray):
        """Set velocity bola → bukan free-roll lagi pada tick ini."""
        self.actuator.set_ball_velocity(velocity)
        self._ball_imposed = True
        self.decay_state.reset()

    def _apply_pending_command(self, frame: RobotFrame):
        cmd = self._pending_command
        if cmd is None:
            return
        self._pending_command = None

        # Tanda minus + kick vector frame konvensi → vektor frame simulator
        vx = -cmd.vx * CM2M
        vy = -cmd.vy * CM2M
        k = frame.kick_vector
        linear = vx * k + vy * np.cross(Z_AXIS, k)
        linear[2] = 0.0
        angular = np.array([0.0, 0.0, cmd.w])

        self.actuator.set_robot_velocity(linear, angular)
        self.stuck_detector.arm(self.stuck_state, linear, angular)

    def _detect_ball_out(self, frame: RobotFrame) -> bool:
        x, y = frame.ball.position[0], frame.ball.position[1]
        if not self.field_cfg.is_out(x, y):
            return False
        target = self.frame_transform.to_world(
            np.array(self.field_cfg.reset_position(x, y)))
        self._impose_ball_velocity(np.zeros(3))
        self.actuator.set_ball_pose(target, np.array([0.0, 0.0, 0.0, 1.0]))
        self.logger.info(
            f"[{self.name}] ball out at ({x:.2f}, {y:.2f}), reset to "
            f"({target[0]:.2f}, {target[1]:.2f})")
        return True

    def _dribble_ball(self, frame: RobotFrame):
        """Tempel bola di depan kicker, ikut bergerak bersama robot."""
        target = frame.robot.position + frame.kick_vector * self.robot_cfg.dribble_offset
        target[2] = frame.ball.position[2]
        orientation = self.frame_transform.orientation_to_world(
            frame.robot.pose.orientation)
        velocity = self.frame_transform.to_world(frame.robot.twist.linear)
        velocity[2] = 0.0

        self.actuator.set_ball_pose(self.frame_transform.to_world(target), orientation)
        self._impose_ball_velocity(velocity)

    def _kick_ball(self, frame: RobotFrame, request: ShotRequest) -> ShotResult:
        shot = solve_shot(request, frame.robot.position, frame.kick_vector,
                          frame.ball.position, self.shot_params)
        if not shot.accepted:
            self.logger.error(f"[{self.name}] CANNOT SHOOT: {shot.reason}")
            return shot

        self._impose_ball_velocity(shot.velocity)
        v = shot.velocity
        self.logger.info(
            f"[{self.name}] kick {request.mode.name}: force={request.force:.2f} "
            f"vel=({v[0]:.2f}, {v[1]:.2f}, {v[2]:.2f})")
        return shot

    def _decay_ball(self, frame: RobotFrame) -> DecayStep:
        velocity = self.frame_transform.to_world(frame.ball.twist.linear)
        step = self.decay_model.step(
            self.decay_state, velocity, frame.ball.position[2])
        if step.stop:
            self.actuator.set_ball_velocity(np.zeros(3))
        elif step.force is not None:
            self.actuator.apply_ball_force(step.force)
        return step
