"""
shot_solver.py — Hitung kecepatan awal bola untuk aksi shoot.

Dua mode:
    RUN (1)  : bola meluncur di tanah searah −kick_vector, |v| = force × run_gain
    FLY (−1) : lintasan parabola dari posisi bola ke garis gawang x = ±goal_x,
               mencapai tinggi `clearance` di tengah lintasan

Parabola (x = jarak horizontal dari bola):
    y = a·x² + b·x,  a = −g / (2·vx²),  b = h/D + g·D / (2·vx²)
    vx_thres = D · sqrt(g / (2h)),  vx = vx_thres · fly_speed_fraction

Velocity yang dihasilkan dalam frame simulator; dengan konvensi rotasi 180°
arah luncur bola = −kick_vector (frame konvensi).
Solver pure — tidak menyentuh state robot/bola.
"""

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from nubot_sim3d.physics.geometry import EPS, Line, distance2d, planar


class ShotMode(Enum):
    RUN = 1
    FLY = -1


@dataclass(frozen=True)
class ShotRequest:
    mode: ShotMode
    force: float


@dataclass(frozen=True)
class ShotResult:
    accepted: bool
    velocity: np.ndarray | None = None
    crosspoint: np.ndarray | None = None
    reason: str = ""


@dataclass(frozen=True)
class ShotParams:
    """Parameter fisik & tuning untuk solver."""

    run_gain: float = 2.3
    goal_x: float = 9.0
    clearance: float = 0.8            # goal_height (1.0) − 0.20
    gravity: float = 9.8
    fly_speed_fraction: float = 0.5
    max_crosspoint_y: float = 10.0


def clamp_force(force: float, max_force: float) -> float:
    """Batasi force ke [0, max_force]."""
    return min(max(float(force), 0.0), max_force)


def make_request(strength: float, mode, max_force: float = 15.0) -> ShotRequest:
    """Bangun ShotRequest dengan force ter-clamp; mode tidak valid → ValueError.

    Satu-satunya tempat force di-clamp; solver memakai request.force apa adanya.
    """
    return ShotRequest(ShotMode(int(mode)), clamp_force(strength, max_force))


def solve_run(kick_vector, force: float, params: ShotParams) -> ShotResult:
    k = planar(kick_vector)
    velocity = -k * (force * params.run_gain)
    return ShotResult(True, velocity)


def solve_fly(robot_position, kick_vector, ball_position,
              params: ShotParams) -> ShotResult:
    """Solve lintasan parabola ke garis gawang."""
    k = planar(kick_vector)
    p1 = np.asarray(robot_position, dtype=float)[:2]
    p2 = p1 + k[:2]
    heading = Line.through(p1, p2) if np.linalg.norm(k[:2]) > EPS else None
    goal_line = Line.vertical(params.goal_x if k[0] > 0 else -params.goal_x)

    crosspoint = heading.crosspoint(goal_line) if heading is not None else None
    if crosspoint is None:
        return ShotResult(False, reason="kick vector parallel to goal line")
    if abs(crosspoint[1]) >= params.max_crosspoint_y:
        return ShotResult(False, crosspoint=crosspoint,
                          reason=f"crosspoint.y {crosspoint[1]:.2f} out of range")

    D = distance2d(crosspoint, ball_position)
    if D < EPS:
        return ShotResult(False, crosspoint=crosspoint,
                          reason="ball already on goal line")

    g = params.gravity
    h = params.clearance
    vx_thres = D * math.sqrt(g / (2.0 * h))
    vx = vx_thres * params.fly_speed_fraction
    b = h / D + g * D / (2.0 * vx * vx)

    velocity = np.array([-vx * k[0], -vx * k[1], b * vx])
    return ShotResult(True, velocity, crosspoint)


def solve_shot(request: ShotRequest, robot_position, kick_vector,
               ball_position, params: ShotParams = ShotParams()) -> ShotResult:
    """Dispatch ke solver sesuai mode.

    Parameters
    ----------
    request : ShotRequest
    robot_position, ball_position : array-like (3,)
        Posisi di frame konvensi robot (meter).
    kick_vector : array-like (3,)
    params : ShotParams

    Returns
    -------
    ShotResult — velocity (m/s) atau accepted=False dengan alasan.
    """
    if request.mode is ShotMode.RUN:
        return solve_run(kick_vector, request.force, params)
    if request.mode is ShotMode.FLY:
        return solve_fly(robot_position, kick_vector, ball_position, params)
    raise ValueError(f"unknown shot mode: {request.mode!r}")
