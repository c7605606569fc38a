"""
vision_info.py — Telemetry "omni vision" untuk world model (unit cm & rad).

Komputasi internal memakai meter; konversi ke cm hanya terjadi di sini,
tepat sekali saat telemetry dibangun.
"""

from dataclasses import dataclass, field

from nubot_sim3d.physics.frame_transform import RobotFrame, yaw_of
from nubot_sim3d.physics.geometry import to_polar

M2CM = 100.0
CM2M = 0.01


@dataclass
class BallInfo:
    pos: tuple[float, float]              # cm, frame konvensi
    real_angle: float                     # rad, relatif ke kick vector
    real_radius: float                    # cm
    velocity: tuple[float, float]         # cm/s
    pos_known: bool = True
    velocity_known: bool = True


@dataclass
class ObstacleInfo:
    pos: list[tuple[float, float]] = field(default_factory=list)        # cm
    polar_pos: list[tuple[float, float]] = field(default_factory=list)  # (rad, cm)


@dataclass
class RobotInfo:
    agent_id: int
    pos: tuple[float, float]              # cm
    heading: float                        # rad
    vrot: float                           # rad/s
    vtrans: tuple[float, float]           # cm/s
    is_stuck: bool = False
    is_valid: bool = True


@dataclass
class VisionInfo:
    stamp: float
    ball: BallInfo
    obstacles: ObstacleInfo
    robots: list[RobotInfo] = field(default_factory=list)


def _agent_id(name: str, prefix: str) -> int | None:
    suffix = name[len(prefix):]
    return int(suffix) if suffix.isdigit() else None


def build_vision_info(frame: RobotFrame, cyan_prefix: str, magenta_prefix: str,
                      is_stuck: bool | None = None) -> VisionInfo:
    """Bangun VisionInfo dari RobotFrame satu tick.

    Parameters
    ----------
    frame : RobotFrame
    cyan_prefix, magenta_prefix : str
        Prefix nama model robot kedua tim; body lain dengan prefix ini
        dilaporkan sebagai obstacle.
    is_stuck : bool | None
        Status stuck robot sendiri (None = belum diketahui → False).
    """
    kick = frame.kick_vector_planar
    angle, radius = to_polar(kick, frame.ball_vector)
    ball = BallInfo(
        pos=(frame.ball.position[0] * M2CM, frame.ball.position[1] * M2CM),
        real_angle=angle,
        real_radius=radius * M2CM,
        velocity=(frame.ball.linear_velocity[0] * M2CM,
                  frame.ball.linear_velocity[1] * M2CM),
    )

    prefixes = (cyan_prefix, magenta_prefix)
    obstacles = ObstacleInfo()
    for body in frame.others:
        if not body.name.startswith(prefixes):
            continue
        offset = body.position - frame.robot.position
        offset[2] = 0.0
        obs_angle, obs_radius = to_polar(kick, offset)
        obstacles.pos.append((body.position[0] * M2CM, body.position[1] * M2CM))
        obstacles.polar_pos.append((obs_angle, obs_radius * M2CM))

    robots = []
    for body in [frame.robot] + frame.others:
        if not body.name.startswith(magenta_prefix):
            continue
        agent_id = _agent_id(body.name, magenta_prefix)
        if agent_id is None:
            continue
        raw = frame.raw.find(body.name) if frame.raw is not None else None
        heading = yaw_of(raw.pose.orientation if raw is not None
                         else body.pose.orientation)
        robots.append(RobotInfo(
            agent_id=agent_id,
            pos=(body.position[0] * M2CM, body.position[1] * M2CM),
            heading=heading,
            vrot=float(body.twist.angular[2]),
            vtrans=(body.linear_velocity[0] * M2CM, body.linear_velocity[1] * M2CM),
            is_stuck=bool(is_stuck) if body is frame.robot else False,
        ))

    stamp = frame.raw.stamp if frame.raw is not None else 0.0
    return VisionInfo(stamp=stamp, ball=ball, obstacles=obstacles, robots=robots)
