"""
robot.py — Konfigurasi robot: geometri kicker, threshold dribble, tuning
shot & stuck detector.
"""

from dataclasses import dataclass


@dataclass
class RobotConfig:
    """Parameter robot yang dikontrol plugin."""

    name: str = "rival1"
    cyan_prefix: str = "nubot"
    magenta_prefix: str = "rival"

    # --- Frame ---
    # Arah pusat robot → kicker di frame body; mengikuti model file robot
    kick_vector_body: tuple[float, float, float] = (-1.0, 0.0, 0.0)
    # Konvensi deployment: frame robot = world diputar 180° terhadap Z
    rotate_180_about_z: bool = True

    # --- Dribble / possession ---
    dribble_distance_thres: float = 0.50   # meter
    dribble_angle_thres: float = 30.0      # derajat (lebar total)
    dribble_offset: float = 0.43           # jarak pusat robot → bola saat dribble

    # --- Shot ---
    max_shot_force: float = 15.0
    run_gain: float = 2.3                  # force → m/s untuk shot RUN
    fly_speed_fraction: float = 0.5        # vx = vx_thres × fraksi
    max_crosspoint_y: float = 10.0         # meter, batas lateral shot FLY

    # --- Stuck detector ---
    stuck_scale: float = 0.5
    stuck_tick_limit: int = 40

    # --- Lain-lain ---
    airborne_height: float = 0.2           # z robot ≥ ini → dianggap di udara

    def __post_init__(self):
        if self.dribble_distance_thres <= 0:
            raise ValueError("dribble_distance_thres must be positive")
        if not 0 < self.dribble_angle_thres <= 360:
            raise ValueError("dribble_angle_thres must be in (0, 360]")
        if self.max_shot_force <= 0:
            raise ValueError("max_shot_force must be positive")

    @property
    def agent_id(self) -> int:
        """ID robot dari suffix nama (rival3 → 3), 0 jika tidak numerik."""
        suffix = self.name[len(self.magenta_prefix):]
        return int(suffix) if suffix.isdigit() else 0
