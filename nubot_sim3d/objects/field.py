"""
field.py — Dimensi lapangan & properti bola dalam world frame (meter).

Origin (0, 0) di titik tengah lapangan, gawang di x = ±goal_x.
Semua konstanta tuning dikumpulkan di sini, bukan tersebar di kode.
"""

from dataclasses import dataclass

GRAVITY = 9.8


# ======================================================================
# Field
# ======================================================================

@dataclass
class FieldConfig:
    """Konfigurasi lapangan (default 18m × 12m)."""

    length: float = 18.0
    width: float = 12.0

    # Garis gawang target shot FLY
    goal_x: float = 9.0
    goal_height: float = 1.0
    # Tinggi bola di tengah lintasan = goal_height − goal_clearance_margin
    goal_clearance_margin: float = 0.20

    # Bola dianggap keluar bila melewati batas + out_margin
    out_margin: float = 1.0
    # Bola yang keluar diletakkan di pojok batas + reset_margin
    reset_margin: float = 0.5

    def __post_init__(self):
        if self.length <= 0 or self.width <= 0:
            raise ValueError("field length/width must be positive")
        if self.goal_height <= self.goal_clearance_margin:
            raise ValueError("goal_height must exceed goal_clearance_margin")

    @property
    def clearance(self) -> float:
        return self.goal_height - self.goal_clearance_margin

    def is_out(self, x: float, y: float) -> bool:
        return (abs(x) > self.length / 2.0 + self.out_margin or
                abs(y) > self.width / 2.0 + self.out_margin)

    def reset_position(self, x: float, y: float) -> tuple[float, float, float]:
        """Posisi pengganti untuk bola yang keluar (pojok terdekat)."""
        a = 1.0 if x > 0 else -1.0
        b = 1.0 if y > 0 else -1.0
        return (a * (self.length / 2.0 + self.reset_margin),
                b * (self.width / 2.0 + self.reset_margin),
                0.0)


# ======================================================================
# Ball
# ======================================================================

@dataclass
class BallConfig:
    """Properti fisik bola & model decay."""

    name: str = "football"
    chassis_link: str = "football::ball"

    mass: float = 0.41             # kg
    mu: float = 0.3                # koefisien gesek rolling
    ground_height: float = 0.12    # z pusat bola maksimum saat di tanah
    stop_speed: float = 1e-4       # m/s, di bawah ini bola diam
    tick_period: float = 0.01      # s, durasi gaya gesek per tick
