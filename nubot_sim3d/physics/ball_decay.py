"""
ball_decay.py — Model gesekan rolling untuk bola yang menggelinding bebas.

Dipanggil sekali per tick selama free-roll (tidak ada velocity yang dipaksakan
ke bola pada tick ini). Gaya gesek:

    F = −v̂ · μ · m · g

hanya diberikan bila bola di tanah (z ≤ ground_height) dan speed tidak
sedang naik dibanding tick sebelumnya (tidak ada gaya luar yang mempercepat).

Satu tick gesekan mengurangi speed sekitar μ·g·dt, jadi speed tidak pernah
tepat nol. Bola dianggap berhenti saat speed masuk ke pita [0, halt_speed]
atau saat arah velocity berbalik setelah speed sudah sekecil itu; velocity
lalu di-nol-kan sekali.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class DecayState:
    """Speed & velocity bola tick sebelumnya; None = tick free-roll pertama."""

    last_speed: float | None = None
    last_velocity: np.ndarray | None = None

    def reset(self):
        self.last_speed = None
        self.last_velocity = None


@dataclass(frozen=True)
class DecayStep:
    force: np.ndarray | None = None   # gaya untuk diberikan ke bola (N)
    stop: bool = False                # True → set velocity bola ke nol


class BallDecayModel:
    """Pure logic; state disimpan di DecayState milik tick loop."""

    def __init__(self, mu: float = 0.3, mass: float = 0.41, gravity: float = 9.8,
                 ground_height: float = 0.12, stop_speed: float = 1e-4,
                 dt: float = 0.01):
        """
        Parameters
        ----------
        mu : float
            Koefisien gesek rolling.
        mass : float
            Massa bola (kg).
        gravity : float
            Percepatan gravitasi (m/s²).
        ground_height : float
            Tinggi pusat bola maksimum untuk dianggap di tanah (meter).
        stop_speed : float
            Speed di bawah ini dianggap diam (m/s).
        dt : float
            Periode tick = durasi gaya gesek diberikan (detik).
        """
        if dt <= 0:
            raise ValueError("dt must be positive")
        self.mu = mu
        self.mass = mass
        self.gravity = gravity
        self.ground_height = ground_height
        self.stop_speed = stop_speed
        self.dt = dt

    @property
    def friction_force(self) -> float:
        return self.mu * self.mass * self.gravity

    @property
    def halt_speed(self) -> float:
        """Perubahan speed oleh gesekan dalam satu tick (m/s)."""
        return max(self.stop_speed, self.mu * self.gravity * self.dt)

    def step(self, state: DecayState, velocity, height: float) -> DecayStep:
        """Hitung aksi decay untuk satu tick.

        Parameters
        ----------
        state : DecayState
        velocity : array-like (3,) — linear velocity bola (m/s, frame simulator)
        height : float — posisi z bola (meter)
        """
        v = np.asarray(velocity, dtype=float)
        speed = float(np.linalg.norm(v))
        last_speed = state.last_speed
        last_velocity = state.last_velocity
        state.last_speed = speed
        state.last_velocity = v.copy()

        halt = self.halt_speed
        on_ground = height <= self.ground_height
        if speed <= self.stop_speed:
            # bola sudah diam; stop hanya jika tick lalu masih bergerak
            if last_speed is not None and last_speed > self.stop_speed:
                return self._halt(state)
            return DecayStep()

        if not on_ground:
            return DecayStep()

        if last_speed is not None and last_speed > halt and speed <= halt:
            return self._halt(state)

        reversed_ = (last_velocity is not None
                     and last_speed is not None
                     and self.stop_speed < last_speed <= 2.0 * halt
                     and float(np.dot(v, last_velocity)) <= 0.0)
        if reversed_:
            return self._halt(state)

        if last_speed is not None and speed > last_speed:
            return DecayStep()
        return DecayStep(force=-(v / speed) * self.friction_force)

    @staticmethod
    def _halt(state: DecayState) -> DecayStep:
        # velocity bola akan di-nol-kan oleh pemanggil
        state.last_speed = 0.0
        state.last_velocity = np.zeros(3)
        return DecayStep(stop=True)
