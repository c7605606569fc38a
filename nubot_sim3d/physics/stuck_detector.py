"""
stuck_detector.py — Filter histeresis untuk mendeteksi robot "stuck".

Robot dianggap stuck bila kecepatan aktual terus di bawah `scale` × kecepatan
yang diperintahkan selama lebih dari `tick_limit` evaluasi berturut-turut.

Detektor harus di-arm oleh perintah gerak; satu perintah = satu evaluasi.
Translasi dicek lebih dulu; bila translasi sudah kurang, rotasi tidak dicek
pada tick yang sama.
"""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class StuckFilterState:
    """State lintas tick untuk StuckDetector (dimiliki oleh tick loop)."""

    consecutive_count: int = 0
    was_stuck_last_tick: bool = False
    armed: bool = False
    is_stuck: bool | None = None     # None = belum pernah dievaluasi
    commanded_linear: np.ndarray = field(default_factory=lambda: np.zeros(3))
    commanded_angular: np.ndarray = field(default_factory=lambda: np.zeros(3))


class StuckDetector:
    """Pure logic; semua state ada di StuckFilterState."""

    def __init__(self, scale: float = 0.5, tick_limit: int = 40):
        """
        Parameters
        ----------
        scale : float
            Rasio aktual/perintah di bawah ini dianggap kurang (0–1).
        tick_limit : int
            Jumlah evaluasi kurang berturut-turut sebelum stuck di-latch.
        """
        if not 0.0 < scale <= 1.0:
            raise ValueError("scale must be in (0, 1]")
        if tick_limit < 0:
            raise ValueError("tick_limit must be >= 0")
        self.scale = scale
        self.tick_limit = tick_limit

    def arm(self, state: StuckFilterState, linear, angular):
        """Catat perintah gerak terakhir dan izinkan satu evaluasi."""
        state.commanded_linear = np.asarray(linear, dtype=float).copy()
        state.commanded_angular = np.asarray(angular, dtype=float).copy()
        state.armed = True

    def _streak(self, state: StuckFilterState):
        if state.was_stuck_last_tick:
            state.consecutive_count += 1
        else:
            state.consecutive_count = 0
        state.was_stuck_last_tick = True
        if state.consecutive_count > self.tick_limit:
            state.consecutive_count = 0
            state.is_stuck = True

    def evaluate(self, state: StuckFilterState,
                 observed_linear, observed_angular) -> bool | None:
        """Evaluasi satu tick; kembalikan status stuck terakhir.

        Tanpa arm, state tidak diubah dan status terakhir dikembalikan.
        """
        if not state.armed:
            return state.is_stuck
        state.armed = False

        desired_trans = float(np.linalg.norm(state.commanded_linear))
        desired_rot = abs(float(state.commanded_angular[2]))
        actual_trans = float(np.linalg.norm(np.asarray(observed_linear, dtype=float)))
        actual_rot = abs(float(np.asarray(observed_angular, dtype=float)[2]))

        if actual_trans < desired_trans * self.scale:
            self._streak(state)
        elif actual_rot < desired_rot * self.scale:
            self._streak(state)
        else:
            state.was_stuck_last_tick = False
            state.is_stuck = False

        # sudah pernah dievaluasi → tidak lagi unknown
        if state.is_stuck is None:
            state.is_stuck = False
        return state.is_stuck
