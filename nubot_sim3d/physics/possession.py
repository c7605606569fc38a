"""
possession.py — Cek apakah robot sedang memegang bola (hold-ball).

Bola dianggap dipegang jika:
    |angle_error| ≤ angle_thres / 2   (sudut kick vector → bola, derajat)
    |ball_vector| ≤ distance_thres    (meter)
Kedua batas inklusif.
"""

import math
from dataclasses import dataclass

import numpy as np

from nubot_sim3d.physics.geometry import normalize, planar, signed_angle


@dataclass(frozen=True)
class PossessionStatus:
    possessing: bool
    angle_error_deg: float
    distance: float


def check_possession(ball_vector, kick_vector,
                     angle_thres_deg: float = 30.0,
                     distance_thres: float = 0.50) -> PossessionStatus:
    """Hitung status possession.

    Parameters
    ----------
    ball_vector : array-like (3,)
        Vektor robot → bola (meter).
    kick_vector : array-like (3,)
        Arah kicker robot (unit).
    angle_thres_deg : float
        Lebar total sudut toleransi (derajat).
    distance_thres : float
        Jarak maksimum robot → bola (meter).

    Returns
    -------
    PossessionStatus
    """
    direction = normalize(planar(ball_vector))
    kick = planar(kick_vector)
    angle_error = math.degrees(signed_angle(kick, direction))
    distance = float(np.linalg.norm(np.asarray(ball_vector, dtype=float)))

    aligned = abs(angle_error) <= angle_thres_deg / 2.0
    near = distance <= distance_thres
    return PossessionStatus(aligned and near, angle_error, distance)
