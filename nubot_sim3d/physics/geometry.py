"""
geometry.py — Primitive vektor & sudut planar (pure function, tanpa state).

Semua vektor berupa np.ndarray; fungsi planar hanya memakai komponen x, y.
Sudut dalam radian kecuali disebut lain.
"""

import math

import numpy as np

EPS = 1e-9


def as_vector(values) -> np.ndarray:
    """Konversi sequence ke np.ndarray float 3D (z=0 jika hanya 2 komponen)."""
    v = np.asarray(values, dtype=float).reshape(-1)
    if v.size == 2:
        v = np.array([v[0], v[1], 0.0])
    return v


def planar(vec) -> np.ndarray:
    """Proyeksi vektor ke bidang tanah (z = 0)."""
    v = as_vector(vec).copy()
    v[2] = 0.0
    return v


def normalize(vec) -> np.ndarray:
    """Unit vector; vektor nol dikembalikan apa adanya (tanpa NaN)."""
    v = as_vector(vec)
    n = np.linalg.norm(v)
    if n < EPS:
        return np.zeros_like(v)
    return v / n


def wrap_angle(angle: float) -> float:
    """Normalisasi sudut ke rentang (−π, π]."""
    if -math.pi < angle <= math.pi:
        return angle
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    if wrapped <= -math.pi + EPS:
        wrapped += 2.0 * math.pi
    return wrapped


def signed_angle(from_vec, to_vec) -> float:
    """Sudut bertanda (rad) dari `from_vec` ke `to_vec` di bidang XY.

    Positif = CCW. Hasil dalam (−π, π]. Jika salah satu vektor nol,
    sudut didefinisikan 0.
    """
    a = as_vector(from_vec)
    b = as_vector(to_vec)
    if math.hypot(a[0], a[1]) < EPS or math.hypot(b[0], b[1]) < EPS:
        return 0.0
    cross = a[0] * b[1] - a[1] * b[0]
    dot = a[0] * b[0] + a[1] * b[1]
    return wrap_angle(math.atan2(cross, dot))


def to_polar(reference, vec) -> tuple[float, float]:
    """(angle, radius) dari `vec` relatif ke arah `reference`."""
    v = as_vector(vec)
    return signed_angle(reference, v), float(np.linalg.norm(v))


# ======================================================================
# Line — garis planar Ax + By + C = 0
# ======================================================================

class Line:
    """Garis 2D dalam bentuk umum Ax + By + C = 0."""

    def __init__(self, a: float, b: float, c: float):
        if abs(a) < EPS and abs(b) < EPS:
            raise ValueError("Line butuh A atau B tidak nol")
        self.a = a
        self.b = b
        self.c = c

    @classmethod
    def through(cls, p1, p2) -> 'Line':
        """Garis yang melewati dua titik."""
        x1, y1 = float(p1[0]), float(p1[1])
        x2, y2 = float(p2[0]), float(p2[1])
        a = y2 - y1
        b = x1 - x2
        c = x2 * y1 - x1 * y2
        return cls(a, b, c)

    @classmethod
    def vertical(cls, x: float) -> 'Line':
        """Garis x = konstanta."""
        return cls(1.0, 0.0, -x)

    def crosspoint(self, other: 'Line') -> np.ndarray | None:
        """Titik potong dua garis, None jika sejajar."""
        det = self.a * other.b - other.a * self.b
        if abs(det) < EPS:
            return None
        x = (self.b * other.c - other.b * self.c) / det
        y = (other.a * self.c - self.a * other.c) / det
        return np.array([x, y])

    def distance(self, point) -> float:
        """Jarak tegak lurus titik ke garis."""
        px, py = float(point[0]), float(point[1])
        return abs(self.a * px + self.b * py + self.c) / math.hypot(self.a, self.b)


def point_line_distance(point, p1, p2) -> float:
    """Jarak titik ke garis yang melewati p1 dan p2."""
    return Line.through(p1, p2).distance(point)


def distance2d(p1, p2) -> float:
    """Jarak Euclid di bidang XY."""
    return math.hypot(float(p1[0]) - float(p2[0]), float(p1[1]) - float(p2[1]))
