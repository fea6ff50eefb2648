"""Perspective camera with Euler-angle orientation."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

Vec3 = tuple[float, float, float]


def _translation(offset: Vec3) -> np.ndarray:
    m = np.identity(4)
    m[:3, 3] = offset
    return m


def _rotation(angle: float, axis: Vec3) -> np.ndarray:
    a = np.asarray(axis, dtype=float)
    a = a / np.linalg.norm(a)
    c, s = math.cos(angle), math.sin(angle)
    cross = np.array([[0.0, -a[2], a[1]], [a[2], 0.0, -a[0]], [-a[1], a[0], 0.0]])
    m = np.identity(4)
    m[:3, :3] = c * np.identity(3) + (1.0 - c) * np.outer(a, a) + s * cross
    return m


def _perspective_rh_zo(fov: float, aspect: float, near: float, far: float) -> np.ndarray:
    if aspect == 0.0:
        raise ValueError("aspect ratio must be non-zero")
    tan_half = math.tan(fov / 2.0)
    m = np.zeros((4, 4))
    m[0, 0] = 1.0 / (aspect * tan_half)
    m[1, 1] = 1.0 / tan_half
    m[2, 2] = far / (near - far)
    m[3, 2] = -1.0
    m[2, 3] = -(far * near) / (far - near)
    return m


@dataclass
class Camera:
    """Camera state; euler_angles are (pitch, yaw, roll) in radians."""

    euler_angles: Vec3 = (0.0, 0.0, 0.0)
    position: Vec3 = (0.0, 0.0, 0.0)
    fov: float = math.radians(45.0)
    near: float = 0.1
    far: float = 1000.0
    speed: float = 0.1

    def inverse_view(self) -> np.ndarray:
        """Camera-to-world matrix: translate * yaw * pitch * roll."""
        pitch, yaw, roll = self.euler_angles
        return (
            _translation(self.position)
            @ _rotation(yaw, (0.0, 1.0, 0.0))
            @ _rotation(pitch, (1.0, 0.0, 0.0))
            @ _rotation(roll, (0.0, 0.0, 1.0))
        )

    def view(self) -> np.ndarray:
        return np.linalg.inv(self.inverse_view())

    def _split(self) -> float:
        return math.sqrt(self.near * self.far)

    def projection(self, aspect: float) -> np.ndarray:
        """Projection for the near half of the depth range, [near, sqrt(near*far)]."""
        return _perspective_rh_zo(self.fov, aspect, self.near, self._split())

    def projection_far(self, aspect: float) -> np.ndarray:
        """Projection for the far half of the depth range, [sqrt(near*far), far]."""
        return _perspective_rh_zo(self.fov, aspect, self._split(), self.far)