from __future__ import annotations

import math
from typing import NamedTuple, Union

import numpy as np


class Point2D(NamedTuple):
    """归一化画面坐标（x, y 均在 0..1）。"""

    x: float
    y: float


class Point3D(NamedTuple):
    """场景世界坐标。"""

    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float32)

    @classmethod
    def from_array(cls, values) -> "Point3D":
        return cls(float(values[0]), float(values[1]), float(values[2]))


def planar_distance(a, b) -> float:
    """只看 x、y 两个分量的欧氏距离，忽略深度。"""

    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


ArrayLike = Union[float, np.ndarray]


def lerp(current: ArrayLike, target: ArrayLike, alpha: float) -> ArrayLike:
    """一阶低通：current 向 target 靠近 alpha 比例。"""

    return current + (target - current) * alpha


def rotate_y(points: np.ndarray, angle: float) -> np.ndarray:
    """绕 y 轴旋转，points 形状为 (3,) 或 (N, 3)。"""

    c, s = math.cos(angle), math.sin(angle)
    rot = np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]], dtype=np.float32)
    return np.asarray(points, dtype=np.float32) @ rot.T


def hex_to_rgb(value: str) -> np.ndarray:
    """'#RRGGBB' -> 0..1 浮点 RGB。"""

    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"颜色格式错误：#{value}")
    return np.array([int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4)], dtype=np.float32)
