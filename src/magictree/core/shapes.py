"""各种编队（树、树干、彩带、爱心、散开）的目标位置生成函数。

所有批量函数都返回 (N, 3) float32 数组，随机性统一由调用方传入的
numpy Generator 提供，便于复现。
"""

from __future__ import annotations

import math
from typing import Tuple, Union

import numpy as np

TREE_BOTTOM = -5.0
TREE_TOP = 5.0
TREE_HEIGHT = TREE_TOP - TREE_BOTTOM
TREE_BASE_RADIUS = 3.5

TRUNK_HALF_WIDTH = 0.4
TRUNK_BOTTOM = -5.0
TRUNK_TOP = -1.0

RIBBON_BASE_RADIUS = 4.2
RIBBON_TURNS = 5
RIBBON_FLOW_SPEED = -0.5

HEART_SCALE = 0.25
HEART_Y_OFFSET = 1.0
HEART_X_JITTER = 0.2
HEART_Y_JITTER = 0.1
HEART_DEPTH = 2.0

SCATTER_EXTENT = 15.0

FloatOrArray = Union[float, np.ndarray]


def normalized_height(height: FloatOrArray) -> FloatOrArray:
    """树高 [-5, 5] -> [0, 1]，0 为底部。"""

    return (height - TREE_BOTTOM) / TREE_HEIGHT


def tree_radius_at(norm_height: FloatOrArray, base_radius: float = TREE_BASE_RADIUS) -> FloatOrArray:
    """圆锥在给定归一化高度处允许的最大半径：底部为 base_radius，顶点为 0。"""

    return (1.0 - norm_height) * base_radius


def sample_tree(rng: np.random.Generator, count: int) -> np.ndarray:
    # 半径在 [0, radius_at] 内均匀取值，得到实心且底部更密的圆锥
    theta = rng.uniform(0.0, 2.0 * math.pi, count)
    height = rng.uniform(TREE_BOTTOM, TREE_TOP, count)
    radius = rng.uniform(0.0, 1.0, count) * tree_radius_at(normalized_height(height))
    return np.stack([radius * np.cos(theta), height, radius * np.sin(theta)], axis=-1).astype(np.float32)


def sample_trunk(rng: np.random.Generator, count: int) -> np.ndarray:
    x = rng.uniform(-TRUNK_HALF_WIDTH, TRUNK_HALF_WIDTH, count)
    y = rng.uniform(TRUNK_BOTTOM, TRUNK_TOP, count)
    z = rng.uniform(-TRUNK_HALF_WIDTH, TRUNK_HALF_WIDTH, count)
    return np.stack([x, y, z], axis=-1).astype(np.float32)


def ribbon_heights(fractions: FloatOrArray) -> FloatOrArray:
    """彩带上的相对序号 (0..1) 映射到高度。"""

    return fractions * TREE_HEIGHT + TREE_BOTTOM


def ribbon_at_height(heights, angle_offset: float = 0.0) -> np.ndarray:
    """
    螺旋彩带：高度固定，角度随高度转 RIBBON_TURNS 圈并叠加 angle_offset。
    半径比树冠略大，彩带因此绕在树叶外侧。
    """

    heights = np.asarray(heights, dtype=np.float32)
    norm_h = normalized_height(heights)
    radius = tree_radius_at(norm_h, RIBBON_BASE_RADIUS)
    angle = norm_h * 2.0 * math.pi * RIBBON_TURNS + angle_offset
    return np.stack([radius * np.cos(angle), heights, radius * np.sin(angle)], axis=-1).astype(np.float32)


def ribbon_flow(heights, time: float) -> np.ndarray:
    """按时间旋转的彩带目标位置。"""

    return ribbon_at_height(heights, time * RIBBON_FLOW_SPEED)


def heart_curve(t: FloatOrArray) -> Tuple[FloatOrArray, FloatOrArray]:
    """经典极坐标爱心曲线（无抖动），返回 (x, y)。"""

    x = HEART_SCALE * 16.0 * np.sin(t) ** 3
    y = (
        HEART_SCALE
        * (13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t))
        + HEART_Y_OFFSET
    )
    return x, y


def sample_heart(rng: np.random.Generator, count: int) -> np.ndarray:
    # 相位随机而非等间距，沿轮廓自然散布
    t = rng.uniform(0.0, 2.0 * math.pi, count)
    x, y = heart_curve(t)
    x = x * (1.0 + rng.uniform(-0.5, 0.5, count) * HEART_X_JITTER)
    y = y + rng.uniform(-0.5, 0.5, count) * HEART_Y_JITTER
    z = rng.uniform(-0.5, 0.5, count) * HEART_DEPTH
    return np.stack([x, y, z], axis=-1).astype(np.float32)


def sample_scatter(rng: np.random.Generator, count: int) -> np.ndarray:
    half = SCATTER_EXTENT / 2.0
    return rng.uniform(-half, half, (count, 3)).astype(np.float32)
