from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from magictree.utils.geometry import Point2D, planar_distance
from magictree.utils.landmark_preprocess import (
    CURL_TIPS,
    INDEX_TIP,
    MIDDLE_MCP,
    THUMB_TIP,
    WRIST,
    LandmarkPacket,
    ensure_landmarks,
)


class GestureType(str, Enum):
    NONE = "NONE"
    OPEN_PALM = "OPEN_PALM"
    CLOSED_FIST = "CLOSED_FIST"
    PINCH = "PINCH"


@dataclass(frozen=True)
class GestureResult:
    type: GestureType
    anchor: Optional[Point2D] = None
    pinch_distance: float = 1.0


NO_GESTURE = GestureResult(GestureType.NONE, None, 1.0)


@dataclass
class GestureClassifierConfig:
    pinch_ratio: float = 0.65
    curl_ratio: float = 1.35
    min_palm_size: float = 0.01


def classify_gesture(
    landmarks: Optional[np.ndarray],
    cfg: Optional[GestureClassifierConfig] = None,
) -> GestureResult:
    """
    基于关键点几何的启发式手势分类。

    所有阈值都以掌长（手腕到中指根部的平面距离）为尺度，
    因此手离摄像头远近不影响结果。判定顺序：握拳 > 捏合 > 张开手掌，
    其余（2~3 指弯曲）视为模糊姿态，返回 NONE。
    """

    if landmarks is None:
        return NO_GESTURE
    cfg = cfg or GestureClassifierConfig()
    lm = ensure_landmarks(landmarks)

    wrist = lm[WRIST]
    middle_mcp = lm[MIDDLE_MCP]
    index_tip = lm[INDEX_TIP]

    palm_size = max(planar_distance(wrist, middle_mcp), cfg.min_palm_size)

    pinch_distance = planar_distance(lm[THUMB_TIP], index_tip)
    is_pinch_candidate = pinch_distance < palm_size * cfg.pinch_ratio

    curled_count = sum(
        1 for tip in CURL_TIPS if planar_distance(lm[tip], wrist) < palm_size * cfg.curl_ratio
    )

    # 握拳时拇指和食指天然靠近，必须先于捏合判断
    if curled_count == 4:
        return GestureResult(GestureType.CLOSED_FIST, _anchor(wrist), 1.0)

    if is_pinch_candidate:
        return GestureResult(GestureType.PINCH, _anchor(index_tip), pinch_distance)

    if curled_count <= 1:
        return GestureResult(GestureType.OPEN_PALM, _anchor(middle_mcp), 1.0)

    return NO_GESTURE


def classify_packets(
    packets: Optional[Sequence[LandmarkPacket]],
    cfg: Optional[GestureClassifierConfig] = None,
) -> GestureResult:
    """只使用第一只手（主手）进行分类，没有手时返回 NONE。"""

    if not packets:
        return NO_GESTURE
    return classify_gesture(packets[0].landmarks, cfg)


def _anchor(point: np.ndarray) -> Point2D:
    return Point2D(float(point[0]), float(point[1]))
