from __future__ import annotations

from dataclasses import dataclass

import numpy as np

WRIST = 0
THUMB_TIP = 4
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_TIP = 12
RING_TIP = 16
PINKY_TIP = 20

# 参与握拳判断的四指指尖（不含大拇指）
CURL_TIPS = [INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP]

NUM_LANDMARKS = 21


@dataclass
class LandmarkPacket:
    """打包 MediaPipe 返回的单只手关键点数组。"""

    handedness: str
    landmarks: np.ndarray  # (21, 3) 归一化坐标


def landmarks_to_np(landmark_list) -> np.ndarray:
    """将 MediaPipe NormalizedLandmark 列表转换为 (21, 3) 数组。"""

    if landmark_list is None:
        return np.zeros((NUM_LANDMARKS, 3), dtype=np.float32)
    return np.array([[lm.x, lm.y, lm.z] for lm in landmark_list], dtype=np.float32)


def ensure_landmarks(landmarks) -> np.ndarray:
    """校验形状，返回 float32 的 (21, 3) 数组。"""

    arr = np.asarray(landmarks, dtype=np.float32)
    if arr.shape != (NUM_LANDMARKS, 3):
        raise ValueError(f"landmarks 形状必须为 (21, 3)，实际为 {arr.shape}")
    return arr


def scale_about_wrist(landmarks: np.ndarray, factor: float) -> np.ndarray:
    """以手腕为中心整体缩放，模拟手离摄像头远近的变化。"""

    arr = ensure_landmarks(landmarks)
    origin = arr[WRIST : WRIST + 1]
    return origin + (arr - origin) * factor
