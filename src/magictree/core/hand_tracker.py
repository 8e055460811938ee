from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import cv2
import mediapipe as mp
from mediapipe.tasks.python import BaseOptions
from mediapipe.tasks.python import vision

from magictree.utils.landmark_preprocess import LandmarkPacket, landmarks_to_np

LANDMARKER_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)


@dataclass
class HandTrackerConfig:
    model_path: Optional[Path] = None
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    frame_interval_ms: int = 33


class HandTracker:
    """
    MediaPipe HandLandmarker 的显式生命周期封装：
    构造即初始化，process() 逐帧检测，close() 释放。
    """

    def __init__(self, cfg: HandTrackerConfig) -> None:
        self.cfg = cfg
        self._timestamp_ms = 0

        model_path = cfg.model_path
        project_root = Path(__file__).resolve().parents[3]
        if model_path is None:
            model_path = project_root / "weights" / "hand_landmarker.task"
        if not model_path.exists():
            raise FileNotFoundError(
                f"未找到手部关键点模型：{model_path}\n"
                f"请运行 python download_models.py，或从 {LANDMARKER_URL} 下载 "
                "并放置于 weights/ 目录。"
            )

        base_options = BaseOptions(model_asset_path=str(model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_hands=cfg.max_num_hands,
            min_hand_detection_confidence=cfg.min_detection_confidence,
            min_hand_presence_confidence=cfg.min_presence_confidence,
            min_tracking_confidence=cfg.min_tracking_confidence,
        )
        self._landmarker = vision.HandLandmarker.create_from_options(options)

    def process(self, frame_bgr) -> List[LandmarkPacket]:
        """检测一帧中的所有手，没有手时返回空列表。"""

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        self._timestamp_ms += self.cfg.frame_interval_ms
        result = self._landmarker.detect_for_video(mp_image, self._timestamp_ms)

        if not result.hand_landmarks:
            return []

        packets: List[LandmarkPacket] = []
        for idx, landmark_list in enumerate(result.hand_landmarks):
            handedness = "Right"
            if result.handedness and len(result.handedness) > idx:
                hand_info = result.handedness[idx]
                # MediaPipe 0.10.21+ 返回的是 Classifications 对象
                if hasattr(hand_info, "categories") and hand_info.categories:
                    handedness = hand_info.categories[0].category_name
                elif isinstance(hand_info, list) and len(hand_info) > 0:
                    handedness = hand_info[0].category_name

            packets.append(
                LandmarkPacket(
                    handedness=handedness,
                    landmarks=landmarks_to_np(landmark_list),
                )
            )
        return packets

    def close(self) -> None:
        if hasattr(self._landmarker, "close"):
            self._landmarker.close()
