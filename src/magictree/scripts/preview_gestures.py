from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np

from magictree.core.gesture_classifier import GestureResult, GestureType, classify_packets
from magictree.core.hand_tracker import HandTracker, HandTrackerConfig

HAND_CONNECTIONS: Sequence[tuple[int, int]] = (
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 4),
    (0, 5),
    (5, 6),
    (6, 7),
    (7, 8),
    (5, 9),
    (9, 10),
    (10, 11),
    (11, 12),
    (9, 13),
    (13, 14),
    (14, 15),
    (15, 16),
    (13, 17),
    (17, 18),
    (18, 19),
    (19, 20),
    (0, 17),
)

GESTURE_COLORS = {
    GestureType.NONE: (160, 160, 160),
    GestureType.OPEN_PALM: (0, 255, 0),
    GestureType.CLOSED_FIST: (0, 0, 255),
    GestureType.PINCH: (255, 105, 180),
}


@dataclass
class PreviewConfig:
    camera_index: int
    hand_model_path: Optional[Path] = None


def draw_landmarks(frame: np.ndarray, landmarks: np.ndarray) -> None:
    h, w = frame.shape[:2]
    points = [(int(x * w), int(y * h)) for x, y, _ in landmarks]
    for a, b in HAND_CONNECTIONS:
        cv2.line(frame, points[a], points[b], (255, 255, 255), 2)
    for point in points:
        cv2.circle(frame, point, 4, (0, 200, 255), -1)


def draw_result(frame: np.ndarray, result: GestureResult) -> None:
    color = GESTURE_COLORS[result.type]
    text = f"{result.type.value}"
    if result.type == GestureType.PINCH:
        text += f"  d={result.pinch_distance:.3f}"
    cv2.putText(frame, text, (20, 40), cv2.FONT_HERSHEY_SIMPLEX, 1.0, color, 2)
    if result.anchor is not None:
        h, w = frame.shape[:2]
        center = (int(result.anchor.x * w), int(result.anchor.y * h))
        cv2.circle(frame, center, 12, color, 3)


def run(cfg: PreviewConfig) -> None:
    tracker = HandTracker(HandTrackerConfig(model_path=cfg.hand_model_path))
    cap = cv2.VideoCapture(cfg.camera_index)
    if not cap.isOpened():
        tracker.close()
        raise RuntimeError(f"无法打开摄像头 {cfg.camera_index}")

    print("按 q 退出。")
    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                print("[Camera] 摄像头读取失败。")
                break

            packets = tracker.process(frame)
            for packet in packets:
                draw_landmarks(frame, packet.landmarks)
            draw_result(frame, classify_packets(packets))

            cv2.imshow("MagicTree 手势预览", frame)
            if cv2.waitKey(1) & 0xFF == ord("q"):
                break
    finally:
        cap.release()
        tracker.close()
        cv2.destroyAllWindows()


def parse_args() -> PreviewConfig:
    parser = argparse.ArgumentParser(description="MagicTree 手势识别预览")
    parser.add_argument("--camera", type=int, default=0, help="摄像头索引")
    parser.add_argument("--hand-model", type=Path, default=None, help="hand_landmarker.task 路径")
    args = parser.parse_args()
    return PreviewConfig(camera_index=args.camera, hand_model_path=args.hand_model)


def main() -> None:
    run(parse_args())


if __name__ == "__main__":
    main()
