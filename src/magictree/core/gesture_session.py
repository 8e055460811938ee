from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from magictree.core.app_state import AppStateMachine
from magictree.core.gesture_classifier import (
    NO_GESTURE,
    GestureClassifierConfig,
    GestureResult,
    GestureType,
    classify_packets,
)
from magictree.utils.geometry import Point2D, Point3D

# 归一化画面坐标映射到场景时的横向/纵向跨度
SCENE_WIDTH = 10.0
SCENE_HEIGHT = 8.0


def anchor_to_scene(anchor: Point2D) -> Point3D:
    """画面坐标 (0..1) 映射到 z=0 平面；x 取反与镜像后的画面一致。"""

    return Point3D((0.5 - anchor.x) * SCENE_WIDTH, (0.5 - anchor.y) * SCENE_HEIGHT, 0.0)


@dataclass(frozen=True)
class GestureSnapshot:
    """某一时刻最新的识别结果，供粒子与照片逻辑读取。"""

    result: GestureResult = NO_GESTURE
    hand_position: Optional[Point3D] = None
    is_pinching: bool = False

    @property
    def gesture(self) -> GestureType:
        return self.result.type


NEUTRAL_SNAPSHOT = GestureSnapshot()


class GestureSession:
    """
    协作式检测驱动：调用方每次 tick() 得到一次分类结果，
    节奏与取消（start/stop）都由调用方掌握，内部不自行调度。

    tracker 只需提供 process(frame) -> List[LandmarkPacket] 与 close()。
    """

    def __init__(
        self,
        tracker,
        classifier_cfg: Optional[GestureClassifierConfig] = None,
        state_machine: Optional[AppStateMachine] = None,
    ) -> None:
        self.tracker = tracker
        self.classifier_cfg = classifier_cfg or GestureClassifierConfig()
        self.state_machine = state_machine or AppStateMachine()
        self.active = False
        self.latest = NEUTRAL_SNAPSHOT

    def start(self) -> None:
        self.active = True

    def stop(self) -> None:
        """停止检测并把手势、手的位置复位为中性值。"""

        self.active = False
        self.latest = NEUTRAL_SNAPSHOT

    def toggle(self) -> bool:
        if self.active:
            self.stop()
        else:
            self.start()
        return self.active

    def tick(self, frame) -> GestureSnapshot:
        if not self.active:
            return NEUTRAL_SNAPSHOT
        if frame is None:
            # 画面尚未就绪：沿用上一帧结果
            return self.latest

        packets = self.tracker.process(frame)
        result = classify_packets(packets, self.classifier_cfg)
        hand_position = anchor_to_scene(result.anchor) if result.anchor is not None else None

        self.state_machine.on_gesture(result.type)
        self.latest = GestureSnapshot(
            result=result,
            hand_position=hand_position,
            is_pinching=result.type == GestureType.PINCH,
        )
        return self.latest

    def close(self) -> None:
        self.stop()
        if self.tracker is not None and hasattr(self.tracker, "close"):
            self.tracker.close()
