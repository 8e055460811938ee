from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from magictree.core.gesture_classifier import GestureType
from magictree.utils.geometry import Point3D


@dataclass
class SceneRotationConfig:
    base_speed: float = 0.2  # rad/s
    wave_threshold: float = 0.02
    wave_gain: float = 15.0


class SceneRotation:
    """整组场景绕 y 轴匀速旋转；张开手掌左右挥动时加速。"""

    def __init__(self, cfg: Optional[SceneRotationConfig] = None) -> None:
        self.cfg = cfg or SceneRotationConfig()
        self.angle = 0.0
        self._last_hand_x = 0.0

    def update(self, gesture: GestureType, hand_position: Optional[Point3D], delta: float) -> float:
        speed = self.cfg.base_speed
        if gesture == GestureType.OPEN_PALM and hand_position is not None:
            dx = hand_position.x - self._last_hand_x
            if abs(dx) > self.cfg.wave_threshold:
                speed += abs(dx) * self.cfg.wave_gain
            self._last_hand_x = hand_position.x

        self.angle += delta * speed
        return self.angle
