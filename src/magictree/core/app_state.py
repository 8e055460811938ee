from __future__ import annotations

from enum import Enum
from typing import Dict

from magictree.core.gesture_classifier import GestureType


class AppState(str, Enum):
    TREE = "TREE"
    SCATTER = "SCATTER"
    HEART = "HEART"
    PHOTO_VIEW = "PHOTO_VIEW"


GESTURE_STATE_MAP: Dict[GestureType, AppState] = {
    GestureType.OPEN_PALM: AppState.SCATTER,
    GestureType.CLOSED_FIST: AppState.TREE,
}


class AppStateMachine:
    """张开手掌 -> 散开，握拳 -> 聚成树；其他手势不改变状态。"""

    def __init__(self, initial: AppState = AppState.TREE) -> None:
        self.state = initial

    def on_gesture(self, gesture: GestureType) -> AppState:
        self.state = GESTURE_STATE_MAP.get(gesture, self.state)
        return self.state

    def set(self, state: AppState) -> AppState:
        self.state = state
        return self.state
