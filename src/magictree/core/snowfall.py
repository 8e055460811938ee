from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class SnowConfig:
    count: int = 1500
    spread: float = 25.0
    ceiling: float = 10.0
    floor: float = -10.0
    min_speed: float = 0.02
    max_speed: float = 0.10
    drift: float = 0.0005


class Snowfall:
    """飘雪：每步下落，低于地面的雪花回到顶部并重新随机 x/z。"""

    def __init__(self, cfg: Optional[SnowConfig] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.cfg = cfg or SnowConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        n = self.cfg.count
        half = self.cfg.spread / 2.0
        self.positions = np.stack(
            [
                self.rng.uniform(-half, half, n),
                self.rng.uniform(self.cfg.floor, self.cfg.ceiling, n),
                self.rng.uniform(-half, half, n),
            ],
            axis=-1,
        ).astype(np.float32)
        self.speeds = self.rng.uniform(self.cfg.min_speed, self.cfg.max_speed, n).astype(np.float32)
        self.rotation = 0.0

    def step(self) -> np.ndarray:
        cfg = self.cfg
        self.positions[:, 1] -= self.speeds
        fallen = self.positions[:, 1] < cfg.floor
        count = int(fallen.sum())
        if count:
            half = cfg.spread / 2.0
            self.positions[fallen, 1] = cfg.ceiling
            self.positions[fallen, 0] = self.rng.uniform(-half, half, count)
            self.positions[fallen, 2] = self.rng.uniform(-half, half, count)
        self.rotation += cfg.drift
        return self.positions
