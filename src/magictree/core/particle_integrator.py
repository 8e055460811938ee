from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from magictree.core import shapes
from magictree.core.app_state import AppState
from magictree.core.particles import ParticleBatch, ParticleState
from magictree.utils.geometry import Point3D, lerp


@dataclass
class IntegratorConfig:
    smoothing: float = 0.08
    swirl_radius: float = 4.0
    swirl_amplitude: float = 0.5
    sway_amplitude: float = 0.05
    sway_frequency: float = 2.0
    pulse_amplitude: float = 0.5
    pulse_frequency: float = 5.0
    blink_frequency: float = 3.0
    blink_dim: float = 0.4


@dataclass
class ParticleFrame:
    """交给渲染器的一帧实例数据。"""

    positions: np.ndarray  # (N, 3)
    scales: np.ndarray  # (N,)
    colors: np.ndarray  # (N, 3)
    dirty: bool = True


def select_targets(batch: ParticleBatch, app_state: AppState, time: float) -> np.ndarray:
    """按应用状态选出每个粒子的基础目标位置（新数组，可安全修改）。"""

    if app_state == AppState.SCATTER:
        return batch.scatter.copy()
    if app_state == AppState.HEART:
        return batch.heart.copy()

    targets = batch.tree.copy()
    if app_state == AppState.TREE and len(batch.ribbon_indices):
        targets[batch.ribbon_indices] = shapes.ribbon_flow(batch.ribbon_heights, time)
    return targets


def swirl_mask(batch: ParticleBatch, hand_position: Point3D, radius: float) -> np.ndarray:
    """原始散开位置与手的距离小于 radius 的粒子（硬截断，无衰减）。"""

    dist = np.linalg.norm(batch.scatter - hand_position.to_array(), axis=1)
    return dist < radius


class ParticleIntegrator:
    """
    每帧更新：选目标 -> 手势扰动 -> 呼吸摆动 -> 指数平滑 -> 脉动缩放与闪烁颜色。
    状态由调用方持有，step() 传入旧状态并返回新状态，不增删、不重排粒子。
    """

    def __init__(self, batch: ParticleBatch, cfg: Optional[IntegratorConfig] = None) -> None:
        self.batch = batch
        self.cfg = cfg or IntegratorConfig()
        self._scale_base = batch.sizes * batch.scale_multipliers
        self._blink_mask = batch.blink_mask

    def targets(
        self,
        app_state: AppState,
        hand_position: Optional[Point3D],
        time: float,
    ) -> np.ndarray:
        cfg = self.cfg
        batch = self.batch
        targets = select_targets(batch, app_state, time)

        if hand_position is not None and app_state == AppState.SCATTER:
            mask = swirl_mask(batch, hand_position, cfg.swirl_radius)
            if mask.any():
                angle = time + batch.ids[mask]
                targets[mask, 0] += np.cos(angle) * cfg.swirl_amplitude
                targets[mask, 1] += np.sin(angle) * cfg.swirl_amplitude
        return targets

    def step(
        self,
        state: ParticleState,
        app_state: AppState,
        hand_position: Optional[Point3D],
        time: float,
    ) -> Tuple[ParticleState, ParticleFrame]:
        cfg = self.cfg
        batch = self.batch
        if state.positions.shape != batch.tree.shape:
            raise ValueError(f"状态形状 {state.positions.shape} 与粒子批次 {batch.tree.shape} 不一致")

        targets = self.targets(app_state, hand_position, time)
        targets[:, 1] += np.sin(time * cfg.sway_frequency + batch.phases) * cfg.sway_amplitude

        positions = lerp(state.positions, targets, cfg.smoothing).astype(np.float32)

        pulse = 1.0 + np.sin(time * cfg.pulse_frequency + batch.phases) * cfg.pulse_amplitude
        scales = (self._scale_base * pulse).astype(np.float32)

        colors = batch.colors.copy()
        if self._blink_mask.any():
            dark = np.sin(time * cfg.blink_frequency + batch.phases) <= 0.0
            dim = self._blink_mask & dark
            colors[dim] *= cfg.blink_dim

        return ParticleState(positions=positions), ParticleFrame(positions, scales, colors, True)
