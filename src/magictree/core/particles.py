from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence

import numpy as np

from magictree.core import shapes
from magictree.utils.geometry import Point3D, hex_to_rgb

CANOPY_PALETTE = [
    "#D87093",  # PaleVioletRed
    "#FF69B4",  # HotPink
    "#FFB6C1",  # LightPink
    "#FFFFFF",
    "#FFD700",  # Gold
    "#FF1493",  # DeepPink
]
TRUNK_COLOR = "#4A3728"
RIBBON_COLOR = "#F8F8FF"  # GhostWhite

BLINK_EVERY = 15


class ParticleKind(IntEnum):
    CANOPY = 0
    TRUNK = 1
    RIBBON = 2


@dataclass
class ParticleConfig:
    count: int = 6000
    ribbon_count: int = 800
    trunk_fraction: float = 0.1
    seed: Optional[int] = None


@dataclass(frozen=True)
class RibbonTarget:
    """仅彩带粒子携带的附加数据。"""

    fraction: float
    height: float
    position: Point3D


@dataclass(frozen=True)
class Particle:
    """单个粒子的只读视图，ribbon 仅对彩带粒子存在。"""

    id: int
    kind: ParticleKind
    tree: Point3D
    heart: Point3D
    scatter: Point3D
    color: tuple
    size: float
    phase: float
    speed: float
    ribbon: Optional[RibbonTarget] = None

    @property
    def is_ribbon(self) -> bool:
        return self.kind == ParticleKind.RIBBON

    @property
    def is_trunk(self) -> bool:
        return self.kind == ParticleKind.TRUNK


@dataclass
class ParticleState:
    """每帧由积分器接收并返回的可变状态：当前插值位置。"""

    positions: np.ndarray  # (N, 3)

    def copy(self) -> "ParticleState":
        return ParticleState(positions=self.positions.copy())


@dataclass(frozen=True, eq=False)
class ParticleBatch:
    """
    一批粒子的列式存储。批次创建后数量与索引固定，
    第 i 个粒子始终对应渲染槽位 i；配置变化时整批替换。
    """

    kinds: np.ndarray  # (N,) int8
    tree: np.ndarray  # (N, 3)
    heart: np.ndarray  # (N, 3)
    scatter: np.ndarray  # (N, 3)
    colors: np.ndarray  # (N, 3) 0..1 RGB
    sizes: np.ndarray  # (N,)
    phases: np.ndarray  # (N,)
    speeds: np.ndarray  # (N,)
    ribbon_indices: np.ndarray  # (R,)
    ribbon_fractions: np.ndarray  # (R,)
    ribbon_heights: np.ndarray  # (R,)
    ids: np.ndarray = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        n = len(self.kinds)
        if self.ids is None:
            object.__setattr__(self, "ids", np.arange(n, dtype=np.int32))
        for name in ("ids", "tree", "heart", "scatter", "colors", "sizes", "phases", "speeds"):
            if len(getattr(self, name)) != n:
                raise ValueError(f"粒子数组长度不一致：{name} 为 {len(getattr(self, name))}，应为 {n}")
        for name in ("tree", "heart", "scatter", "colors"):
            if getattr(self, name).shape != (n, 3):
                raise ValueError(f"{name} 形状必须为 ({n}, 3)")

        r = len(self.ribbon_indices)
        if len(self.ribbon_fractions) != r or len(self.ribbon_heights) != r:
            raise ValueError("彩带数组长度不一致")
        ribbon_mask = self.kinds == ParticleKind.RIBBON
        if int(ribbon_mask.sum()) != r or not np.all(ribbon_mask[self.ribbon_indices]):
            raise ValueError("每个彩带粒子必须且只能有一条彩带目标")

    def __len__(self) -> int:
        return len(self.kinds)

    @property
    def is_ribbon(self) -> np.ndarray:
        return self.kinds == ParticleKind.RIBBON

    @property
    def is_trunk(self) -> np.ndarray:
        return self.kinds == ParticleKind.TRUNK

    @property
    def blink_mask(self) -> np.ndarray:
        """闪烁的小灯：只在树冠粒子中，每 15 个取一个。"""

        return (self.kinds == ParticleKind.CANOPY) & (self.ids % BLINK_EVERY == 0)

    @property
    def scale_multipliers(self) -> np.ndarray:
        return np.where(self.is_ribbon, 1.2, 1.0).astype(np.float32)

    def initial_state(self) -> ParticleState:
        # 粒子从散开位置出发，首帧开始向树形收拢
        return ParticleState(positions=self.scatter.copy())

    def particle(self, index: int) -> Particle:
        ribbon = None
        if self.kinds[index] == ParticleKind.RIBBON:
            slot = int(np.searchsorted(self.ribbon_indices, index))
            ribbon = RibbonTarget(
                fraction=float(self.ribbon_fractions[slot]),
                height=float(self.ribbon_heights[slot]),
                position=Point3D.from_array(self.tree[index]),
            )
        return Particle(
            id=int(self.ids[index]),
            kind=ParticleKind(int(self.kinds[index])),
            tree=Point3D.from_array(self.tree[index]),
            heart=Point3D.from_array(self.heart[index]),
            scatter=Point3D.from_array(self.scatter[index]),
            color=tuple(float(c) for c in self.colors[index]),
            size=float(self.sizes[index]),
            phase=float(self.phases[index]),
            speed=float(self.speeds[index]),
            ribbon=ribbon,
        )

    def particles(self) -> List[Particle]:
        return [self.particle(i) for i in range(len(self))]


def assign_kinds(count: int, ribbon_count: int, trunk_fraction: float) -> np.ndarray:
    """前 ribbon_count 个为彩带，其余中最后约 trunk_fraction 为树干。"""

    if count <= 0:
        raise ValueError(f"粒子数量必须为正数：{count}")
    if not 0 <= ribbon_count <= count:
        raise ValueError(f"彩带粒子数 {ribbon_count} 超出范围 [0, {count}]")

    idx = np.arange(count)
    kinds = np.full(count, ParticleKind.CANOPY, dtype=np.int8)
    kinds[idx > count - count * trunk_fraction] = ParticleKind.TRUNK
    kinds[idx < ribbon_count] = ParticleKind.RIBBON
    return kinds


def build_particle_batch(
    cfg: ParticleConfig,
    rng: Optional[np.random.Generator] = None,
    palette: Sequence[str] = CANOPY_PALETTE,
) -> ParticleBatch:
    rng = rng if rng is not None else np.random.default_rng(cfg.seed)
    n = cfg.count
    kinds = assign_kinds(n, cfg.ribbon_count, cfg.trunk_fraction)
    is_ribbon = kinds == ParticleKind.RIBBON
    is_trunk = kinds == ParticleKind.TRUNK

    tree = shapes.sample_tree(rng, n)
    tree[is_trunk] = shapes.sample_trunk(rng, int(is_trunk.sum()))

    ribbon_indices = np.flatnonzero(is_ribbon).astype(np.int32)
    ribbon_fractions = (ribbon_indices / max(cfg.ribbon_count, 1)).astype(np.float32)
    ribbon_heights = shapes.ribbon_heights(ribbon_fractions).astype(np.float32)
    tree[ribbon_indices] = shapes.ribbon_at_height(ribbon_heights)

    heart = shapes.sample_heart(rng, n)
    scatter = shapes.sample_scatter(rng, n)

    palette_rgb = np.stack([hex_to_rgb(c) for c in palette])
    colors = palette_rgb[rng.integers(0, len(palette_rgb), n)]
    colors[is_trunk] = hex_to_rgb(TRUNK_COLOR)
    colors[is_ribbon] = hex_to_rgb(RIBBON_COLOR)

    sizes = np.where(
        is_ribbon,
        rng.uniform(0.0, 0.12, n) + 0.08,
        rng.uniform(0.0, 0.1, n) + 0.05,
    ).astype(np.float32)
    speeds = (rng.uniform(0.0, 0.02, n) + 0.01).astype(np.float32)
    phases = rng.uniform(0.0, 2.0 * math.pi, n).astype(np.float32)

    return ParticleBatch(
        kinds=kinds,
        tree=tree,
        heart=heart,
        scatter=scatter,
        colors=colors.astype(np.float32),
        sizes=sizes,
        phases=phases,
        speeds=speeds,
        ribbon_indices=ribbon_indices,
        ribbon_fractions=ribbon_fractions,
        ribbon_heights=ribbon_heights,
    )
