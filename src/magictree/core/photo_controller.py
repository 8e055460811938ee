from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np

from magictree.core.app_state import AppState
from magictree.utils.geometry import Point3D, lerp, rotate_y


@dataclass
class PhotoConfig:
    grab_distance: float = 1.5
    zoom_scale: float = 4.0
    idle_scale: float = 0.35
    smoothing: float = 0.1
    hand_offset_z: float = 0.5
    float_amplitude: float = 0.002
    tilt_amplitude: float = 0.1
    tilt_frequency: float = 0.5


@dataclass
class PhotoItem:
    """漂浮照片。position/scale 为组内局部坐标下的当前插值状态。"""

    id: str
    image: np.ndarray
    home: Point3D
    position: np.ndarray = field(default=None)  # type: ignore[assignment]
    scale: float = 0.35

    def __post_init__(self) -> None:
        if self.position is None:
            self.position = self.home.to_array()

    @property
    def aspect(self) -> float:
        h, w = self.image.shape[:2]
        return w / h if h and w else 1.0


@dataclass(frozen=True)
class PhotoTransform:
    id: str
    position: np.ndarray
    scale: float
    tilt: float
    grabbed: bool


class PhotoAlbum:
    """持有照片列表；新照片在 ±4/±3/±4 的盒子内随机分配初始位置。"""

    HOME_EXTENT = (8.0, 6.0, 8.0)

    def __init__(self, idle_scale: float = 0.35, rng: Optional[np.random.Generator] = None) -> None:
        self.idle_scale = idle_scale
        self.rng = rng if rng is not None else np.random.default_rng()
        self.items: List[PhotoItem] = []

    def __len__(self) -> int:
        return len(self.items)

    def add_images(self, images: Iterable[np.ndarray]) -> List[PhotoItem]:
        added = []
        for image in images:
            home = Point3D(*((self.rng.random() - 0.5) * e for e in self.HOME_EXTENT))
            item = PhotoItem(id=str(uuid.uuid4()), image=image, home=home, scale=self.idle_scale)
            self.items.append(item)
            added.append(item)
        return added


class PhotoGrabController:
    """
    捏合抓取照片：仅在散开状态下、捏合进行中时，选择离手最近且
    距离小于阈值的一张照片。抓取是粘滞的，只要捏合未结束，即使手移开
    也保持；捏合一结束立即释放。同一时刻最多抓住一张。
    """

    def __init__(self, cfg: Optional[PhotoConfig] = None) -> None:
        self.cfg = cfg or PhotoConfig()
        self.active_id: Optional[str] = None

    def find_candidate(
        self,
        photos: List[PhotoItem],
        hand_position: Point3D,
        group_rotation: float = 0.0,
    ) -> Optional[str]:
        if not photos:
            return None
        local = np.stack([p.position for p in photos])
        world = rotate_y(local, group_rotation)
        dist = np.linalg.norm(world - hand_position.to_array(), axis=1)
        best = int(np.argmin(dist))
        if dist[best] < self.cfg.grab_distance:
            return photos[best].id
        return None

    def update(
        self,
        photos: List[PhotoItem],
        hand_position: Optional[Point3D],
        is_pinching: bool,
        app_state: AppState,
        time: float,
        group_rotation: float = 0.0,
    ) -> List[PhotoTransform]:
        cfg = self.cfg

        candidate = None
        if hand_position is not None and is_pinching and app_state == AppState.SCATTER:
            candidate = self.find_candidate(photos, hand_position, group_rotation)

        if candidate is not None:
            self.active_id = candidate
        elif not is_pinching:
            self.active_id = None
        if self.active_id is not None and all(p.id != self.active_id for p in photos):
            self.active_id = None

        hand_local = None
        if hand_position is not None:
            hand_local = rotate_y(hand_position.to_array(), -group_rotation)
            hand_local[2] += cfg.hand_offset_z

        transforms = []
        for idx, photo in enumerate(photos):
            grabbed = photo.id == self.active_id
            if grabbed and hand_local is not None:
                target_pos = hand_local
                target_scale = cfg.zoom_scale
            else:
                target_pos = photo.home.to_array()
                target_pos[1] += math.sin(time + idx) * cfg.float_amplitude
                target_scale = cfg.idle_scale

            photo.position = lerp(photo.position, target_pos, cfg.smoothing).astype(np.float32)
            photo.scale = float(lerp(photo.scale, target_scale, cfg.smoothing))

            tilt = 0.0 if grabbed else math.sin(time * cfg.tilt_frequency + idx) * cfg.tilt_amplitude
            transforms.append(
                PhotoTransform(
                    id=photo.id,
                    position=photo.position.copy(),
                    scale=photo.scale,
                    tilt=tilt,
                    grabbed=grabbed,
                )
            )
        return transforms
