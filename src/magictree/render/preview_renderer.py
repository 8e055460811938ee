from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import cv2
import numpy as np

from magictree.core.particle_integrator import ParticleFrame
from magictree.core.photo_controller import PhotoItem, PhotoTransform
from magictree.utils.geometry import rotate_y

BACKGROUND_BGR = (1, 5, 0)
SNOW_BGR = (245, 240, 255)
HUD_BGR = (193, 182, 255)
PARTICLE_RADIUS = 0.2


@dataclass
class RendererConfig:
    width: int = 1280
    height: int = 720
    camera_z: float = 16.0
    fov: float = 45.0
    near: float = 0.1
    thumbnail_width: int = 240


class PreviewRenderer:
    """简单的针孔相机投影 + OpenCV 绘制，用于预览核心逻辑的输出。"""

    def __init__(self, cfg: Optional[RendererConfig] = None) -> None:
        self.cfg = cfg or RendererConfig()
        self.focal = (self.cfg.height / 2.0) / math.tan(math.radians(self.cfg.fov) / 2.0)

    def project(self, points: np.ndarray):
        """返回 (屏幕坐标 (N, 2), 深度 (N,), 可见掩码 (N,))。"""

        cfg = self.cfg
        depth = cfg.camera_z - points[:, 2]
        visible = depth > cfg.near
        safe = np.where(visible, depth, 1.0)
        sx = cfg.width / 2.0 + points[:, 0] * self.focal / safe
        sy = cfg.height / 2.0 - points[:, 1] * self.focal / safe
        return np.stack([sx, sy], axis=-1), depth, visible

    def render(
        self,
        particles: ParticleFrame,
        scene_angle: float,
        photos: Sequence[PhotoItem] = (),
        photo_transforms: Sequence[PhotoTransform] = (),
        snow: Optional[np.ndarray] = None,
        snow_rotation: float = 0.0,
        hud_lines: Sequence[str] = (),
        camera_frame: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        cfg = self.cfg
        canvas = np.zeros((cfg.height, cfg.width, 3), dtype=np.uint8)
        canvas[:] = BACKGROUND_BGR

        if snow is not None and len(snow):
            self._draw_snow(canvas, rotate_y(snow, snow_rotation))

        self._draw_particles(canvas, particles, scene_angle)

        by_id = {p.id: p for p in photos}
        for transform in sorted(photo_transforms, key=lambda t: t.grabbed):
            photo = by_id.get(transform.id)
            if photo is not None:
                self._draw_photo(canvas, photo, transform, scene_angle)

        if camera_frame is not None:
            self._draw_thumbnail(canvas, camera_frame)

        for i, line in enumerate(hud_lines):
            cv2.putText(canvas, line, (20, 40 + i * 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, HUD_BGR, 2)
        return canvas

    def _draw_snow(self, canvas: np.ndarray, points: np.ndarray) -> None:
        screen, _, visible = self.project(points)
        pts = screen[visible].astype(np.int32)
        inside = (pts[:, 0] >= 0) & (pts[:, 0] < canvas.shape[1]) & (pts[:, 1] >= 0) & (pts[:, 1] < canvas.shape[0])
        pts = pts[inside]
        canvas[pts[:, 1], pts[:, 0]] = SNOW_BGR

    def _draw_particles(self, canvas: np.ndarray, frame: ParticleFrame, scene_angle: float) -> None:
        world = rotate_y(frame.positions, scene_angle)
        screen, depth, visible = self.project(world)
        radii = np.maximum(1, (frame.scales * PARTICLE_RADIUS * self.focal / np.where(visible, depth, 1.0)).astype(np.int32))
        bgr = (np.clip(frame.colors[:, ::-1], 0.0, 1.0) * 255).astype(np.int32)

        # 由远及近绘制
        order = np.argsort(-depth)
        for i in order:
            if not visible[i]:
                continue
            center = (int(screen[i, 0]), int(screen[i, 1]))
            cv2.circle(canvas, center, int(radii[i]), tuple(int(c) for c in bgr[i]), -1, cv2.LINE_AA)

    def _draw_photo(self, canvas: np.ndarray, photo: PhotoItem, transform: PhotoTransform, scene_angle: float) -> None:
        world = rotate_y(transform.position[None, :], scene_angle)
        screen, depth, visible = self.project(world)
        if not visible[0]:
            return
        h_px = int(transform.scale * self.focal / depth[0])
        w_px = int(h_px * photo.aspect)
        if h_px < 2 or w_px < 2:
            return

        image = cv2.resize(photo.image, (w_px, h_px), interpolation=cv2.INTER_AREA)
        x0 = int(screen[0, 0] - w_px / 2)
        y0 = int(screen[0, 1] - h_px / 2)
        self._paste(canvas, image, x0, y0)

    def _draw_thumbnail(self, canvas: np.ndarray, frame: np.ndarray) -> None:
        tw = self.cfg.thumbnail_width
        th = int(tw * frame.shape[0] / max(frame.shape[1], 1))
        thumb = cv2.resize(frame, (tw, th))
        x0 = canvas.shape[1] - tw - 20
        self._paste(canvas, thumb, x0, 20)
        cv2.rectangle(canvas, (x0, 20), (x0 + tw, 20 + th), HUD_BGR, 1)

    @staticmethod
    def _paste(canvas: np.ndarray, image: np.ndarray, x0: int, y0: int) -> None:
        ch, cw = canvas.shape[:2]
        ih, iw = image.shape[:2]
        x1, y1 = max(x0, 0), max(y0, 0)
        x2, y2 = min(x0 + iw, cw), min(y0 + ih, ch)
        if x1 >= x2 or y1 >= y2:
            return
        canvas[y1:y2, x1:x2] = image[y1 - y0 : y2 - y0, x1 - x0 : x2 - x0]


def hud_text(state: str, gesture: str, camera_active: bool) -> List[str]:
    return [
        f"State: {state}",
        f"Gesture: {gesture if camera_active else 'OFF'}",
        "[g] gestures  [t] tree  [s] scatter  [h] heart  [q] quit",
    ]
