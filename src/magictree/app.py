from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
import yaml

from magictree.core.app_state import AppState, AppStateMachine
from magictree.core.gesture_classifier import GestureClassifierConfig
from magictree.core.gesture_session import GestureSession
from magictree.core.hand_tracker import HandTracker, HandTrackerConfig
from magictree.core.particle_integrator import IntegratorConfig, ParticleIntegrator
from magictree.core.particles import ParticleConfig, build_particle_batch
from magictree.core.photo_controller import PhotoAlbum, PhotoConfig, PhotoGrabController
from magictree.core.scene_rotation import SceneRotation, SceneRotationConfig
from magictree.core.snowfall import SnowConfig, Snowfall
from magictree.render.preview_renderer import PreviewRenderer, RendererConfig, hud_text
from magictree.utils.photo_loader import load_photos

WINDOW_NAME = "MagicTree"

STATE_KEYS = {
    ord("t"): AppState.TREE,
    ord("s"): AppState.SCATTER,
    ord("h"): AppState.HEART,
}


def load_config(project_root: Path) -> dict:
    """从项目根目录加载配置文件

    Args:
        project_root: 项目根目录路径

    Returns:
        配置字典

    Raises:
        FileNotFoundError: 如果配置文件不存在
    """
    config_path = project_root / "config.yaml"
    if not config_path.exists():
        raise FileNotFoundError(
            f"未找到配置文件：{config_path}\n"
            "请确保项目根目录存在 config.yaml 文件。"
        )
    with config_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def resolve_path(project_root: Path, raw: Optional[str], default: Optional[str] = None) -> Optional[Path]:
    target = raw or default
    if not target:
        return None
    candidate = Path(target)
    if not candidate.is_absolute():
        candidate = (project_root / candidate).resolve()
    return candidate


def build_particle_config(cfg: dict) -> ParticleConfig:
    return ParticleConfig(
        count=int(cfg.get("count", 6000)),
        ribbon_count=int(cfg.get("ribbon_count", 800)),
        trunk_fraction=float(cfg.get("trunk_fraction", 0.1)),
        seed=cfg.get("seed"),
    )


def build_classifier_config(cfg: dict) -> GestureClassifierConfig:
    return GestureClassifierConfig(
        pinch_ratio=float(cfg.get("pinch_ratio", 0.65)),
        curl_ratio=float(cfg.get("curl_ratio", 1.35)),
        min_palm_size=float(cfg.get("min_palm_size", 0.01)),
    )


def build_photo_config(cfg: dict) -> PhotoConfig:
    return PhotoConfig(
        grab_distance=float(cfg.get("grab_distance", 1.5)),
        zoom_scale=float(cfg.get("zoom_scale", 4.0)),
        idle_scale=float(cfg.get("idle_scale", 0.35)),
        smoothing=float(cfg.get("smoothing", 0.1)),
    )


def main() -> None:
    package_dir = Path(__file__).resolve().parent
    project_root = package_dir.parent.parent  # src/magictree/ -> src/ -> project_root/
    config = load_config(project_root)

    cam_cfg = config.get("camera", {})
    gesture_cfg = config.get("gesture", {})
    particle_cfg = config.get("particles", {})
    photo_cfg = config.get("photos", {})
    scene_cfg = config.get("scene", {})
    window_cfg = config.get("window", {})

    particle_config = build_particle_config(particle_cfg)
    rng = np.random.default_rng(particle_config.seed)

    batch = build_particle_batch(particle_config, rng)
    integrator = ParticleIntegrator(
        batch,
        IntegratorConfig(
            smoothing=float(particle_cfg.get("smoothing", 0.08)),
            swirl_radius=float(particle_cfg.get("swirl_radius", 4.0)),
        ),
    )
    particle_state = batch.initial_state()

    photo_config = build_photo_config(photo_cfg)
    album = PhotoAlbum(idle_scale=photo_config.idle_scale, rng=rng)
    grab_controller = PhotoGrabController(photo_config)

    state_machine = AppStateMachine(AppState.TREE)
    photo_dir = resolve_path(project_root, photo_cfg.get("directory"))
    if album.add_images(load_photos(photo_dir)):
        print(f"[Photos] 已加载 {len(album)} 张照片：{photo_dir}")
        state_machine.set(AppState.SCATTER)

    rotation = SceneRotation(SceneRotationConfig(base_speed=float(scene_cfg.get("rotation_speed", 0.2))))
    snowfall = Snowfall(SnowConfig(count=int(scene_cfg.get("snow_count", 1500))), rng=rng)
    renderer = PreviewRenderer(
        RendererConfig(
            width=int(window_cfg.get("width", 1280)),
            height=int(window_cfg.get("height", 720)),
        )
    )

    hand_model_path = resolve_path(project_root, gesture_cfg.get("hand_landmarker_path"), "weights/hand_landmarker.task")
    tracker = HandTracker(
        HandTrackerConfig(
            model_path=hand_model_path,
            max_num_hands=int(gesture_cfg.get("max_num_hands", 2)),
            min_detection_confidence=float(gesture_cfg.get("min_detection_confidence", 0.5)),
            min_tracking_confidence=float(gesture_cfg.get("min_tracking_confidence", 0.5)),
        )
    )
    session = GestureSession(tracker, build_classifier_config(gesture_cfg), state_machine)

    capture = cv2.VideoCapture(cam_cfg.get("index", 0))
    capture.set(cv2.CAP_PROP_FRAME_WIDTH, cam_cfg.get("width", 960))
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, cam_cfg.get("height", 540))
    mirror = bool(cam_cfg.get("mirror", True))
    if cam_cfg.get("autostart", True):
        session.start()

    print("MagicTree 已启动，按 'g' 开关手势识别，按 'q' 退出。")

    start = time.perf_counter()
    last = start
    try:
        while True:
            now = time.perf_counter()
            elapsed, delta = now - start, now - last
            last = now

            frame = None
            display = None
            if session.active:
                success, frame = capture.read()
                if not success:
                    print("[Camera] 无法从摄像头读取数据。")
                    break
                # 识别使用原始画面，镜像只用于显示
                display = cv2.flip(frame, 1) if mirror else frame

            snapshot = session.tick(frame)
            app_state = state_machine.state

            angle = rotation.update(snapshot.gesture, snapshot.hand_position, delta)
            particle_state, particle_frame = integrator.step(
                particle_state, app_state, snapshot.hand_position, elapsed
            )
            photo_transforms = grab_controller.update(
                album.items,
                snapshot.hand_position,
                snapshot.is_pinching,
                app_state,
                elapsed,
                group_rotation=angle,
            )
            snow = snowfall.step()

            canvas = renderer.render(
                particle_frame,
                angle,
                photos=album.items,
                photo_transforms=photo_transforms,
                snow=snow,
                snow_rotation=snowfall.rotation,
                hud_lines=hud_text(app_state.value, snapshot.gesture.value, session.active),
                camera_frame=display,
            )
            cv2.imshow(WINDOW_NAME, canvas)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                break
            if key == ord("g"):
                active = session.toggle()
                print(f"[Session] 手势识别{'已开启' if active else '已关闭'}")
            elif key in STATE_KEYS:
                state_machine.set(STATE_KEYS[key])
    finally:
        capture.release()
        session.close()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
