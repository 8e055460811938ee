from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".bmp", ".webp"}


def load_photos(directory: Optional[Path], max_side: int = 512) -> List[np.ndarray]:
    """读取目录下所有图片（BGR），过大的图片按长边缩小。"""

    if directory is None or not directory.is_dir():
        return []

    images = []
    for path in sorted(directory.iterdir()):
        if path.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            print(f"[Photos] 无法读取图片，已跳过：{path.name}")
            continue
        h, w = image.shape[:2]
        scale = max_side / max(h, w)
        if scale < 1.0:
            image = cv2.resize(image, (int(w * scale), int(h * scale)), interpolation=cv2.INTER_AREA)
        images.append(image)
    return images
