import numpy as np
import pytest

from magictree.core.particles import ParticleConfig, build_particle_batch

WRIST_XY = (0.5, 0.8)
MIDDLE_MCP_XY = (0.5, 0.7)  # 掌长 0.1

EXTENDED_TIPS = {
    8: (0.45, 0.6),
    12: (0.5, 0.58),
    16: (0.55, 0.6),
    20: (0.6, 0.62),
}
CURLED_TIPS = {
    8: (0.47, 0.72),
    12: (0.5, 0.71),
    16: (0.53, 0.72),
    20: (0.56, 0.74),
}
THUMB_AWAY = (0.3, 0.7)


def _build_hand(curled=(), thumb=THUMB_AWAY, tips=None):
    lm = np.zeros((21, 3), dtype=np.float32)
    lm[:, :2] = WRIST_XY
    lm[9, :2] = MIDDLE_MCP_XY
    lm[5, :2] = (0.46, 0.71)
    for idx, xy in EXTENDED_TIPS.items():
        lm[idx, :2] = CURLED_TIPS[idx] if idx in curled else xy
    for idx, xy in (tips or {}).items():
        lm[idx, :2] = xy
    lm[4, :2] = thumb
    return lm


@pytest.fixture
def make_hand():
    return _build_hand


@pytest.fixture
def small_batch():
    return build_particle_batch(ParticleConfig(count=100, ribbon_count=13, seed=7))
