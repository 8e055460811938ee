import numpy as np
import pytest

from magictree.core.gesture_classifier import GestureType
from magictree.core.scene_rotation import SceneRotation
from magictree.core.snowfall import SnowConfig, Snowfall
from magictree.utils.geometry import Point3D


def test_rotation_base_speed():
    rotation = SceneRotation()
    assert rotation.update(GestureType.NONE, None, 1.0) == pytest.approx(0.2)
    assert rotation.update(GestureType.PINCH, Point3D(3.0, 0.0, 0.0), 0.5) == pytest.approx(0.3)


def test_open_palm_wave_speeds_up_rotation():
    rotation = SceneRotation()
    angle = rotation.update(GestureType.OPEN_PALM, Point3D(1.0, 0.0, 0.0), 1.0)
    assert angle == pytest.approx(0.2 + 1.0 * 15.0)

    # 移动小于阈值时不加速
    before = rotation.angle
    rotation.update(GestureType.OPEN_PALM, Point3D(1.01, 0.0, 0.0), 1.0)
    assert rotation.angle - before == pytest.approx(0.2)


def test_snow_falls_and_respawns_at_ceiling():
    snow = Snowfall(SnowConfig(count=200), rng=np.random.default_rng(0))
    snow.positions[0, 1] = -9.99
    snow.speeds[0] = 0.05
    y_before = snow.positions[1:, 1].copy()

    positions = snow.step()
    assert positions[0, 1] == pytest.approx(10.0)
    assert abs(positions[0, 0]) <= 12.5 and abs(positions[0, 2]) <= 12.5

    fell = y_before - snow.speeds[1:] >= -10.0
    np.testing.assert_allclose(positions[1:, 1][fell], (y_before - snow.speeds[1:])[fell], atol=1e-6)
    assert snow.rotation == pytest.approx(0.0005)


def test_snow_stays_in_bounds():
    snow = Snowfall(SnowConfig(count=300), rng=np.random.default_rng(1))
    for _ in range(500):
        positions = snow.step()
    assert positions[:, 1].min() >= -10.0
    assert positions[:, 1].max() <= 10.0
