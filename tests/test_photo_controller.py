import math

import numpy as np
import pytest

from magictree.core.app_state import AppState
from magictree.core.photo_controller import PhotoAlbum, PhotoGrabController, PhotoItem
from magictree.utils.geometry import Point3D


def make_photo(photo_id, home):
    return PhotoItem(id=photo_id, image=np.zeros((10, 20, 3), dtype=np.uint8), home=Point3D(*home))


def test_pinch_near_photo_grabs_it():
    photos = [make_photo("a", (0.0, 0.0, 0.0))]
    controller = PhotoGrabController()
    transforms = controller.update(photos, Point3D(0.5, 0.0, 0.0), True, AppState.SCATTER, 0.0)
    assert controller.active_id == "a"
    assert transforms[0].grabbed
    assert transforms[0].tilt == 0.0
    assert transforms[0].scale == pytest.approx(0.35 + (4.0 - 0.35) * 0.1)


def test_grab_is_sticky_until_pinch_ends():
    photos = [make_photo("a", (0.0, 0.0, 0.0))]
    controller = PhotoGrabController()
    controller.update(photos, Point3D(0.5, 0.0, 0.0), True, AppState.SCATTER, 0.0)

    # 手移出抓取半径，只要仍在捏合就保持抓取
    far_hand = Point3D(6.0, 2.0, 0.0)
    for step in range(5):
        transforms = controller.update(photos, far_hand, True, AppState.SCATTER, step * 0.1)
        assert controller.active_id == "a"
        assert transforms[0].grabbed

    controller.update(photos, far_hand, False, AppState.SCATTER, 1.0)
    assert controller.active_id is None


def test_grabbed_photo_follows_hand_in_front():
    photos = [make_photo("a", (0.0, 0.0, 0.0))]
    controller = PhotoGrabController()
    hand = Point3D(1.0, 0.5, 0.0)
    for _ in range(200):
        controller.update(photos, hand, True, AppState.SCATTER, 0.0)
    np.testing.assert_allclose(photos[0].position, [1.0, 0.5, 0.5], atol=1e-4)
    assert photos[0].scale == pytest.approx(4.0, abs=1e-4)


def test_closest_candidate_wins():
    photos = [make_photo("a", (0.0, 0.0, 0.0)), make_photo("b", (1.0, 0.0, 0.0))]
    controller = PhotoGrabController()
    transforms = controller.update(photos, Point3D(0.9, 0.0, 0.0), True, AppState.SCATTER, 0.0)
    assert controller.active_id == "b"
    assert [t.grabbed for t in transforms] == [False, True]


def test_no_grab_outside_scatter_or_out_of_reach():
    photos = [make_photo("a", (0.0, 0.0, 0.0))]
    controller = PhotoGrabController()
    controller.update(photos, Point3D(0.2, 0.0, 0.0), True, AppState.TREE, 0.0)
    assert controller.active_id is None
    controller.update(photos, Point3D(2.0, 0.0, 0.0), True, AppState.SCATTER, 0.0)
    assert controller.active_id is None
    controller.update(photos, Point3D(0.2, 0.0, 0.0), False, AppState.SCATTER, 0.0)
    assert controller.active_id is None


def test_idle_photos_float_home_and_tilt():
    photos = [make_photo("a", (1.0, 2.0, 3.0))]
    photos[0].scale = 2.0
    controller = PhotoGrabController()
    time = 0.4
    transforms = controller.update(photos, None, False, AppState.SCATTER, time)
    # 起始于 home，只向浮动目标靠近 10%
    expected_y = 2.0 + 0.1 * math.sin(time) * 0.002
    np.testing.assert_allclose(transforms[0].position, [1.0, expected_y, 3.0], atol=1e-6)
    assert transforms[0].scale == pytest.approx(2.0 + (0.35 - 2.0) * 0.1)
    assert transforms[0].tilt == pytest.approx(math.sin(time * 0.5) * 0.1)
    assert not transforms[0].grabbed


def test_grab_uses_rotated_world_positions():
    photos = [make_photo("a", (2.0, 0.0, 0.0))]
    controller = PhotoGrabController()
    angle = math.pi / 2
    # 组绕 y 旋转 90° 后，局部 (2, 0, 0) 位于世界 (0, 0, -2)
    controller.update(photos, Point3D(2.0, 0.0, 0.0), True, AppState.SCATTER, 0.0, group_rotation=angle)
    assert controller.active_id is None

    hand = Point3D(0.0, 0.0, -2.0)
    for _ in range(200):
        controller.update(photos, hand, True, AppState.SCATTER, 0.0, group_rotation=angle)
    assert controller.active_id == "a"
    np.testing.assert_allclose(photos[0].position, [2.0, 0.0, 0.5], atol=1e-4)


def test_removed_photo_releases_grab():
    photos = [make_photo("a", (0.0, 0.0, 0.0)), make_photo("b", (5.0, 0.0, 0.0))]
    controller = PhotoGrabController()
    controller.update(photos, Point3D(0.1, 0.0, 0.0), True, AppState.SCATTER, 0.0)
    assert controller.active_id == "a"
    controller.update(photos[1:], Point3D(0.1, 0.0, 0.0), True, AppState.SCATTER, 0.0)
    assert controller.active_id is None


def test_album_assigns_ids_and_homes():
    album = PhotoAlbum(rng=np.random.default_rng(0))
    added = album.add_images([np.zeros((4, 8, 3), dtype=np.uint8) for _ in range(5)])
    assert len(album) == 5
    assert len({p.id for p in added}) == 5
    for photo in added:
        assert abs(photo.home.x) <= 4.0 and abs(photo.home.y) <= 3.0 and abs(photo.home.z) <= 4.0
        np.testing.assert_allclose(photo.position, photo.home.to_array())
        assert photo.scale == 0.35
        assert photo.aspect == 2.0
