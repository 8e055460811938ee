import numpy as np
import pytest

from magictree.core.gesture_classifier import (
    GestureClassifierConfig,
    GestureResult,
    GestureType,
    classify_gesture,
    classify_packets,
)
from magictree.utils.geometry import Point2D
from magictree.utils.landmark_preprocess import LandmarkPacket, scale_about_wrist


def test_open_palm_anchors_on_middle_mcp(make_hand):
    result = classify_gesture(make_hand())
    assert result.type == GestureType.OPEN_PALM
    assert result.anchor == pytest.approx(Point2D(0.5, 0.7))
    assert result.pinch_distance == 1.0


def test_one_curled_finger_is_still_open_palm(make_hand):
    assert classify_gesture(make_hand(curled=(20,))).type == GestureType.OPEN_PALM


def test_pinch_with_two_curled_fingers(make_hand):
    # 拇指与食指相距 0.02，掌长 0.1，阈值 0.065
    hand = make_hand(curled=(16, 20), thumb=(0.47, 0.6))
    result = classify_gesture(hand)
    assert result.type == GestureType.PINCH
    assert result.anchor == pytest.approx(Point2D(0.45, 0.6))
    assert result.pinch_distance == pytest.approx(0.02, abs=1e-6)


def test_closed_fist_regardless_of_thumb(make_hand):
    far = classify_gesture(make_hand(curled=(8, 12, 16, 20)))
    assert far.type == GestureType.CLOSED_FIST
    assert far.anchor == pytest.approx(Point2D(0.5, 0.8))
    assert far.pinch_distance == 1.0


def test_fist_takes_priority_over_pinch(make_hand):
    hand = make_hand(curled=(8, 12, 16, 20), thumb=(0.48, 0.72))
    assert classify_gesture(hand).type == GestureType.CLOSED_FIST


def test_two_or_three_curled_fingers_is_ambiguous(make_hand):
    for curled in ((16, 20), (12, 16, 20)):
        result = classify_gesture(make_hand(curled=curled))
        assert result == GestureResult(GestureType.NONE, None, 1.0)


def test_no_hand_is_none():
    assert classify_gesture(None) == GestureResult(GestureType.NONE, None, 1.0)
    assert classify_packets([]).type == GestureType.NONE
    assert classify_packets(None).anchor is None


def test_primary_hand_is_first_packet(make_hand):
    packets = [
        LandmarkPacket("Right", make_hand(curled=(8, 12, 16, 20))),
        LandmarkPacket("Left", make_hand()),
    ]
    assert classify_packets(packets).type == GestureType.CLOSED_FIST


def test_classification_is_deterministic(make_hand):
    hand = make_hand(curled=(16, 20), thumb=(0.47, 0.6))
    assert classify_gesture(hand) == classify_gesture(hand.copy())


@pytest.mark.parametrize("factor", [0.3, 0.75, 1.5, 2.5])
@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"curled": (20,)},
        {"curled": (16, 20), "thumb": (0.47, 0.6)},
        {"curled": (8, 12, 16, 20)},
        {"curled": (12, 16, 20)},
    ],
)
def test_scale_invariance(make_hand, kwargs, factor):
    hand = make_hand(**kwargs)
    scaled = scale_about_wrist(hand, factor)
    assert classify_gesture(scaled).type == classify_gesture(hand).type


def test_degenerate_palm_is_clamped():
    collapsed = np.full((21, 3), 0.5, dtype=np.float32)
    result = classify_gesture(collapsed)
    assert result.type == GestureType.CLOSED_FIST


def test_custom_thresholds(make_hand):
    hand = make_hand(curled=(16, 20), thumb=(0.47, 0.6))
    strict = GestureClassifierConfig(pinch_ratio=0.1)
    assert classify_gesture(hand, strict).type == GestureType.NONE


def test_wrong_shape_raises():
    with pytest.raises(ValueError):
        classify_gesture(np.zeros((20, 3)))
