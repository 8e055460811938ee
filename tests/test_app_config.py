from pathlib import Path

import pytest

pytest.importorskip("mediapipe")

from magictree.app import (  # noqa: E402
    build_classifier_config,
    build_particle_config,
    build_photo_config,
    load_config,
    resolve_path,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_missing_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path)


def test_shipped_config_matches_defaults():
    config = load_config(PROJECT_ROOT)
    particles = build_particle_config(config["particles"])
    assert particles.count == 6000
    assert particles.ribbon_count == 800
    gesture = build_classifier_config(config["gesture"])
    assert gesture.pinch_ratio == pytest.approx(0.65)
    assert gesture.curl_ratio == pytest.approx(1.35)
    photos = build_photo_config(config["photos"])
    assert photos.grab_distance == pytest.approx(1.5)
    assert photos.zoom_scale == pytest.approx(4.0)


def test_empty_sections_fall_back_to_defaults(tmp_path):
    (tmp_path / "config.yaml").write_text("", encoding="utf-8")
    assert load_config(tmp_path) == {}
    assert build_particle_config({}).trunk_fraction == pytest.approx(0.1)
    assert build_photo_config({}).idle_scale == pytest.approx(0.35)


def test_resolve_path(tmp_path):
    assert resolve_path(tmp_path, None) is None
    assert resolve_path(tmp_path, "weights/x.task") == (tmp_path / "weights" / "x.task").resolve()
    assert resolve_path(tmp_path, None, "photos") == (tmp_path / "photos").resolve()
