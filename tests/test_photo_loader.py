import cv2
import numpy as np

from magictree.utils.photo_loader import load_photos


def test_loads_images_and_skips_broken_files(tmp_path, capsys):
    cv2.imwrite(str(tmp_path / "a.png"), np.full((10, 20, 3), 128, dtype=np.uint8))
    cv2.imwrite(str(tmp_path / "b.jpg"), np.zeros((1000, 500, 3), dtype=np.uint8))
    (tmp_path / "broken.png").write_bytes(b"not an image")
    (tmp_path / "notes.txt").write_text("ignored")

    images = load_photos(tmp_path, max_side=256)
    assert len(images) == 2
    assert images[0].shape == (10, 20, 3)
    assert max(images[1].shape[:2]) == 256
    assert "broken.png" in capsys.readouterr().out


def test_missing_directory_gives_no_photos(tmp_path):
    assert load_photos(tmp_path / "nope") == []
    assert load_photos(None) == []
