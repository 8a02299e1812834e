#!/usr/bin/env python3
"""Tests for the mask helpers and the command-line interface."""

import numpy as np
import pytest
from PIL import Image

from fasteedt import (
    binarize_image,
    distance_to_image,
    load_image,
    roi_to_mask,
    save_image,
    squared_distance_transform,
)
from fasteedt.__main__ import main


# ============================================================================
# ROI MASKS
# ============================================================================

def test_roi_inside_fov():
    bw = roi_to_mask(10, 8, 3, 2, 4, 5)
    assert bw.shape == (8, 10)
    expected = np.zeros((8, 10), dtype=np.uint8)
    expected[1:6, 2:6] = 1
    np.testing.assert_array_equal(bw, expected)


def test_roi_clipped_to_fov():
    bw = roi_to_mask(6, 6, 4, 5, 10, 10)
    assert bw.sum() == 3 * 2
    assert bw[4:, 3:].all()


def test_roi_outside_fov_is_empty():
    bw = roi_to_mask(5, 5, 7, 1, 2, 2)
    assert not bw.any()


def test_roi_covering_fov():
    assert roi_to_mask(4, 3, 1, 1, 4, 3).all()


@pytest.mark.parametrize("args", [
    (0, 5, 1, 1, 1, 1),
    (5, 5, 1, 1, 0, 1),
    (5, 5, -2, 1, 1, 1),
    (5, 5, 1.5, 1, 1, 1),
    (5, 5, 1, True, 1, 1),
])
def test_roi_rejects_bad_arguments(args):
    with pytest.raises(ValueError):
        roi_to_mask(*args)


def test_roi_mask_distance():
    dt = squared_distance_transform(roi_to_mask(7, 7, 3, 3, 3, 3))
    assert dt[0, 0] == 8
    assert dt[3, 3] == 0
    assert dt[3, 0] == 4


# ============================================================================
# IMAGE HELPERS
# ============================================================================

def test_binarize_default_threshold():
    img = np.array([[0, 10], [200, 255]], dtype=np.uint8)
    np.testing.assert_array_equal(binarize_image(img), [[0, 0], [1, 1]])


def test_binarize_rgb_and_invert():
    img = np.zeros((2, 2, 3), dtype=np.uint8)
    img[0, 0] = 255
    np.testing.assert_array_equal(binarize_image(img, 100, invert=True), [[0, 1], [1, 1]])


def test_distance_to_image():
    out = distance_to_image(np.array([[0, 5], [10, 10]]))
    assert out.dtype == np.uint8
    np.testing.assert_array_equal(out, [[0, 128], [255, 255]])
    assert not distance_to_image(np.zeros((2, 2))).any()


def test_image_round_trip(tmp_path):
    path = str(tmp_path / "mask.png")
    img = np.zeros((4, 6), dtype=np.uint8)
    img[1, 2] = 255
    save_image(img, path)
    np.testing.assert_array_equal(load_image(path), img)


# ============================================================================
# COMMAND LINE
# ============================================================================

def test_cli_image(tmp_path, capsys):
    img = np.zeros((9, 12), dtype=np.uint8)
    img[4, 6] = 255
    src = tmp_path / "mask.png"
    Image.fromarray(img).save(src)
    out = tmp_path / "dist.npy"
    preview = tmp_path / "preview.png"

    assert main([str(src), str(out), "--preview", str(preview)]) == 0

    dist = np.load(out)
    np.testing.assert_array_equal(dist, squared_distance_transform(img > 0))
    assert preview.exists()
    assert "Done!" in capsys.readouterr().out


def test_cli_invert_and_parallel(tmp_path):
    img = np.full((8, 8), 255, dtype=np.uint8)
    img[2, 5] = 0
    src = tmp_path / "mask.png"
    Image.fromarray(img).save(src)
    out = tmp_path / "dist.npy"

    main([str(src), str(out), "--invert", "--parallel", "-t", "128"])

    dist = np.load(out)
    assert dist[2, 5] == 0
    assert dist[0, 0] == 4 + 25


def test_cli_roi(tmp_path):
    out = tmp_path / "roi.npy"
    main(["--roi", "10", "10", "4", "4", "2", "2", str(out)])
    dist = np.load(out)
    assert dist.shape == (10, 10)
    np.testing.assert_array_equal(dist, squared_distance_transform(roi_to_mask(10, 10, 4, 4, 2, 2)))


def test_cli_needs_exactly_one_source(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "out.npy")])
    assert exc.value.code == 2


def test_cli_bad_roi(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--roi", "10", "10", "0", "4", "2", "2", str(tmp_path / "out.npy")])
    assert exc.value.code == 2
    assert "roi_x" in capsys.readouterr().err
