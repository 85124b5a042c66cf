import numpy as np

from utils.color_sampling import mean_visible_color


def test_weighted_by_alpha():
    pixels = np.zeros((1, 2, 4), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0, 255)
    pixels[0, 1] = (0, 0, 255, 0)
    assert mean_visible_color(pixels) == (255, 0, 0)


def test_weighted_by_mask():
    pixels = np.full((1, 2, 4), 255, dtype=np.uint8)
    pixels[0, 1, :3] = (0, 0, 0)
    mask = np.array([[0, 255]], dtype=np.uint8)
    assert mean_visible_color(pixels, mask) == (0, 0, 0)


def test_nothing_visible():
    pixels = np.zeros((2, 2, 4), dtype=np.uint8)
    assert mean_visible_color(pixels) is None
    assert mean_visible_color(np.zeros((2, 2, 3), dtype=np.uint8)) is None
