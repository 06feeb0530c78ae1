"""Unit tests for Frame and Region."""

import numpy as np
import pytest
from PIL import Image

from imei_scanner.errors import InvalidFrame
from imei_scanner.frame import Frame, Region


def test_frame_is_read_only_copy():
    pixels = np.zeros((4, 6, 3), dtype=np.uint8)
    frame = Frame(pixels)
    pixels[0, 0, 0] = 255
    assert frame.pixels[0, 0, 0] == 0
    with pytest.raises(ValueError):
        frame.pixels[0, 0, 0] = 1
    assert frame.size == (6, 4)


@pytest.mark.parametrize(
    "pixels",
    [
        None,
        np.zeros((0, 10, 3), dtype=np.uint8),
        np.zeros((10, 0, 3), dtype=np.uint8),
        np.zeros((10, 10, 2), dtype=np.uint8),
    ],
)
def test_invalid_frames_rejected(pixels):
    with pytest.raises(InvalidFrame):
        Frame(pixels)


def test_grayscale_and_rgba_converted_to_rgb():
    assert Frame(np.zeros((3, 5), dtype=np.uint8)).pixels.shape == (3, 5, 3)
    assert Frame(np.zeros((3, 5, 4), dtype=np.uint8)).pixels.shape == (3, 5, 3)


def test_from_array_bgr_swaps_channels():
    bgr = np.zeros((2, 2, 3), dtype=np.uint8)
    bgr[..., 0] = 10  # blue
    bgr[..., 2] = 200  # red
    frame = Frame.from_array(bgr, bgr=True)
    assert tuple(frame.pixels[0, 0]) == (200, 0, 10)
    assert tuple(frame.to_bgr()[0, 0]) == (10, 0, 200)


def test_from_image_round_trip():
    image = Image.new("RGB", (7, 3), (1, 2, 3))
    frame = Frame.from_image(image)
    assert frame.size == (7, 3)
    assert frame.to_image().getpixel((0, 0)) == (1, 2, 3)


def test_crop_returns_region_pixels():
    pixels = np.zeros((10, 10, 3), dtype=np.uint8)
    pixels[2:4, 3:8] = 9
    crop = Frame(pixels).crop(Region(3, 2, 5, 2))
    assert crop.size == (5, 2)
    assert (crop.pixels == 9).all()


def test_crop_outside_frame_raises():
    frame = Frame(np.zeros((10, 10, 3), dtype=np.uint8))
    with pytest.raises(InvalidFrame):
        frame.crop(Region(20, 20, 5, 5))


def test_region_clamp_clips_to_bounds():
    region = Region(-5, -3, 20, 10, label="Text", confidence=0.5)
    clamped = region.clamp(12, 4)
    assert clamped.bbox == (0, 0, 12, 4)
    assert clamped.label == "Text"
    assert clamped.confidence == 0.5


def test_region_clamp_can_collapse_to_zero_area():
    assert Region(50, 50, 10, 10).clamp(20, 20).area == 0


def test_region_from_xyxy_rounds_outward():
    region = Region.from_xyxy(1.6, 2.2, 10.1, 5.9, label="Title", confidence=0.7)
    assert region.bbox == (1, 2, 11, 6)
    assert region.label == "Title"
