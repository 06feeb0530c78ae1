"""Unit tests for the preview renderer."""

import numpy as np

from imei_scanner.frame import Region
from imei_scanner.preview import annotate_frame, save_preview


def test_annotate_frame_keeps_size_and_source(frame):
    before = frame.pixels.copy()
    regions = [Region(10, 10, 80, 40, label="Text", confidence=0.87),
               Region(100, 60, 50, 30, label="Figure", confidence=0.5)]

    image = annotate_frame(frame, regions, imeis=["123456789012345"])

    assert image.mode == "RGB"
    assert image.size == frame.size
    assert np.array_equal(frame.pixels, before)
    # the box border is drawn over the white background
    assert np.asarray(image)[10, 50].tolist() != [255, 255, 255]


def test_save_preview(frame, tmp_path):
    out = save_preview(frame, [Region(0, 0, 20, 20)], tmp_path / "preview.png")
    assert out.exists()
