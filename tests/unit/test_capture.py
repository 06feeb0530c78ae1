"""Unit tests for frame sources."""

import numpy as np
import pytest
from PIL import Image

import imei_scanner.capture as capture
from imei_scanner.capture import CameraSource, iter_file_frames, iter_video_frames, load_image
from imei_scanner.errors import CaptureError


class FakeCapture:
    """Stands in for cv2.VideoCapture over a list of BGR images."""

    def __init__(self, images, opened=True):
        self.images = list(images)
        self.opened = opened
        self.released = False
        self.props = {}

    def isOpened(self):
        return self.opened

    def read(self):
        if not self.images:
            return False, None
        return True, self.images.pop(0)

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        return self.props.get(prop, 0)

    def release(self):
        self.released = True


def _bgr(value):
    image = np.zeros((4, 6, 3), dtype=np.uint8)
    image[:, :, 0] = value  # blue channel
    return image


def _patch_capture(monkeypatch, fake):
    monkeypatch.setattr(capture.cv2, "VideoCapture", lambda source: fake)


def test_load_image_png(tmp_path):
    path = tmp_path / "label.png"
    Image.new("RGB", (30, 20), (255, 0, 0)).save(path)
    frame = load_image(path)
    assert frame.size == (30, 20)
    assert tuple(frame.pixels[0, 0]) == (255, 0, 0)


def test_load_image_missing(tmp_path):
    with pytest.raises(CaptureError) as info:
        load_image(tmp_path / "missing.png")
    assert info.value.source.endswith("missing.png")


def test_iter_video_frames_stride(monkeypatch):
    fake = FakeCapture([_bgr(i) for i in range(7)])
    _patch_capture(monkeypatch, fake)

    frames = list(iter_video_frames("clip.mp4", stride=3))

    # frames 0, 3 and 6, converted to RGB
    assert [int(f.pixels[0, 0, 2]) for f in frames] == [0, 3, 6]
    assert fake.released


def test_iter_video_frames_unopened(monkeypatch):
    fake = FakeCapture([], opened=False)
    _patch_capture(monkeypatch, fake)
    with pytest.raises(CaptureError):
        list(iter_video_frames("broken.mp4"))
    assert fake.released


def test_iter_video_frames_rejects_bad_stride():
    with pytest.raises(ValueError):
        list(iter_video_frames("clip.mp4", stride=0))


def test_iter_file_frames_dispatch(monkeypatch, tmp_path):
    image_path = tmp_path / "label.PNG"
    Image.new("RGB", (8, 8), "white").save(image_path, format="PNG")
    assert len(list(iter_file_frames(image_path))) == 1

    _patch_capture(monkeypatch, FakeCapture([_bgr(1), _bgr(2)]))
    assert len(list(iter_file_frames(tmp_path / "clip.mov", stride=1))) == 2

    with pytest.raises(CaptureError):
        list(iter_file_frames(tmp_path / "notes.txt"))


def test_camera_read_before_open():
    with pytest.raises(CaptureError):
        CameraSource().read()


def test_camera_lifecycle(monkeypatch):
    fake = FakeCapture([_bgr(9)])
    _patch_capture(monkeypatch, fake)

    with CameraSource(0, width=1280, height=720) as camera:
        assert camera.is_open
        assert camera.actual_size == (1280, 720)
        frame = camera.read()
        assert int(frame.pixels[0, 0, 2]) == 9
        with pytest.raises(CaptureError):
            camera.read()

    assert not camera.is_open
    assert fake.released


def test_camera_open_failure(monkeypatch):
    _patch_capture(monkeypatch, FakeCapture([], opened=False))
    with pytest.raises(CaptureError):
        CameraSource(3).open()
