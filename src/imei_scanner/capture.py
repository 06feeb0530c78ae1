"""
Frame sources
Live camera capture and decoding of uploaded image/video files into Frames
"""

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

import cv2
from PIL import Image, ImageOps

from .errors import CaptureError
from .frame import Frame

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp"}
VIDEO_SUFFIXES = {".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v"}


class CameraSource:
    """
    Live camera feed

    Lifecycle:
      open() -> opens the device and requests the target resolution
      read() -> grabs one Frame
      close() -> releases the device

    The driver may not honour the requested resolution; ``actual_size``
    reports what it delivers.
    """

    def __init__(self, device: Union[int, str] = 0, width: int = 1920, height: int = 1080):
        self.device = device
        self.width = width
        self.height = height
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    @property
    def actual_size(self):
        if self._cap is None:
            return None
        return (
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    def open(self) -> "CameraSource":
        if self._cap is not None:
            return self
        cap = cv2.VideoCapture(self.device)
        if not cap.isOpened():
            cap.release()
            raise CaptureError(f"Cannot open camera {self.device!r}", source=str(self.device))

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap
        logger.info("Camera %r opened at %s (requested %dx%d)",
                    self.device, self.actual_size, self.width, self.height)
        return self

    def read(self) -> Frame:
        if self._cap is None:
            raise CaptureError("Camera is not started", source=str(self.device))
        ok, image = self._cap.read()
        if not ok or image is None:
            raise CaptureError(f"Camera {self.device!r} returned no frame", source=str(self.device))
        return Frame.from_array(image, bgr=True)

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera %r released", self.device)

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        return f"CameraSource(device={self.device!r}, target={self.width}x{self.height})"


def load_image(path: Union[str, Path]) -> Frame:
    """Decode an image file, honouring EXIF orientation (phone photos)."""
    path = Path(path)
    try:
        with Image.open(path) as image:
            image = ImageOps.exif_transpose(image)
            return Frame.from_image(image)
    except OSError as exc:
        raise CaptureError(f"Cannot read image {path}: {exc}", source=str(path)) from exc


def iter_video_frames(path: Union[str, Path], stride: int = 15) -> Iterator[Frame]:
    """
    Yield every ``stride``-th frame of a video file

    Raises:
        CaptureError: if the file cannot be opened
    """
    if stride < 1:
        raise ValueError(f"stride must be >= 1, got {stride}")
    path = Path(path)
    cap = cv2.VideoCapture(str(path))
    if not cap.isOpened():
        cap.release()
        raise CaptureError(f"Cannot open video {path}", source=str(path))

    index = 0
    yielded = 0
    try:
        while True:
            ok, image = cap.read()
            if not ok:
                break
            if index % stride == 0:
                yielded += 1
                yield Frame.from_array(image, bgr=True)
            index += 1
    finally:
        cap.release()
    logger.debug("Read %d frames from %s, yielded %d", index, path, yielded)


def iter_file_frames(path: Union[str, Path], stride: int = 15) -> Iterator[Frame]:
    """Frames from an uploaded file: one for an image, sampled frames for a video."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in VIDEO_SUFFIXES:
        yield from iter_video_frames(path, stride=stride)
    elif suffix in IMAGE_SUFFIXES:
        yield load_image(path)
    else:
        raise CaptureError(f"Unsupported file type: {path.suffix or path.name}", source=str(path))
