"""
Frame and Region data model
Frames are read-only RGB pixel grids; Regions are detector boxes scoped to one frame
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from .errors import InvalidFrame


@dataclass(frozen=True)
class Region:
    """Axis-aligned box reported by a detector, in pixel coordinates."""
    x: int
    y: int
    width: int
    height: int
    label: str = "text"
    confidence: float = 1.0

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    @property
    def bbox(self) -> Tuple[int, int, int, int]:
        """Corner form [x1, y1, x2, y2] with exclusive x2/y2."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float,
                  label: str = "text", confidence: float = 1.0) -> "Region":
        """Build a region from corner coordinates, rounding outward."""
        left, top = math.floor(x1), math.floor(y1)
        right, bottom = math.ceil(x2), math.ceil(y2)
        return cls(
            x=int(left),
            y=int(top),
            width=int(right - left),
            height=int(bottom - top),
            label=label,
            confidence=float(confidence),
        )

    def clamp(self, frame_width: int, frame_height: int) -> "Region":
        """Clip the region to [0, frame_width) x [0, frame_height).

        The result may have zero area when the box lies entirely outside the frame.
        """
        x1 = min(max(self.x, 0), frame_width)
        y1 = min(max(self.y, 0), frame_height)
        x2 = min(max(self.x + self.width, 0), frame_width)
        y2 = min(max(self.y + self.height, 0), frame_height)
        return Region(
            x=x1,
            y=y1,
            width=max(0, x2 - x1),
            height=max(0, y2 - y1),
            label=self.label,
            confidence=self.confidence,
        )


class Frame:
    """
    Immutable captured image

    Pixels are stored as a read-only (H, W, 3) uint8 RGB array. Every
    constructor copies its input, so callers cannot mutate a frame afterwards.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        if pixels is None:
            raise InvalidFrame("Frame pixels are missing")
        array = np.asarray(pixels)
        if array.ndim == 2:
            array = np.stack([array] * 3, axis=-1)
        elif array.ndim == 3 and array.shape[2] == 4:
            array = array[:, :, :3]
        if array.ndim != 3 or array.shape[2] != 3:
            raise InvalidFrame(f"Unsupported frame shape: {array.shape}")
        if array.shape[0] == 0 or array.shape[1] == 0:
            raise InvalidFrame(f"Frame has zero dimensions: {array.shape[1]}x{array.shape[0]}")

        array = np.array(array, dtype=np.uint8, copy=True)
        array.setflags(write=False)
        self._pixels = array

    @classmethod
    def from_array(cls, array: np.ndarray, bgr: bool = False) -> "Frame":
        """
        Wrap a numpy image

        Args:
            array: (H, W), (H, W, 3) or (H, W, 4) image
            bgr: True if channels are in OpenCV BGR order
        """
        if array is None:
            raise InvalidFrame("Frame pixels are missing")
        array = np.asarray(array)
        if bgr and array.ndim == 3 and array.shape[2] >= 3:
            array = array[:, :, 2::-1]
        return cls(array)

    @classmethod
    def from_image(cls, image: Image.Image) -> "Frame":
        if image is None:
            raise InvalidFrame("Image is missing")
        return cls(np.array(image.convert("RGB")))

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def crop(self, region: Region) -> "Frame":
        """Return the pixels under ``region`` as a new frame."""
        clamped = region.clamp(self.width, self.height)
        if clamped.area == 0:
            raise InvalidFrame(f"Region {region.bbox} has no pixels inside the frame")
        x1, y1, x2, y2 = clamped.bbox
        return Frame(self._pixels[y1:y2, x1:x2])

    def to_image(self) -> Image.Image:
        return Image.fromarray(self._pixels)

    def to_bgr(self) -> np.ndarray:
        return np.ascontiguousarray(self._pixels[:, :, ::-1])

    def __repr__(self):
        return f"Frame({self.width}x{self.height})"
