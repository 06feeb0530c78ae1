"""Image helpers for line recognition."""

from typing import List

import cv2
import numpy as np


def split_text_lines(
    img: np.ndarray,
    min_line_height: int = 8,
    ink_ratio: float = 0.01,
) -> List[np.ndarray]:
    """Split a multi-line text crop into horizontal line strips.

    Uses a row projection profile of an Otsu-binarized image. The minority
    class after thresholding is treated as ink, so dark-on-light labels and
    light-on-dark screens both work.

    Args:
        img: Text crop (BGR)
        min_line_height: Bands thinner than this are dropped as noise
        ink_ratio: Fraction of a row's pixels that must be ink to count as text

    Returns:
        Line images top to bottom; ``[img]`` when no split is found
    """
    h, w = img.shape[:2]
    if h < 2 * min_line_height:
        return [img]

    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    if np.count_nonzero(binary) > binary.size / 2:
        binary = 255 - binary

    profile = np.count_nonzero(binary, axis=1)
    rows = profile >= max(1, int(w * ink_ratio))

    bands = []
    start = None
    for y, has_ink in enumerate(rows):
        if has_ink and start is None:
            start = y
        elif not has_ink and start is not None:
            bands.append((start, y))
            start = None
    if start is not None:
        bands.append((start, h))

    bands = [(top, bottom) for top, bottom in bands if bottom - top >= min_line_height]
    if len(bands) <= 1:
        return [img]

    pad = max(2, min_line_height // 2)
    return [img[max(0, top - pad):min(h, bottom + pad)] for top, bottom in bands]
