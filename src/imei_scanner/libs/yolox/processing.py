"""YOLOX pre/post-processing: letterbox resize, grid decoding and NMS."""

from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

PAD_VALUE = 114
STRIDES = (8, 16, 32)


def preprocess(img: np.ndarray, input_size: Tuple[int, int]) -> Tuple[np.ndarray, float]:
    """Letterbox ``img`` into ``input_size`` (H, W), top-left aligned.

    Args:
        img: (H, W, 3) uint8 image in BGR
        input_size: Model input (height, width)

    Returns:
        (C, H, W) float32 tensor and the resize ratio applied to the image
    """
    padded = np.full((input_size[0], input_size[1], 3), PAD_VALUE, dtype=np.uint8)
    ratio = min(input_size[0] / img.shape[0], input_size[1] / img.shape[1])
    new_w = max(1, int(img.shape[1] * ratio))
    new_h = max(1, int(img.shape[0] * ratio))
    resized = cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_LINEAR).astype(np.uint8)
    padded[:new_h, :new_w] = resized
    return np.ascontiguousarray(padded.transpose(2, 0, 1), dtype=np.float32), ratio


def decode_outputs(
    outputs: np.ndarray,
    input_size: Tuple[int, int],
    strides: Sequence[int] = STRIDES,
) -> np.ndarray:
    """Turn raw grid offsets into (cx, cy, w, h) in input pixels.

    Args:
        outputs: [batch, anchors, 5 + num_classes] raw head output
        input_size: Model input (height, width)

    Returns:
        Decoded copy of ``outputs``
    """
    grids = []
    expanded_strides = []
    for stride in strides:
        hsize, wsize = input_size[0] // stride, input_size[1] // stride
        xv, yv = np.meshgrid(np.arange(wsize), np.arange(hsize))
        grid = np.stack((xv, yv), 2).reshape(1, -1, 2)
        grids.append(grid)
        expanded_strides.append(np.full((1, grid.shape[1], 1), stride))

    grids = np.concatenate(grids, 1)
    expanded_strides = np.concatenate(expanded_strides, 1)

    decoded = np.array(outputs, dtype=np.float32, copy=True)
    decoded[..., :2] = (decoded[..., :2] + grids) * expanded_strides
    decoded[..., 2:4] = np.exp(decoded[..., 2:4]) * expanded_strides
    return decoded


def cxcywh_to_xyxy(boxes: np.ndarray) -> np.ndarray:
    xyxy = np.empty_like(boxes)
    xyxy[:, 0] = boxes[:, 0] - boxes[:, 2] / 2.0
    xyxy[:, 1] = boxes[:, 1] - boxes[:, 3] / 2.0
    xyxy[:, 2] = boxes[:, 0] + boxes[:, 2] / 2.0
    xyxy[:, 3] = boxes[:, 1] + boxes[:, 3] / 2.0
    return xyxy


def nms(boxes: np.ndarray, scores: np.ndarray, nms_thr: float) -> List[int]:
    """Single-class greedy NMS; returns kept indices, best score first."""
    x1, y1, x2, y2 = boxes[:, 0], boxes[:, 1], boxes[:, 2], boxes[:, 3]
    areas = (x2 - x1 + 1) * (y2 - y1 + 1)
    order = scores.argsort()[::-1]

    keep = []
    while order.size > 0:
        i = order[0]
        keep.append(int(i))
        xx1 = np.maximum(x1[i], x1[order[1:]])
        yy1 = np.maximum(y1[i], y1[order[1:]])
        xx2 = np.minimum(x2[i], x2[order[1:]])
        yy2 = np.minimum(y2[i], y2[order[1:]])

        w = np.maximum(0.0, xx2 - xx1 + 1)
        h = np.maximum(0.0, yy2 - yy1 + 1)
        inter = w * h
        ovr = inter / (areas[i] + areas[order[1:]] - inter)

        order = order[np.where(ovr <= nms_thr)[0] + 1]
    return keep


def multiclass_nms(
    boxes: np.ndarray,
    scores: np.ndarray,
    nms_thr: float,
    score_thr: float,
) -> Optional[np.ndarray]:
    """Class-aware NMS.

    Args:
        boxes: (N, 4) xyxy
        scores: (N, num_classes) per-class scores

    Returns:
        (M, 6) rows of [x1, y1, x2, y2, score, class_id], or None if nothing survives
    """
    final_dets = []
    for cls_ind in range(scores.shape[1]):
        cls_scores = scores[:, cls_ind]
        valid = cls_scores > score_thr
        if not valid.any():
            continue
        valid_scores = cls_scores[valid]
        valid_boxes = boxes[valid]
        keep = nms(valid_boxes, valid_scores, nms_thr)
        if keep:
            cls_col = np.full((len(keep), 1), cls_ind, dtype=np.float32)
            final_dets.append(np.concatenate(
                [valid_boxes[keep], valid_scores[keep, None], cls_col], 1
            ))
    if not final_dets:
        return None
    return np.concatenate(final_dets, 0)
