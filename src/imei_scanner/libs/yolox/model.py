"""Model factory for YOLOX layout detection."""

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from imei_scanner.libs.onnx_ocr.onnx_base import ONNXInferenceBase

from .processing import cxcywh_to_xyxy, decode_outputs, multiclass_nms, preprocess

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "yolox"
DEFAULT_MODEL_ENV_VAR = "IMEI_SCANNER_DETECTOR_MODEL"

LAYOUT_LABEL_MAP: Dict[int, str] = {
    0: "Caption",
    1: "Footnote",
    2: "Formula",
    3: "List-item",
    4: "Page-footer",
    5: "Page-header",
    6: "Picture",
    7: "Section-header",
    8: "Table",
    9: "Text",
    10: "Title",
}


@dataclass(frozen=True)
class YoloxVariant:
    """Where to find a variant's weights and how to read its output."""
    registry_group: str
    registry_key: str
    input_shape: Tuple[int, int] = (1024, 768)  # (H, W)
    label_map: Dict[int, str] = field(default_factory=lambda: dict(LAYOUT_LABEL_MAP))


MODEL_TYPES: Dict[str, YoloxVariant] = {
    "yolox": YoloxVariant(registry_group="yolox", registry_key="yolox"),
}


@dataclass(frozen=True)
class Detection:
    """One post-NMS box in source-image pixels."""
    x1: float
    y1: float
    x2: float
    y2: float
    score: float
    label: str


class YoloxModel:
    """ONNX YOLOX detector returning labelled boxes."""

    def __init__(
        self,
        model_path: Union[str, Path],
        input_shape: Tuple[int, int] = (1024, 768),
        label_map: Optional[Dict[int, str]] = None,
        use_gpu: bool = False,
        use_tensorrt: bool = False,
    ):
        self.session = ONNXInferenceBase(model_path, use_gpu=use_gpu, use_tensorrt=use_tensorrt)
        self.input_shape = tuple(input_shape)
        self.label_map = dict(label_map or LAYOUT_LABEL_MAP)

    def predict(
        self,
        image_bgr: np.ndarray,
        nms_threshold: float = 0.1,
        score_threshold: float = 0.25,
    ) -> List[Detection]:
        tensor, ratio = preprocess(image_bgr, self.input_shape)
        outputs = self.session.run(self.session.get_input_feed(tensor[None, :, :, :]))
        predictions = decode_outputs(outputs[0], self.input_shape)[0]
        return self.postprocess(predictions, ratio, nms_threshold, score_threshold)

    def postprocess(
        self,
        predictions: np.ndarray,
        ratio: float,
        nms_threshold: float,
        score_threshold: float,
    ) -> List[Detection]:
        """Decoded predictions [anchors, 5 + classes] -> detections in image pixels."""
        boxes = cxcywh_to_xyxy(predictions[:, :4]) / ratio
        scores = predictions[:, 4:5] * predictions[:, 5:]
        dets = multiclass_nms(boxes, scores, nms_thr=nms_threshold, score_thr=score_threshold)
        if dets is None:
            return []
        return [
            Detection(
                x1=float(x1), y1=float(y1), x2=float(x2), y2=float(y2),
                score=float(score),
                label=self.label_map.get(int(class_id), f"class_{int(class_id)}"),
            )
            for x1, y1, x2, y2, score, class_id in dets
        ]

    def __repr__(self):
        return f"YoloxModel(session={self.session}, input_shape={self.input_shape})"


_models: Dict[str, YoloxModel] = {}
_models_lock = threading.Lock()


def get_model(model_name: Optional[str] = None, use_gpu: bool = False) -> YoloxModel:
    """Gets the model object by model name, downloading weights on first use.

    Args:
        model_name: YOLOX variant; if None, uses IMEI_SCANNER_DETECTOR_MODEL or the default

    Raises:
        ValueError: If model_name is not recognized
    """
    if model_name is None:
        model_name = os.environ.get(DEFAULT_MODEL_ENV_VAR) or DEFAULT_MODEL

    if model_name not in MODEL_TYPES:
        raise ValueError(f"Unknown model type: {model_name}. Available models: {list(MODEL_TYPES)}")

    key = f"{model_name}_{use_gpu}"
    with _models_lock:
        if key in _models:
            return _models[key]

        from imei_scanner.models import registry

        variant = MODEL_TYPES[model_name]
        path = registry.get(variant.registry_group, variant.registry_key)
        logger.info("Loading YOLOX model %s from %s", model_name, path)
        model = YoloxModel(
            path,
            input_shape=variant.input_shape,
            label_map=variant.label_map,
            use_gpu=use_gpu,
        )
        _models[key] = model
        return model
