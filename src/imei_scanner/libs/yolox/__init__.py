"""
YOLOX layout detection on ONNX Runtime.
"""

from .model import LAYOUT_LABEL_MAP, MODEL_TYPES, Detection, YoloxModel, get_model

__all__ = ["LAYOUT_LABEL_MAP", "MODEL_TYPES", "Detection", "YoloxModel", "get_model"]
