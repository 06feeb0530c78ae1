"""
Candidate Region Detection Module
Finds text-bearing regions in a frame with a YOLOX layout model
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Union

from imei_scanner.config import DetectorConfig
from imei_scanner.errors import InvalidFrame, ModelUnavailable
from imei_scanner.frame import Frame, Region
from imei_scanner.libs.yolox import MODEL_TYPES, YoloxModel, get_model

logger = logging.getLogger(__name__)


class RegionDetector(ABC):
    """
    Base class for detectors

    Subclasses implement ``_predict``. ``detect`` takes care of input validation,
    the confidence floor and clamping, so every implementation hands the pipeline
    regions that lie inside the frame.
    """

    def __init__(self, config: Optional[DetectorConfig] = None):
        self.config = config or DetectorConfig()
        self._text_labels = frozenset(label.lower() for label in self.config.text_labels)

    @property
    def ready(self) -> bool:
        return True

    def detect(self, frame: Frame) -> List[Region]:
        """
        Detect candidate regions

        Args:
            frame: Captured frame

        Returns:
            Regions clamped to frame bounds, in model order. Clamping may leave
            zero-area regions; the caller skips those.

        Raises:
            InvalidFrame: if ``frame`` is not a usable Frame
            ModelUnavailable: if the model cannot be loaded or run
        """
        if not isinstance(frame, Frame):
            raise InvalidFrame(f"Expected Frame, got {type(frame).__name__}")

        regions = []
        for region in self._predict(frame):
            if region.confidence < self.config.min_confidence:
                continue
            regions.append(region.clamp(frame.width, frame.height))

        logger.debug("%s found %d regions in %s", type(self).__name__, len(regions), frame)
        return regions

    def is_text_region(self, region: Region) -> bool:
        """The single place where detector labels are interpreted."""
        return (region.label or "").lower() in self._text_labels

    @abstractmethod
    def _predict(self, frame: Frame) -> Iterable[Region]:
        ...


class FullFrameDetector(RegionDetector):
    """Treats the whole frame as one text region; no model required."""

    def _predict(self, frame: Frame) -> Iterable[Region]:
        return [Region(0, 0, frame.width, frame.height, label="text", confidence=1.0)]

    def __repr__(self):
        return "FullFrameDetector()"


class YoloxRegionDetector(RegionDetector):
    """
    Layout detection using a YOLOX ONNX model

    The model is loaded lazily. If loading fails, every call raises
    ModelUnavailable and the next call tries again, so a scanner started
    before its weights are available recovers without a restart.
    """

    def __init__(
        self,
        model_path: Optional[Union[str, Path]] = None,
        config: Optional[DetectorConfig] = None,
        model: Optional[YoloxModel] = None,
    ):
        """
        Args:
            model_path: Local ONNX file; None resolves weights via the model registry
            config: Detector configuration
            model: Pre-built model, mainly for sharing between pipelines
        """
        super().__init__(config)
        self.model_path = Path(model_path) if model_path is not None else None
        self._model = model
        self._load_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._model is not None

    def load(self) -> YoloxModel:
        with self._load_lock:
            if self._model is not None:
                return self._model
            try:
                if self.model_path is not None:
                    variant = MODEL_TYPES["yolox"]
                    self._model = YoloxModel(
                        self.model_path,
                        input_shape=variant.input_shape,
                        label_map=variant.label_map,
                        use_gpu=self.config.use_gpu,
                    )
                else:
                    self._model = get_model(self.config.model_name, use_gpu=self.config.use_gpu)
            except Exception as exc:
                source = self.model_path or self.config.model_name or "default"
                raise ModelUnavailable(f"Detection model {source} could not be loaded: {exc}") from exc
            logger.info("Detector ready: %s", self._model)
            return self._model

    def _predict(self, frame: Frame) -> Iterable[Region]:
        model = self.load()
        try:
            detections = model.predict(
                frame.to_bgr(),
                nms_threshold=self.config.nms_threshold,
                score_threshold=self.config.score_threshold,
            )
        except Exception as exc:
            raise ModelUnavailable(f"Detection inference failed: {exc}") from exc

        return [
            Region.from_xyxy(d.x1, d.y1, d.x2, d.y2, label=d.label, confidence=d.score)
            for d in detections
        ]

    def __repr__(self):
        return f"YoloxRegionDetector(model={self.model_path or self.config.model_name or 'default'})"
