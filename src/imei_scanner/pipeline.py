"""
Main Pipeline for IMEI scanning
Orchestrates region detection, text extraction, pattern matching and accumulation
"""

import itertools
import logging
import threading
import time
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from .capture import iter_file_frames, load_image
from .config import DetectorConfig, PipelineConfig
from .errors import (
    CaptureError,
    ExtractionFailed,
    InvalidFrame,
    ModelUnavailable,
    ScanError,
    SessionClosed,
)
from .frame import Frame, Region
from .libs.onnx_ocr import RecognizerConfig
from .modules.detection import FullFrameDetector, RegionDetector, YoloxRegionDetector
from .modules.extraction import OnnxTextExtractor, TextExtractor
from .modules.matching import IMEIMatcher, is_imei
from .modules.results import IMEIAccumulator

logger = logging.getLogger(__name__)

# Global model management for thread safety
_model_lock = threading.Lock()
_models = {}

# Seconds between checks for session close while waiting on an extraction
_POLL_INTERVAL = 0.05


class PipelineState(Enum):
    IDLE = "idle"
    DETECTING = "detecting"
    EXTRACTING = "extracting"
    MATCHING = "matching"
    ACCUMULATING = "accumulating"


@dataclass
class FrameResult:
    """Outcome of one pipeline run."""
    frame_id: int
    new_imeis: List[str] = field(default_factory=list)
    candidates: List[str] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    regions_detected: int = 0
    regions_failed: int = 0
    error: Optional[ScanError] = None
    states: List[PipelineState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None


class _Abandoned(Exception):
    """Raised internally when the session closes mid-extraction."""


class IMEIScanPipeline:
    """
    Capture-to-IMEI pipeline

    Workflow per frame:
    1. Detection - find candidate regions, keep the text-bearing ones
    2. Extraction - OCR every text region concurrently, failures isolated per region
    3. Matching - pull 15-digit runs out of the recognized text
    4. Accumulation - merge the frame's candidates into the session set in one batch

    Frames can be processed synchronously with ``process_frame`` or handed off
    with ``submit_frame`` so the capture side never waits on inference.
    """

    def __init__(
        self,
        detector: RegionDetector,
        extractor: TextExtractor,
        accumulator: Optional[IMEIAccumulator] = None,
        matcher: Optional[IMEIMatcher] = None,
        config: Optional[PipelineConfig] = None,
        text_filter: Optional[Callable[[Region], bool]] = None,
    ):
        """
        Initialize pipeline

        Args:
            detector: Candidate region detector
            extractor: OCR engine for region crops
            accumulator: Session result set; a fresh one is created if None
            matcher: IMEI pattern matcher (default: exact 15-digit runs)
            config: Worker counts, timeouts and video sampling
            text_filter: Overrides ``detector.is_text_region``
        """
        self.detector = detector
        self.extractor = extractor
        self.accumulator = accumulator if accumulator is not None else IMEIAccumulator()
        self.matcher = matcher or IMEIMatcher()
        self.config = config or PipelineConfig()
        self.text_filter = text_filter or detector.is_text_region

        self._region_executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="imei-extract",
        )
        self._frame_executor = ThreadPoolExecutor(
            max_workers=self.config.max_frame_workers,
            thread_name_prefix="imei-frame",
        )
        self._closed = threading.Event()
        self._frame_seq = itertools.count(1)
        self._frame_seq_lock = threading.Lock()

    @classmethod
    def create(
        cls,
        detector_model: Optional[Union[str, Path]] = None,
        recognizer_model: Optional[Union[str, Path]] = None,
        char_dict: Optional[Union[str, Path]] = None,
        full_frame: bool = False,
        use_gpu: bool = False,
        config: Optional[PipelineConfig] = None,
        accumulator: Optional[IMEIAccumulator] = None,
    ) -> "IMEIScanPipeline":
        """
        Build the default YOLOX + ONNX OCR pipeline

        Detector and recognizer instances are cached per configuration and
        shared by every pipeline created with the same arguments.

        Args:
            detector_model: Local YOLOX ONNX file (None = registry download)
            recognizer_model: Local recognizer ONNX file (None = registry download)
            char_dict: Character dictionary for ``recognizer_model``
            full_frame: Skip detection and OCR the whole frame
            use_gpu: Enable CUDA for both models
        """
        config_key = f"{detector_model}_{recognizer_model}_{char_dict}_{full_frame}_{use_gpu}"

        with _model_lock:
            if config_key in _models:
                logger.info("Reusing existing model instances")
                detector, extractor = _models[config_key]
            else:
                logger.info("Initializing IMEI scan pipeline")
                if full_frame:
                    detector = FullFrameDetector()
                else:
                    detector = YoloxRegionDetector(
                        model_path=detector_model,
                        config=DetectorConfig(use_gpu=use_gpu),
                    )
                extractor = OnnxTextExtractor(
                    model_path=recognizer_model,
                    char_dict_path=char_dict,
                    config=RecognizerConfig(use_gpu=use_gpu),
                )
                _models[config_key] = (detector, extractor)

        return cls(detector, extractor, accumulator=accumulator, config=config)

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------

    def process_frame(self, frame: Frame) -> FrameResult:
        """
        Run one frame through the pipeline

        Never raises for detector/extractor failures: frame-level problems are
        reported in ``FrameResult.error``, region-level ones only lower the
        yield and bump ``regions_failed``.

        Args:
            frame: Captured frame

        Returns:
            FrameResult with the IMEIs this frame added to the session
        """
        result = FrameResult(frame_id=self._next_frame_id(), states=[PipelineState.IDLE])

        if self._closed.is_set():
            result.error = SessionClosed("Pipeline is closed")
            return result
        if not isinstance(frame, Frame):
            result.error = InvalidFrame(f"Expected Frame, got {type(frame).__name__}")
            return result

        # Step 1: Detect regions
        result.states.append(PipelineState.DETECTING)
        try:
            detected = self.detector.detect(frame)
            result.regions_detected = len(detected)
            result.regions = [r for r in detected if r.area > 0 and self.text_filter(r)]
        except (InvalidFrame, ModelUnavailable) as exc:
            result.error = exc
        except Exception as exc:
            logger.exception("Region detection raised unexpectedly on frame %d", result.frame_id)
            result.error = ModelUnavailable(f"Detection failed: {exc}")

        if result.error is not None:
            logger.warning("Frame %d: detection failed: %s", result.frame_id, result.error)
            result.regions = []
            result.states.append(PipelineState.IDLE)
            return result

        # Step 2: Extract text from every text region
        result.states.append(PipelineState.EXTRACTING)
        try:
            texts = self._extract_all(frame, result)
        except _Abandoned:
            return self._abandon(result)

        # Step 3: Match IMEI candidates, in region order
        result.states.append(PipelineState.MATCHING)
        for text in texts:
            if text:
                result.candidates.extend(self._match(text, result.frame_id))

        # Step 4: Merge into the session set
        result.states.append(PipelineState.ACCUMULATING)
        if self._closed.is_set():
            return self._abandon(result)
        result.new_imeis = self.accumulator.add_all(result.candidates)
        result.states.append(PipelineState.IDLE)

        logger.info(
            "Frame %d: %d regions (%d text, %d failed), %d candidates, %d new",
            result.frame_id,
            result.regions_detected,
            len(result.regions),
            result.regions_failed,
            len(result.candidates),
            len(result.new_imeis),
        )
        return result

    def _match(self, text: str, frame_id: int) -> List[str]:
        """Matcher output restricted to well-formed IMEIs."""
        try:
            found = self.matcher.find_candidates(text)
        except Exception:
            logger.exception("Frame %d: matcher raised, text skipped", frame_id)
            return []

        candidates = []
        for candidate in found:
            if is_imei(candidate):
                candidates.append(candidate)
            else:
                logger.warning("Frame %d: dropping malformed candidate %r", frame_id, candidate)
        return candidates

    def _extract_all(self, frame: Frame, result: FrameResult) -> List[Optional[str]]:
        """OCR all text regions concurrently; failed regions yield None.

        Every region's timeout runs from submission, so the whole extraction
        step ends within ``extraction_timeout`` of its start.
        """
        timeout = self.config.extraction_timeout
        pending: List[Tuple[Region, Future, Optional[float]]] = []
        for region in result.regions:
            crop = frame.crop(region)
            try:
                future = self._region_executor.submit(self.extractor.extract_text, crop)
            except RuntimeError:
                # executor already shut down by close()
                raise _Abandoned()
            deadline = None if timeout is None else time.monotonic() + timeout
            pending.append((region, future, deadline))

        texts: List[Optional[str]] = []
        for region, future, deadline in pending:
            try:
                texts.append(self._await(future, deadline))
                continue
            except _Abandoned:
                raise
            except CancelledError:
                if self._closed.is_set():
                    raise _Abandoned()
                failure = ExtractionFailed("Extraction was cancelled", region=region)
            except FuturesTimeoutError:
                future.cancel()
                failure = ExtractionFailed(
                    f"Extraction timed out after {self.config.extraction_timeout}s",
                    region=region,
                )
            except Exception as exc:
                failure = ExtractionFailed(f"Extraction failed: {exc}", region=region)

            result.regions_failed += 1
            texts.append(None)
            logger.warning("Frame %d: skipping region %s: %s", result.frame_id, region.bbox, failure)
        return texts

    def _await(self, future: Future, deadline: Optional[float]):
        """Wait for one extraction until ``deadline``, giving up early if the session closes."""
        while True:
            if self._closed.is_set():
                raise _Abandoned()
            step = _POLL_INTERVAL
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise FuturesTimeoutError()
                step = min(step, remaining)
            try:
                return future.result(timeout=step)
            except FuturesTimeoutError:
                # the extractor itself may have raised a TimeoutError
                if future.done():
                    raise

    def _abandon(self, result: FrameResult) -> FrameResult:
        logger.info("Frame %d abandoned: session closed mid-run", result.frame_id)
        result.error = SessionClosed("Pipeline closed while the frame was in flight")
        result.states.append(PipelineState.IDLE)
        return result

    def submit_frame(self, frame: Frame) -> "Future[FrameResult]":
        """Process ``frame`` on the frame pool; returns immediately."""
        try:
            return self._frame_executor.submit(self.process_frame, frame)
        except RuntimeError:
            future: Future = Future()
            future.set_result(self.process_frame(frame))
            return future

    def process_image(self, image: Union[Frame, Image.Image, np.ndarray, str, Path]) -> FrameResult:
        """
        Process a single still image

        Args:
            image: Frame, PIL Image, RGB numpy array, or path to an image file
        """
        try:
            frame = self._to_frame(image)
        except (InvalidFrame, CaptureError) as exc:
            result = FrameResult(frame_id=self._next_frame_id(), states=[PipelineState.IDLE])
            result.error = exc if isinstance(exc, InvalidFrame) else InvalidFrame(str(exc))
            return result
        return self.process_frame(frame)

    def process_file(self, path: Union[str, Path]) -> List[FrameResult]:
        """
        Process an uploaded image or video file

        Videos are sampled every ``config.video_stride`` frames.

        Raises:
            CaptureError: if the file cannot be opened or decoded
        """
        results = []
        for frame in iter_file_frames(path, stride=self.config.video_stride):
            if self._closed.is_set():
                break
            results.append(self.process_frame(frame))
        return results

    @staticmethod
    def _to_frame(image) -> Frame:
        if isinstance(image, Frame):
            return image
        if isinstance(image, Image.Image):
            return Frame.from_image(image)
        if isinstance(image, np.ndarray):
            return Frame.from_array(image)
        if isinstance(image, (str, Path)):
            return load_image(image)
        raise InvalidFrame(f"Unsupported image type: {type(image).__name__}")

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def imeis(self) -> Tuple[str, ...]:
        """All IMEIs found this session, in first-seen order."""
        return self.accumulator.view()

    def reset(self) -> None:
        self.accumulator.reset()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """End the session; in-flight runs are abandoned, found IMEIs are kept."""
        if self._closed.is_set():
            return
        self._closed.set()
        self._frame_executor.shutdown(wait=False, cancel_futures=True)
        self._region_executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Pipeline closed with %d IMEIs", len(self.accumulator))

    def _next_frame_id(self) -> int:
        with self._frame_seq_lock:
            return next(self._frame_seq)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        return (
            f"IMEIScanPipeline(\n"
            f"  detector={self.detector},\n"
            f"  extractor={self.extractor},\n"
            f"  matcher={self.matcher},\n"
            f"  accumulator={self.accumulator}\n"
            f")"
        )
