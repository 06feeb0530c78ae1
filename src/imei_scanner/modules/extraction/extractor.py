"""
Region Text Extraction Module
Pluggable OCR boundary: Frame crop in, text out
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union

from imei_scanner.errors import ExtractionFailed, InvalidFrame
from imei_scanner.frame import Frame
from imei_scanner.libs.onnx_ocr import RecognizerConfig, TextRecognizer, split_text_lines

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "123456789012345"


class TextExtractor(ABC):
    """
    Capability interface for OCR engines

    ``extract_text`` returns the best-effort text for one crop, or "" when
    nothing is recognized. Implementations may raise anything on failure; the
    pipeline converts errors into ExtractionFailed per region.
    """

    def extract_text(self, crop: Frame) -> str:
        if not isinstance(crop, Frame):
            raise InvalidFrame(f"Expected Frame, got {type(crop).__name__}")
        return self._extract(crop)

    @abstractmethod
    def _extract(self, crop: Frame) -> str:
        ...


class StaticTextExtractor(TextExtractor):
    """Returns a fixed string after an optional delay; stands in for a real engine."""

    def __init__(self, text: str = PLACEHOLDER_TEXT, delay: float = 0.0):
        self.text = text
        self.delay = delay

    def _extract(self, crop: Frame) -> str:
        if self.delay > 0:
            time.sleep(self.delay)
        return self.text

    def __repr__(self):
        return f"StaticTextExtractor(text={self.text!r}, delay={self.delay})"


class CallableTextExtractor(TextExtractor):
    """Adapts any ``Frame -> str`` callable, e.g. a deterministic test fake."""

    def __init__(self, fn: Callable[[Frame], str]):
        self.fn = fn

    def _extract(self, crop: Frame) -> str:
        text = self.fn(crop)
        return "" if text is None else str(text)

    def __repr__(self):
        return f"CallableTextExtractor(fn={getattr(self.fn, '__name__', self.fn)!r})"


class OnnxTextExtractor(TextExtractor):
    """
    Text extraction using a PP-OCR line recognizer

    Region crops may hold several lines (an IMEI label usually also carries
    serial numbers and barcodes), so each crop is split into lines first and
    every line is recognized separately. Lines are joined with newlines.
    """

    def __init__(
        self,
        model_path: Optional[Union[str, Path]] = None,
        char_dict_path: Optional[Union[str, Path]] = None,
        config: Optional[RecognizerConfig] = None,
    ):
        """
        Args:
            model_path: Recognizer ONNX file; None downloads it via the model registry
            char_dict_path: Character dictionary; resolved with the model when None
            config: Recognizer configuration
        """
        self.config = config or RecognizerConfig()
        self.model_path = model_path
        self.char_dict_path = char_dict_path
        self._recognizer = None
        self._load_lock = threading.Lock()

    def load(self) -> TextRecognizer:
        with self._load_lock:
            if self._recognizer is None:
                model_path, dict_path = self.model_path, self.char_dict_path
                if model_path is None:
                    from imei_scanner.models import registry

                    model_path = registry.get("paddle_ocr", "recognizer")
                    if dict_path is None:
                        dict_path = registry.get("paddle_ocr", "dictionary")
                logger.info("Loading text recognizer from %s", model_path)
                self._recognizer = TextRecognizer(model_path, dict_path, self.config)
            return self._recognizer

    def _extract(self, crop: Frame) -> str:
        try:
            recognizer = self.load()
        except Exception as exc:
            raise ExtractionFailed(f"Text recognizer unavailable: {exc}") from exc

        lines = split_text_lines(crop.to_bgr(), min_line_height=self.config.min_line_height)
        results = recognizer(lines)
        texts = [text for text, _ in results if text]
        logger.debug("Recognized %d/%d lines in %s", len(texts), len(lines), crop)
        return "\n".join(texts)

    def __repr__(self):
        return f"OnnxTextExtractor(model={self.model_path or 'registry'})"
