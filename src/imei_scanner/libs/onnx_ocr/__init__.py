"""
Line OCR built on ONNX Runtime

- TextRecognizer: converts text line images to strings (CTC decoding)
- split_text_lines: cuts multi-line crops into lines before recognition
"""

from .config import RecognizerConfig
from .onnx_base import ONNXInferenceBase
from .postprocess import CTCLabelDecode
from .text_recognizer import TextRecognizer
from .utils import split_text_lines

__all__ = [
    "RecognizerConfig",
    "ONNXInferenceBase",
    "CTCLabelDecode",
    "TextRecognizer",
    "split_text_lines",
]
