"""
IMEI Scanner
Capture-to-IMEI pipeline: region detection, OCR and 15-digit pattern matching
"""

from .errors import (
    CaptureError,
    ExtractionFailed,
    InvalidFrame,
    ModelUnavailable,
    ScanError,
    SessionClosed,
)
from .frame import Frame, Region
from .pipeline import FrameResult, IMEIScanPipeline, PipelineState
from .modules.detection import FullFrameDetector, RegionDetector, YoloxRegionDetector
from .modules.extraction import (
    CallableTextExtractor,
    OnnxTextExtractor,
    StaticTextExtractor,
    TextExtractor,
)
from .modules.matching import IMEIMatcher, find_candidates
from .modules.results import IMEIAccumulator

__version__ = "0.1.0"
__all__ = [
    'IMEIScanPipeline',
    'FrameResult',
    'PipelineState',
    'Frame',
    'Region',
    'RegionDetector',
    'FullFrameDetector',
    'YoloxRegionDetector',
    'TextExtractor',
    'StaticTextExtractor',
    'CallableTextExtractor',
    'OnnxTextExtractor',
    'IMEIMatcher',
    'find_candidates',
    'IMEIAccumulator',
    'ScanError',
    'InvalidFrame',
    'ModelUnavailable',
    'ExtractionFailed',
    'SessionClosed',
    'CaptureError',
]
