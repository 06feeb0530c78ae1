"""Configuration classes for the scanning pipeline."""

from dataclasses import dataclass
from typing import Optional, Tuple

# Layout labels whose regions can carry printed text
DEFAULT_TEXT_LABELS = (
    "text",
    "title",
    "section-header",
    "list-item",
    "caption",
    "footnote",
    "page-header",
    "page-footer",
    "table",
)


@dataclass
class DetectorConfig:
    """Configuration for candidate region detection."""
    model_name: Optional[str] = None  # YOLOX variant; None = env var or default
    text_labels: Tuple[str, ...] = DEFAULT_TEXT_LABELS  # Matched case-insensitively
    min_confidence: float = 0.0  # Regions below this score are dropped
    nms_threshold: float = 0.1  # IoU above which same-class boxes are suppressed
    score_threshold: float = 0.25  # Minimum class score kept by NMS
    use_gpu: bool = False  # Enable CUDA GPU acceleration


@dataclass
class PipelineConfig:
    """Configuration for the frame orchestrator."""
    max_workers: int = 4  # Concurrent region extractions per pipeline
    max_frame_workers: int = 2  # Frames processed concurrently via submit_frame
    extraction_timeout: Optional[float] = 10.0  # Seconds per region; None = no limit
    video_stride: int = 15  # Use every n-th frame of uploaded videos

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_frame_workers < 1:
            raise ValueError(f"max_frame_workers must be >= 1, got {self.max_frame_workers}")
        if self.video_stride < 1:
            raise ValueError(f"video_stride must be >= 1, got {self.video_stride}")
