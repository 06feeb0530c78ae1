"""Configuration for the line recognizer and ONNX sessions."""

from dataclasses import dataclass
from typing import List


@dataclass
class RecognizerConfig:
    """Configuration for single-line text recognition."""
    rec_image_shape: List[int] = None  # [C, H, W] e.g., [3, 48, 320]
    rec_batch_num: int = 6  # Lines per inference batch
    use_space_char: bool = True  # Include space character in vocabulary
    drop_score: float = 0.0  # Lines below this confidence are returned as ""
    min_line_height: int = 8  # Projection bands thinner than this are merged/ignored
    use_gpu: bool = False  # Enable CUDA GPU acceleration
    use_tensorrt: bool = False  # Enable TensorRT acceleration

    def __post_init__(self):
        if self.rec_image_shape is None:
            self.rec_image_shape = [3, 48, 320]
