"""Thread-safe ONNX Runtime session shared by the detector and recognizer."""

import threading
from pathlib import Path
from typing import Dict, List, Union

import numpy as np
import onnxruntime


class ONNXInferenceBase:
    """Single ONNX Runtime session with provider selection."""

    def __init__(
        self,
        model_path: Union[str, Path],
        use_gpu: bool = False,
        use_tensorrt: bool = False,
    ):
        """Open an inference session on the best available provider.

        Args:
            model_path: ONNX weights
            use_gpu: Prefer CUDA when onnxruntime-gpu is installed
            use_tensorrt: Prefer TensorRT over CUDA

        Raises:
            FileNotFoundError: if ``model_path`` does not exist
        """
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(f"Model not found: {model_path}")

        self.providers = self._get_providers(use_gpu, use_tensorrt)
        self.session = onnxruntime.InferenceSession(
            str(self.model_path),
            providers=self.providers,
        )

        self.input_names = [node.name for node in self.session.get_inputs()]
        self.output_names = [node.name for node in self.session.get_outputs()]
        # Sessions are shared between pipeline worker threads
        self._lock = threading.Lock()

    @staticmethod
    def _get_providers(use_gpu: bool, use_tensorrt: bool) -> List:
        """Priority: TensorRT > CUDA > CPU"""
        available = onnxruntime.get_available_providers()
        providers = []

        if use_tensorrt and "TensorrtExecutionProvider" in available:
            providers.append(("TensorrtExecutionProvider", {}))

        if use_gpu and "CUDAExecutionProvider" in available:
            providers.append((
                "CUDAExecutionProvider",
                {"cudnn_conv_algo_search": "DEFAULT"},
            ))

        providers.append("CPUExecutionProvider")
        return providers

    def get_input_feed(self, image_array: np.ndarray) -> Dict[str, np.ndarray]:
        return {self.input_names[0]: image_array}

    def run(self, input_feed: Dict[str, np.ndarray]) -> List[np.ndarray]:
        with self._lock:
            return self.session.run(self.output_names, input_feed=input_feed)

    def __repr__(self):
        return f"{type(self).__name__}(model={self.model_path.name})"
