"""
Text Recognition Module

Recognizes single text lines with an SVTR/CRNN-style ONNX model.
Supports batch processing with CTC post-processing.
"""

import math
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np

from .config import RecognizerConfig
from .onnx_base import ONNXInferenceBase
from .postprocess import CTCLabelDecode


class TextRecognizer:
    """Line recognizer: takes BGR line images, returns (text, confidence)."""

    def __init__(
        self,
        model_path: Union[str, Path],
        char_dict_path: Optional[Union[str, Path]] = None,
        config: RecognizerConfig = None,
    ):
        """Load the recognizer session and its CTC vocabulary.

        Args:
            model_path: Recognizer ONNX file
            char_dict_path: One character per line; None uses digits and lowercase ASCII
            config: Batch size, input shape and providers
        """
        if config is None:
            config = RecognizerConfig()

        self.config = config
        self.rec_image_shape = config.rec_image_shape
        self.rec_batch_num = config.rec_batch_num

        self.session = ONNXInferenceBase(
            model_path,
            use_gpu=config.use_gpu,
            use_tensorrt=config.use_tensorrt,
        )
        self.postprocess_op = CTCLabelDecode(
            character_dict_path=char_dict_path,
            use_space_char=config.use_space_char,
        )

    def resize_norm_img(self, img: np.ndarray, max_wh_ratio: float) -> np.ndarray:
        """Resize to model height, scale to [-1, 1] and right-pad to batch width.

        Args:
            img: Line image (H, W, C) in BGR
            max_wh_ratio: Widest aspect ratio in the batch; sets the padded width

        Returns:
            (C, H, W) float32 tensor
        """
        img_c, img_h, _ = self.rec_image_shape
        img_w = int(img_h * max_wh_ratio)

        h, w = img.shape[:2]
        resized_w = min(img_w, int(math.ceil(img_h * (w / float(h)))))
        resized_w = max(1, resized_w)

        resized = cv2.resize(img, (resized_w, img_h)).astype("float32")
        resized = resized.transpose((2, 0, 1)) / 255
        resized -= 0.5
        resized /= 0.5

        padded = np.zeros((img_c, img_h, img_w), dtype=np.float32)
        padded[:, :, 0:resized_w] = resized
        return padded

    def __call__(self, img_list: List[np.ndarray]) -> List[Tuple[str, float]]:
        """Recognize a batch of line images (BGR)."""
        if not img_list:
            return []

        img_num = len(img_list)
        # Similar aspect ratios in one batch means less padding
        width_list = [img.shape[1] / float(img.shape[0]) for img in img_list]
        indices = np.argsort(np.array(width_list))

        rec_res = [("", 0.0)] * img_num
        _, img_h, img_w = self.rec_image_shape[:3]

        for beg in range(0, img_num, self.rec_batch_num):
            end = min(img_num, beg + self.rec_batch_num)

            max_wh_ratio = img_w / img_h
            for ino in range(beg, end):
                h, w = img_list[indices[ino]].shape[0:2]
                max_wh_ratio = max(max_wh_ratio, w * 1.0 / h)

            norm_img_batch = np.concatenate([
                self.resize_norm_img(img_list[indices[ino]], max_wh_ratio)[np.newaxis, :]
                for ino in range(beg, end)
            ])

            outputs = self.session.run(self.session.get_input_feed(norm_img_batch))
            rec_result = self.postprocess_op(outputs[0])

            for rno, (text, score) in enumerate(rec_result):
                if score < self.config.drop_score:
                    text = ""
                rec_res[indices[beg + rno]] = (text, score)

        return rec_res

    def recognize_single(self, img: np.ndarray) -> Tuple[str, float]:
        results = self([img])
        return results[0] if results else ("", 0.0)

    def __repr__(self):
        return f"TextRecognizer(session={self.session})"
