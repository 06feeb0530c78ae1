"""
Weight files used by the scanner and where they come from.

Both models live in one HuggingFace repository. Deployments without network
access can point IMEI_SCANNER_MODEL_DIR at a directory that mirrors the repo
layout (e.g. ``<dir>/yolox/yolox_l0.05.onnx``).
"""

import os
from dataclasses import dataclass
from typing import Dict, Tuple


HF_REPO = os.environ.get("IMEI_SCANNER_MODEL_REPO", "hpllduck/PaperStructure")
LOCAL_MODEL_DIR = os.environ.get("IMEI_SCANNER_MODEL_DIR")


@dataclass(frozen=True)
class ModelFile:
    key: str
    filename: str  # relative to the repo root
    description: str = ""


@dataclass(frozen=True)
class ModelGroup:
    """Weights loaded together by one scanner component."""
    name: str
    description: str
    files: Tuple[ModelFile, ...]

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.files)

    def file(self, key: str) -> ModelFile:
        for model_file in self.files:
            if model_file.key == key:
                return model_file
        raise KeyError(f"Group '{self.name}' has no file '{key}' (known: {', '.join(self.keys)})")


# Region detection
YOLOX = ModelGroup(
    name="yolox",
    description="layout detector that proposes text-bearing regions",
    files=(
        ModelFile("yolox", "yolox/yolox_l0.05.onnx", "YOLOX-L"),
    ),
)

# Line OCR on region crops
PADDLE_OCR = ModelGroup(
    name="paddle_ocr",
    description="PP-OCRv5 line recognizer",
    files=(
        ModelFile("recognizer", "paddle_ocr/rec.onnx", "SVTR recognizer"),
        ModelFile("dictionary", "paddle_ocr/ppocrv5_dict.txt", "CTC vocabulary"),
    ),
)

ALL_GROUPS: Dict[str, ModelGroup] = {group.name: group for group in (YOLOX, PADDLE_OCR)}
