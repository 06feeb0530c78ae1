"""
Model weights for the IMEI scanner.

Usage:
    from imei_scanner.models import registry

    path = registry.get("yolox", "yolox")
"""

from .config import ALL_GROUPS, HF_REPO, PADDLE_OCR, YOLOX, ModelFile, ModelGroup
from .registry import ModelRegistry, registry

__all__ = [
    "ModelRegistry",
    "registry",
    "ModelFile",
    "ModelGroup",
    "ALL_GROUPS",
    "HF_REPO",
    "YOLOX",
    "PADDLE_OCR",
]
