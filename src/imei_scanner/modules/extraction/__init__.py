from .extractor import (
    PLACEHOLDER_TEXT,
    CallableTextExtractor,
    OnnxTextExtractor,
    StaticTextExtractor,
    TextExtractor,
)

__all__ = [
    "PLACEHOLDER_TEXT",
    "TextExtractor",
    "StaticTextExtractor",
    "CallableTextExtractor",
    "OnnxTextExtractor",
]
