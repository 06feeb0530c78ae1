"""
IMEI Pattern Matching Module
Finds fixed-length digit runs in recognized text
"""

import re
from typing import List

IMEI_LENGTH = 15

# ASCII only: str.isdigit/\d would also accept Arabic-Indic and other Unicode digits
_DIGIT_RUN = re.compile(r"[0-9]+")


def is_imei(value: str) -> bool:
    """True if ``value`` is exactly fifteen ASCII digits."""
    return (
        isinstance(value, str)
        and len(value) == IMEI_LENGTH
        and _DIGIT_RUN.fullmatch(value) is not None
    )


class IMEIMatcher:
    """
    Extract IMEI candidates from free text

    Matching policy:
    - Text is split into maximal runs of consecutive digits.
    - A run of exactly ``length`` digits is a candidate, returned unmodified.
    - Shorter and longer runs are rejected whole. A 16-digit run is never
      trimmed or windowed down to 15 digits.

    No Luhn check digit validation is done; any 15-digit run is accepted.
    """

    def __init__(self, length: int = IMEI_LENGTH):
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        self.length = length

    def find_candidates(self, text: str) -> List[str]:
        """
        Find candidates in order of appearance

        Args:
            text: OCR output for one region (may be empty)

        Returns:
            Matching digit strings; duplicates are kept
        """
        if not text:
            return []
        return [
            run.group(0)
            for run in _DIGIT_RUN.finditer(text)
            if len(run.group(0)) == self.length
        ]

    def __repr__(self):
        return f"IMEIMatcher(length={self.length})"


_default_matcher = IMEIMatcher()


def find_candidates(text: str) -> List[str]:
    return _default_matcher.find_candidates(text)
