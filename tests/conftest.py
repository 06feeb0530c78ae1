"""Shared fixtures: deterministic detector/extractor fakes and sample frames."""

import numpy as np
import pytest

from imei_scanner.frame import Frame, Region
from imei_scanner.modules.detection import RegionDetector


class ScriptedDetector(RegionDetector):
    """Returns preset regions, or raises ``error`` while it is set."""

    def __init__(self, regions=(), error=None, config=None):
        super().__init__(config)
        self.regions = list(regions)
        self.error = error
        self.calls = 0

    def _predict(self, frame):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.regions)


def text_by_width(mapping):
    """Extractor fn keyed on crop width, so each fake region gets its own text."""

    def extract(crop):
        value = mapping[crop.width]
        if isinstance(value, BaseException):
            raise value
        return value

    return extract


@pytest.fixture
def frame():
    pixels = np.full((120, 200, 3), 255, dtype=np.uint8)
    return Frame(pixels)


@pytest.fixture
def text_region():
    return Region(10, 10, 50, 20, label="Text", confidence=0.9)
