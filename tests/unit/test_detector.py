"""Unit tests for region detectors."""

import pytest

from imei_scanner.config import DetectorConfig
from imei_scanner.errors import InvalidFrame, ModelUnavailable
from imei_scanner.frame import Region
from imei_scanner.libs.yolox import Detection
from imei_scanner.modules.detection import FullFrameDetector, YoloxRegionDetector
from imei_scanner.modules.detection import detector as detector_module
from tests.conftest import ScriptedDetector


class FakeYolox:
    def __init__(self, detections):
        self.detections = detections
        self.calls = []

    def predict(self, image_bgr, nms_threshold=0.1, score_threshold=0.25):
        self.calls.append((image_bgr.shape, nms_threshold, score_threshold))
        return list(self.detections)


def test_detect_clamps_regions_into_frame(frame):
    detector = ScriptedDetector([Region(-10, 100, 50, 50, label="Text")])
    (region,) = detector.detect(frame)
    assert region.bbox == (0, 100, 40, 120)


def test_detect_drops_low_confidence(frame):
    detector = ScriptedDetector(
        [Region(0, 0, 5, 5, confidence=0.1), Region(0, 0, 6, 6, confidence=0.8)],
        config=DetectorConfig(min_confidence=0.5),
    )
    assert [r.width for r in detector.detect(frame)] == [6]


def test_detect_rejects_non_frame():
    with pytest.raises(InvalidFrame):
        ScriptedDetector().detect(None)


@pytest.mark.parametrize(
    "label,expected",
    [("Text", True), ("text", True), ("Table", True), ("Title", True), ("Picture", False), ("Formula", False), (None, False)],
)
def test_text_predicate(label, expected):
    assert ScriptedDetector().is_text_region(Region(0, 0, 1, 1, label=label)) is expected


def test_text_predicate_uses_configured_labels():
    detector = ScriptedDetector(config=DetectorConfig(text_labels=("sticker",)))
    assert detector.is_text_region(Region(0, 0, 1, 1, label="Sticker"))
    assert not detector.is_text_region(Region(0, 0, 1, 1, label="Text"))


def test_full_frame_detector(frame):
    (region,) = FullFrameDetector().detect(frame)
    assert region.bbox == (0, 0, 200, 120)
    assert FullFrameDetector().is_text_region(region)


def test_yolox_detector_missing_model_file(frame, tmp_path):
    detector = YoloxRegionDetector(model_path=tmp_path / "missing.onnx")
    with pytest.raises(ModelUnavailable):
        detector.detect(frame)
    assert not detector.ready


def test_yolox_detector_converts_and_clamps_detections(frame):
    model = FakeYolox([
        Detection(5.5, 6.2, 40.0, 30.0, 0.9, "Text"),
        Detection(150.0, 100.0, 260.0, 140.0, 0.8, "Picture"),
    ])
    detector = YoloxRegionDetector(model=model, config=DetectorConfig(nms_threshold=0.3))
    assert detector.ready

    regions = detector.detect(frame)

    assert [r.bbox for r in regions] == [(5, 6, 40, 30), (150, 100, 200, 120)]
    assert [r.label for r in regions] == ["Text", "Picture"]
    assert model.calls == [((120, 200, 3), 0.3, 0.25)]


def test_yolox_detector_inference_error_is_model_unavailable(frame):
    class Broken:
        def predict(self, *args, **kwargs):
            raise RuntimeError("session crashed")

    detector = YoloxRegionDetector(model=Broken())
    with pytest.raises(ModelUnavailable):
        detector.detect(frame)


def test_yolox_detector_retries_load_after_failure(frame, monkeypatch):
    attempts = []
    model = FakeYolox([Detection(0, 0, 10, 10, 0.9, "Text")])

    def fake_get_model(model_name=None, use_gpu=False):
        attempts.append(model_name)
        if len(attempts) == 1:
            raise OSError("weights not downloaded yet")
        return model

    monkeypatch.setattr(detector_module, "get_model", fake_get_model)
    detector = YoloxRegionDetector()

    with pytest.raises(ModelUnavailable):
        detector.detect(frame)
    assert len(detector.detect(frame)) == 1
    assert detector.ready
    assert len(attempts) == 2
