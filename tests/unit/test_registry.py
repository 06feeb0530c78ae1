"""Unit tests for the model registry."""

from pathlib import Path

import huggingface_hub
import pytest

from imei_scanner.models import ALL_GROUPS, ModelRegistry


@pytest.fixture
def downloads(monkeypatch, tmp_path):
    calls = []

    def fake_download(repo_id, filename):
        calls.append((repo_id, filename))
        return str(tmp_path / "hub" / filename)

    monkeypatch.setattr(huggingface_hub, "hf_hub_download", fake_download)
    monkeypatch.setattr(huggingface_hub, "try_to_load_from_cache", lambda repo, name: None)
    return calls


def test_groups_cover_detector_and_recognizer():
    assert ALL_GROUPS["yolox"].file("yolox").filename == "yolox/yolox_l0.05.onnx"
    assert ALL_GROUPS["paddle_ocr"].keys == ("recognizer", "dictionary")


def test_unknown_group_and_file():
    registry = ModelRegistry("someone/models", local_dir=None)
    with pytest.raises(KeyError):
        registry.get("tesseract", "model")
    with pytest.raises(KeyError):
        registry.get("yolox", "yolox_tiny")


def test_get_downloads_through_hub(downloads, tmp_path):
    registry = ModelRegistry("someone/models", local_dir=None)

    path = registry.get("paddle_ocr", "recognizer")
    paths = registry.group_paths("paddle_ocr")

    assert path == tmp_path / "hub" / "paddle_ocr" / "rec.onnx"
    assert isinstance(paths["dictionary"], Path)
    assert downloads[0] == ("someone/models", "paddle_ocr/rec.onnx")
    assert len(downloads) == 3


def test_local_dir_takes_precedence(downloads, tmp_path):
    local = tmp_path / "weights"
    (local / "yolox").mkdir(parents=True)
    (local / "yolox" / "yolox_l0.05.onnx").write_bytes(b"onnx")
    registry = ModelRegistry("someone/models", local_dir=local)

    assert registry.get("yolox", "yolox") == local / "yolox" / "yolox_l0.05.onnx"
    assert downloads == []
    assert registry.missing() == ["paddle_ocr/rec.onnx", "paddle_ocr/ppocrv5_dict.txt"]


def test_prefetch_and_status(downloads):
    registry = ModelRegistry("someone/models", local_dir=None)
    assert len(registry.prefetch()) == 3

    report = registry.status()
    assert "someone/models" in report
    assert report.count("MISSING") == 3
