"""Unit tests for the command line interface."""

import numpy as np
import pytest
from PIL import Image

from imei_scanner import cli
from imei_scanner.cli import build_parser, main
from imei_scanner.errors import CaptureError
from imei_scanner.frame import Frame

IMEI = "356938035643809"


@pytest.fixture
def label_png(tmp_path):
    path = tmp_path / "label.png"
    Image.new("RGB", (64, 32), "white").save(path)
    return path


def test_parser_defaults():
    args = build_parser().parse_args(["a.jpg"])
    assert args.resolution == (1920, 1080)
    assert args.video_stride == 15
    assert args.camera == 0


def test_parser_rejects_bad_resolution():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--resolution", "wide", "a.jpg"])


def test_scan_with_static_text(label_png, tmp_path, capsys):
    output = tmp_path / "out" / "imeis.txt"
    output.parent.mkdir()
    code = main([str(label_png), "--static-text", f"IMEI {IMEI}", "-o", str(output), "--email"])

    stdout = capsys.readouterr().out
    assert code == 0
    assert stdout.splitlines()[0] == IMEI
    assert f"mailto:?subject=IMEI%20Scanner%20Results&body={IMEI}" in stdout
    assert output.read_text(encoding="utf-8") == f"{IMEI}\n"


def test_scan_writes_preview(label_png, tmp_path):
    preview_dir = tmp_path / "preview"
    code = main([str(label_png), "--static-text", IMEI, "--preview", str(preview_dir)])
    assert code == 0
    assert len(list(preview_dir.glob("*.png"))) == 1


def test_missing_input_fails(tmp_path, capsys):
    code = main([str(tmp_path / "nope.jpg"), "--static-text", IMEI])
    assert code == 1
    assert "not found" in capsys.readouterr().err


def test_nothing_to_scan():
    with pytest.raises(SystemExit):
        main([])


class FlakyCamera:
    """Delivers one frame, then fails like an unplugged device."""

    def __init__(self, device, width, height):
        self.reads = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self):
        self.reads += 1
        if self.reads > 1:
            raise CaptureError("Camera 0 returned no frame", source="0")
        return Frame(np.full((32, 64, 3), 255, dtype=np.uint8))


def test_camera_failure_keeps_results(monkeypatch, label_png, tmp_path, capsys):
    monkeypatch.setattr(cli, "CameraSource", FlakyCamera)
    output = tmp_path / "imeis.txt"

    code = main([str(label_png), "--camera", "3", "--static-text", IMEI, "-o", str(output), "--email"])

    captured = capsys.readouterr()
    assert code == 1
    assert captured.out.splitlines()[0] == IMEI
    assert f"body={IMEI}" in captured.out
    assert "stopped after 1 frames" in captured.err
    assert output.read_text(encoding="utf-8") == f"{IMEI}\n"


def test_partial_failure_still_exits_nonzero(label_png, tmp_path, capsys):
    code = main([str(label_png), str(tmp_path / "nope.jpg"), "--static-text", IMEI])

    assert code == 1
    assert capsys.readouterr().out.splitlines()[0] == IMEI
