"""Unit tests for the CTC decoder and line splitting."""

import numpy as np
import pytest

from imei_scanner.libs.onnx_ocr import CTCLabelDecode, split_text_lines


def _one_hot(indices, num_classes):
    preds = np.zeros((1, len(indices), num_classes), dtype=np.float32)
    for t, idx in enumerate(indices):
        preds[0, t, idx] = 0.9
    return preds


def test_ctc_collapses_repeats_and_blanks():
    decoder = CTCLabelDecode()  # vocabulary: blank + 0-9a-z
    # "1", "1", blank, "1", "5" -> "115"
    preds = _one_hot([2, 2, 0, 2, 6], num_classes=37)
    ((text, score),) = decoder(preds)
    assert text == "115"
    assert score == pytest.approx(0.9)


def test_ctc_all_blank_is_empty():
    decoder = CTCLabelDecode()
    ((text, score),) = decoder(_one_hot([0, 0, 0], num_classes=37))
    assert text == ""
    assert score == 0.0


def test_ctc_reads_dictionary_file(tmp_path):
    dict_path = tmp_path / "dict.txt"
    dict_path.write_text("A\nB\nC\n", encoding="utf-8")
    decoder = CTCLabelDecode(character_dict_path=dict_path, use_space_char=True)
    assert decoder.character == ["blank", "A", "B", "C", " "]

    ((text, _),) = decoder(_one_hot([1, 4, 3], num_classes=5))
    assert text == "A C"


def _lines_image(line_rows, height=60, width=80):
    img = np.full((height, width, 3), 255, dtype=np.uint8)
    for top, bottom in line_rows:
        img[top:bottom, 5:75] = 0
    return img


def test_split_text_lines_finds_each_line():
    img = _lines_image([(5, 18), (30, 44)])
    lines = split_text_lines(img, min_line_height=8)
    assert len(lines) == 2
    assert all(line.shape[1] == 80 for line in lines)


def test_split_text_lines_handles_light_on_dark():
    img = 255 - _lines_image([(5, 18), (30, 44)])
    assert len(split_text_lines(img, min_line_height=8)) == 2


def test_split_text_lines_single_line_returns_input():
    img = _lines_image([(10, 40)])
    (line,) = split_text_lines(img, min_line_height=8)
    assert line is img


def test_split_text_lines_short_image_not_split():
    img = np.zeros((10, 40, 3), dtype=np.uint8)
    (line,) = split_text_lines(img, min_line_height=8)
    assert line is img


def test_ctc_default_vocabulary_with_space():
    decoder = CTCLabelDecode(use_space_char=True)
    assert decoder.character[-1] == " "
    assert len(decoder.character) == 38

    ((text, _),) = decoder(_one_hot([2, 37, 3], num_classes=38))
    assert text == "1 2"
