import shlex
import sys
import types
from unittest.mock import patch

import pytest
from PIL import Image

from gradescan.errors import OcrEngineFailure
from gradescan.ocr import (
    DEFAULT_WHITELIST,
    OcrJob,
    OcrOptions,
    PaddleEngine,
    TesseractEngine,
    _paddle_lines_to_text,
    resolve_engine,
)


def test_tesseract_config_is_shlex_safe():
    cfg = OcrOptions().tesseract_config()
    toks = shlex.split(cfg)
    assert toks[:4] == ["--psm", "6", "--dpi", "300"]
    assert "preserve_interword_spaces=1" in toks
    assert f"tessedit_char_whitelist={DEFAULT_WHITELIST}" in toks
    for ch in ".,:/()-":
        assert ch in DEFAULT_WHITELIST


def test_job_yields_progress_then_text():
    def run():
        yield 0.0
        yield 1.7
        yield "CSC101 3 4.0"
        yield 1.0

    job = OcrJob(run)
    assert list(job) == [0.0, 1.0, 1.0]
    assert job.text == "CSC101 3 4.0"


def test_job_text_drains_iterator():
    job = OcrJob(lambda: iter([0.0, "hello", 1.0]))
    assert job.text == "hello"


def test_tesseract_engine_passes_options():
    im = Image.new("L", (10, 10))
    with patch("gradescan.ocr.pytesseract.image_to_string", return_value="hi") as its:
        job = TesseractEngine(lang="eng").recognize(im)
        assert list(job) == [0.0, 1.0]
    assert job.text == "hi"
    its.assert_called_once()
    assert its.call_args.kwargs["lang"] == "eng"
    assert "--psm 6" in its.call_args.kwargs["config"]


def test_tesseract_failure_becomes_engine_failure():
    import pytesseract

    im = Image.new("L", (10, 10))
    err = pytesseract.TesseractError(1, "bad image")
    with patch("gradescan.ocr.pytesseract.image_to_string", side_effect=err):
        with pytest.raises(OcrEngineFailure):
            list(TesseractEngine().recognize(im))


def test_paddle_boxes_regrouped_into_lines():
    res = [
        [
            [[[50, 2], [60, 2], [60, 8], [50, 8]], ("3", 0.9)],
            [[[0, 0], [40, 0], [40, 8], [0, 8]], ("CSC101", 0.95)],
            [[[0, 40], [80, 40], [80, 48], [0, 48]], ("Term GPA: 4.0", 0.9)],
            "junk",
        ]
    ]
    assert _paddle_lines_to_text(res) == "CSC101 3\nTerm GPA: 4.0"
    assert _paddle_lines_to_text(None) == ""
    assert _paddle_lines_to_text([None]) == ""


def test_resolve_engine(monkeypatch):
    monkeypatch.delenv("GRADESCAN_OCR_ENGINE", raising=False)
    assert isinstance(resolve_engine(), TesseractEngine)
    assert isinstance(resolve_engine("Paddle"), PaddleEngine)
    assert resolve_engine("paddle", lang="eng").lang == "en"
    monkeypatch.setenv("GRADESCAN_OCR_ENGINE", "paddle")
    assert isinstance(resolve_engine(), PaddleEngine)
    with pytest.raises(ValueError):
        resolve_engine("bogus")


class _FakePaddleOCR:
    instances = []

    def __init__(self, lang):
        self.lang = lang
        self.fail = False
        _FakePaddleOCR.instances.append(self)

    def ocr(self, arr):
        if self.fail:
            raise RuntimeError("predictor crashed")
        assert arr.shape == (10, 20, 3)
        return [[[[[0, 0], [40, 0], [40, 8], [0, 8]], ("CSC101 3 4.0", 0.9)]]]


def test_paddle_engine_recognize(monkeypatch):
    fake_mod = types.ModuleType("paddleocr")
    fake_mod.PaddleOCR = _FakePaddleOCR
    monkeypatch.setitem(sys.modules, "paddleocr", fake_mod)
    _FakePaddleOCR.instances.clear()

    engine = PaddleEngine(lang="eng")
    job = engine.recognize(Image.new("L", (20, 10)))
    assert list(job) == [0.0, 0.1, 1.0]
    assert job.text == "CSC101 3 4.0"
    assert _FakePaddleOCR.instances[0].lang == "en"

    # the predictor is built once and reused
    _FakePaddleOCR.instances[0].fail = True
    with pytest.raises(OcrEngineFailure):
        list(engine.recognize(Image.new("L", (20, 10))))
    assert len(_FakePaddleOCR.instances) == 1


def test_paddle_init_failure_becomes_engine_failure(monkeypatch):
    def broken(lang):
        raise RuntimeError("model download failed")

    fake_mod = types.ModuleType("paddleocr")
    fake_mod.PaddleOCR = broken
    monkeypatch.setitem(sys.modules, "paddleocr", fake_mod)
    with pytest.raises(OcrEngineFailure):
        list(PaddleEngine().recognize(Image.new("L", (20, 10))))


def test_paddle_missing_becomes_engine_failure(monkeypatch):
    monkeypatch.setitem(sys.modules, "paddleocr", None)
    with pytest.raises(OcrEngineFailure):
        list(PaddleEngine().recognize(Image.new("L", (20, 10))))
