from __future__ import annotations

import pytest

from gradescan.errors import OcrEngineFailure
from gradescan.ocr import OcrJob

TWO_TERMS = """\
Student: Dela Cruz, Juan
AY 2022-2023 Term 1
CSC101 Intro to Computing 3 4.0
MTH101 College Algebra 3 3.5
NSTP1 National Service 1.0 3
PEFIT P 2
Term GPA: 3.750
AY 2022-2023 Term 2
CSC102 Programming 2 3.0 3
ENG101 Writing 3 2.5
Term GPA: 2.750
"""

NEXT_YEAR = """\
AY 2023-2024 Term 1
CSC201 Data Structures 3 3.5
Term GPA: 3.500
"""


class FakeEngine:
    name = "fake"

    def __init__(self, text: str = TWO_TERMS, fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.seen: list[tuple[tuple[int, int], str]] = []

    def recognize(self, image):
        self.seen.append((image.size, image.mode))

        def run():
            yield 0.0
            if self.fail:
                raise OcrEngineFailure("engine crashed")
            yield 0.5
            yield self.text
            yield 1.0

        return OcrJob(run)


@pytest.fixture
def fake_engine():
    return FakeEngine()
