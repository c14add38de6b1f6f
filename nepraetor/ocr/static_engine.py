"""
Static OCR Engine

Returns the same text for every crop. Used to replay frames whose reference
count is already known, and to run the pipeline without an OCR backend.
"""

import time

from PIL import Image

from .base import OCREngine
from .result import OCRResult


class StaticOCREngine(OCREngine):
    """OCR engine that always 'recognizes' a fixed text."""

    def __init__(self, text: str = ""):
        self._text = text

    @property
    def name(self) -> str:
        return "static"

    def process(self, image: Image.Image) -> OCRResult:
        start_time = time.perf_counter()
        return OCRResult(
            text=self._text,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            engine=self.name,
        )

    def configure(self, **kwargs) -> None:
        if "text" in kwargs:
            self._text = str(kwargs["text"])
