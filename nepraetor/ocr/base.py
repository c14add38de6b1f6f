"""
OCR Engine Interface

Contract for the text recognizers that read reference labels.
"""

from abc import ABC, abstractmethod

from PIL import Image

from .result import OCRResult


class OCREngine(ABC):
    """
    Text recognizer for small label crops.

    Subclasses implement process() and name. The first call to process()
    may block while a backend starts up or loads a model.
    """

    @abstractmethod
    def process(self, image: Image.Image) -> OCRResult:
        """
        Recognize the text in a label crop.

        Args:
            image: Grayscale or RGB crop

        Returns:
            OCRResult with the raw text ("" when nothing was read), the
            time taken and the engine name
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the engine, e.g. "tesseract"."""

    def configure(self, **kwargs) -> None:
        """
        Change engine options after construction.

        Engines without runtime options ignore the call.
        """
