"""
Tesseract OCR Engine

Reads the printed reference count ("×1368") with Tesseract through pytesseract.
The executable is located lazily on first use so that constructing the engine
never touches the filesystem.
"""

import logging
import os
import shutil
import time
from typing import Optional

import pytesseract
from PIL import Image

from .base import OCREngine
from .result import OCRResult

logger = logging.getLogger(__name__)


# Only the multiplication sign and digits appear in the reference label
CHAR_WHITELIST = "×0123456789"

# Page segmentation mode 7: treat the crop as a single text line
DEFAULT_PSM = 7


def find_tesseract(preferred: Optional[str] = None) -> Optional[str]:
    """
    Locate the tesseract executable.

    Checks, in order: the explicit path, the TESSERACT_CMD environment
    variable and the system PATH.

    Args:
        preferred: Explicit path to try first

    Returns:
        Path to the executable, or None if not found
    """
    for candidate in (preferred, os.environ.get("TESSERACT_CMD"), shutil.which("tesseract")):
        if candidate and os.path.isfile(candidate):
            return candidate
    return None


class TesseractOCREngine(OCREngine):
    """OCR engine backed by the Tesseract command line tool."""

    def __init__(self, tesseract_cmd: Optional[str] = None, psm: int = DEFAULT_PSM):
        """
        Initialize the Tesseract engine.

        Args:
            tesseract_cmd: Optional path to the tesseract executable.
                          If None, it is searched for on first use.
            psm: Tesseract page segmentation mode
        """
        self._tesseract_cmd = tesseract_cmd
        self._psm = psm
        self._resolved = False

    @property
    def name(self) -> str:
        return "tesseract"

    @property
    def config(self) -> str:
        """Command line options passed to tesseract."""
        return f"--oem 3 --psm {self._psm} -c tessedit_char_whitelist={CHAR_WHITELIST}"

    def process(self, image: Image.Image) -> OCRResult:
        """
        Run Tesseract on an image crop.

        Args:
            image: PIL Image of the crop

        Returns:
            OCRResult with the stripped recognized text
        """
        start_time = time.perf_counter()

        if not self._resolved:
            self._resolve_executable()

        text = pytesseract.image_to_string(image, config=self.config) or ""

        return OCRResult(
            text=text.strip(),
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            engine=self.name,
        )

    def configure(self, **kwargs) -> None:
        """
        Configure engine parameters.

        Args:
            tesseract_cmd: Path to the tesseract executable
            psm: Page segmentation mode
        """
        if "tesseract_cmd" in kwargs:
            self._tesseract_cmd = kwargs["tesseract_cmd"]
            self._resolved = False
        if "psm" in kwargs:
            self._psm = int(kwargs["psm"])

    def _resolve_executable(self) -> None:
        """Point pytesseract at the executable, if one can be found."""
        path = find_tesseract(self._tesseract_cmd)
        if path:
            pytesseract.pytesseract.tesseract_cmd = path
            logger.debug(f"Using tesseract at {path}")
        else:
            # Leave pytesseract's default; it raises TesseractNotFoundError on use
            logger.warning("Tesseract executable not found, relying on pytesseract default")
        self._resolved = True
