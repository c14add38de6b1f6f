"""
Reference Recognition Module - Reads the printed point count of a view.

Every view prints the number of points it renders as a small "×1368"
label near its bottom-left corner. The label is cropped, cleaned up and
handed to a pluggable OCR engine; only the digits of the answer are kept.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from ..ocr import OCREngine

logger = logging.getLogger(__name__)


# Label position relative to the section: x, distance of the top edge
# from the section bottom, width and height
REFERENCE_CROP_X = 10
REFERENCE_CROP_BOTTOM = 30
REFERENCE_CROP_WIDTH = 100
REFERENCE_CROP_HEIGHT = 25

# Crop cleanup before OCR
OCR_BINARY_THRESHOLD = 128
OCR_UPSCALE = 2

_NON_DIGITS = re.compile(r"[^0-9]")


@dataclass(frozen=True, eq=False)
class ReferenceReading:
    """
    OCR outcome for one section.

    Attributes:
        value: Parsed number, 0 if nothing was recognized
        text: Raw engine output
        crop: BGR label area as cut from the section
        prepared: Image that was handed to the engine (the crop itself
                  when preprocessing is off or the crop is empty)
    """
    value: int
    text: str
    crop: np.ndarray
    prepared: np.ndarray


def parse_reference_text(text: Optional[str]) -> int:
    """
    Extract the number from recognized text.

    All non-digit characters (including the leading "×") are dropped and
    the remaining digits are read as one base-10 number.

    Args:
        text: Raw OCR output

    Returns:
        Parsed number, 0 if the text contains no digits

    Example:
        >>> parse_reference_text("×1368")
        1368
    """
    digits = _NON_DIGITS.sub("", text or "")
    if not digits:
        return 0
    return int(digits)


def reference_crop(section_image: np.ndarray) -> np.ndarray:
    """
    Cut the label area out of a section, clipped to the section bounds.

    Args:
        section_image: BGR section image

    Returns:
        BGR crop (may be empty for very small sections)
    """
    height, width = section_image.shape[:2]
    y1 = max(0, height - REFERENCE_CROP_BOTTOM)
    y2 = min(height, y1 + REFERENCE_CROP_HEIGHT)
    x1 = min(width, REFERENCE_CROP_X)
    x2 = min(width, x1 + REFERENCE_CROP_WIDTH)
    return section_image[y1:y2, x1:x2]


def prepare_for_ocr(crop: np.ndarray) -> np.ndarray:
    """
    Binarize and upscale a BGR label crop for legibility.

    Args:
        crop: BGR label crop (non-empty)

    Returns:
        Single channel binary image, OCR_UPSCALE times larger
    """
    gray = cv2.cvtColor(crop, cv2.COLOR_BGR2GRAY)
    _, binary = cv2.threshold(gray, OCR_BINARY_THRESHOLD, 255, cv2.THRESH_BINARY)
    height, width = binary.shape[:2]
    return cv2.resize(binary, (width * OCR_UPSCALE, height * OCR_UPSCALE),
                      interpolation=cv2.INTER_CUBIC)


class ReferenceRecognizer:
    """
    Reads the reference count of a section through an OCR engine.

    Engine failures are logged and reported as a 0 reading; they never
    propagate to the caller.
    """

    def __init__(self, engine: OCREngine, preprocess: bool = True):
        """
        Args:
            engine: Text recognizer to delegate to
            preprocess: Binarize and upscale the crop before recognition
        """
        self.engine = engine
        self.preprocess = preprocess

    def read(self, section_image: np.ndarray, label: str = "") -> ReferenceReading:
        """
        Read the printed reference count of a section.

        Args:
            section_image: BGR section image
            label: Section name for log messages

        Returns:
            ReferenceReading (value 0 if nothing usable was recognized)
        """
        crop = reference_crop(section_image)
        if crop.size == 0:
            logger.debug(f"[{label}] Section too small for a reference label")
            return ReferenceReading(value=0, text="", crop=crop, prepared=crop)

        if self.preprocess:
            prepared = prepare_for_ocr(crop)
            pil_image = Image.fromarray(prepared)
        else:
            prepared = crop
            pil_image = Image.fromarray(cv2.cvtColor(crop, cv2.COLOR_BGR2RGB))

        try:
            text = self.engine.process(pil_image).text
        except Exception as e:
            logger.warning(f"[{label}] OCR engine '{self.engine.name}' failed: {e}")
            return ReferenceReading(value=0, text="", crop=crop, prepared=prepared)

        value = parse_reference_text(text)
        if value:
            logger.debug(f"[{label}] Reference number {value} (raw text: {text!r})")
        else:
            logger.debug(f"[{label}] No number recognized (raw text: {text!r})")
        return ReferenceReading(value=value, text=text, crop=crop, prepared=prepared)

    def read_value(self, section_image: np.ndarray, label: str = "") -> int:
        """Shortcut returning only the parsed number."""
        return self.read(section_image, label).value
