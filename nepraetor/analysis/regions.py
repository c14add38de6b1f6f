"""
Region Detection Module - Locates the rendered canvas inside a view band.

The point cloud is drawn on a bright canvas; everything around it (window
chrome, toolbars) is darker. The canvas is the largest bright blob whose
bounding box covers a meaningful part of the band.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


# Grayscale level above which a pixel belongs to the canvas
BRIGHT_THRESHOLD = 200

# Candidate boxes must exceed this fraction of the band in both dimensions
MIN_REGION_FRACTION = 4  # width > band_width // 4, height > band_height // 4


@dataclass(frozen=True)
class DetectedRegion:
    """Bounding box of the canvas, relative to its section."""
    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def rect(self) -> Tuple[int, int, int, int]:
        """(x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def crop(self, image: np.ndarray) -> np.ndarray:
        """Return the part of the section image inside this region."""
        return image[self.y:self.y + self.height, self.x:self.x + self.width]


def binarize_section(image: np.ndarray) -> np.ndarray:
    """
    Threshold a BGR section so bright pixels become foreground (255).

    Args:
        image: BGR section image

    Returns:
        Single channel binary image
    """
    gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    _, binary = cv2.threshold(gray, BRIGHT_THRESHOLD, 255, cv2.THRESH_BINARY)
    return binary


def find_region(binary: np.ndarray) -> Optional[DetectedRegion]:
    """
    Pick the largest qualifying bounding box among the external contours.

    Args:
        binary: Output of binarize_section()

    Returns:
        DetectedRegion, or None if no box is large enough
    """
    band_height, band_width = binary.shape[:2]
    min_width = band_width // MIN_REGION_FRACTION
    min_height = band_height // MIN_REGION_FRACTION

    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    best: Optional[DetectedRegion] = None
    for cnt in contours:
        x, y, w, h = cv2.boundingRect(cnt)
        if w <= min_width or h <= min_height:
            continue
        candidate = DetectedRegion(x=int(x), y=int(y), width=int(w), height=int(h))
        if best is None or candidate.area > best.area:
            best = candidate

    return best


def detect_region(image: np.ndarray) -> Optional[DetectedRegion]:
    """
    Find the rendered canvas in a BGR section image.

    Args:
        image: BGR section image

    Returns:
        DetectedRegion, or None if no region was found
    """
    if image.size == 0:
        return None

    region = find_region(binarize_section(image))
    if region is None:
        logger.debug("No canvas region found")
    else:
        logger.debug(f"Canvas region: {region.rect}")
    return region
