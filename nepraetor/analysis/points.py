"""
Point Detection Module - Counts point markers inside the canvas.

Points are rendered as tiny pink/salmon dots. Anti-aliasing washes out
their saturation, so the color bands are deliberately wide and reach
across the red hue wrap-around (0 and 180 in OpenCV's hue scale).
"""

from typing import Iterable, List

import cv2
import numpy as np


# HSV bands (OpenCV scale: H 0-180, S/V 0-255), both bounds inclusive
LOW_HUE_LOWER = np.array([0, 10, 100])      # reddish-pink
LOW_HUE_UPPER = np.array([30, 255, 255])    # up to orange-ish tones
HIGH_HUE_LOWER = np.array([150, 10, 100])   # pink-purple
HIGH_HUE_UPPER = np.array([180, 255, 255])

# Connected component areas counted as a single point (pixels, inclusive)
MIN_POINT_AREA = 1
MAX_POINT_AREA = 25

# Smallest structuring element; keeps one-pixel points
OPENING_KERNEL_SIZE = (1, 1)


def build_point_mask(roi: np.ndarray) -> np.ndarray:
    """
    Mask the pixels of a BGR canvas that look like point markers.

    Args:
        roi: BGR canvas image

    Returns:
        Binary mask (uint8, 0 or 255) with the same height and width
    """
    hsv = cv2.cvtColor(roi, cv2.COLOR_BGR2HSV)
    low_mask = cv2.inRange(hsv, LOW_HUE_LOWER, LOW_HUE_UPPER)
    high_mask = cv2.inRange(hsv, HIGH_HUE_LOWER, HIGH_HUE_UPPER)
    mask = cv2.bitwise_or(low_mask, high_mask)

    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, OPENING_KERNEL_SIZE)
    return cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel)


def component_areas(mask: np.ndarray) -> List[int]:
    """
    Pixel areas of the 8-connected foreground components of a mask.

    The background label is skipped.
    """
    n_labels, _, stats, _ = cv2.connectedComponentsWithStats(mask, connectivity=8)
    return [int(stats[label, cv2.CC_STAT_AREA]) for label in range(1, n_labels)]


def is_point_area(area: float) -> bool:
    """True if a blob of this area counts as one point."""
    return MIN_POINT_AREA <= area <= MAX_POINT_AREA


def count_point_areas(areas: Iterable[float]) -> int:
    """Number of blob areas inside the point size range."""
    return sum(1 for area in areas if is_point_area(area))


def count_mask_points(mask: np.ndarray) -> int:
    """Count point-sized components in a binary mask."""
    if mask.size == 0:
        return 0
    return count_point_areas(component_areas(mask))


def count_points(roi: np.ndarray) -> int:
    """
    Count the point markers drawn on a BGR canvas.

    Larger blobs (merged clusters, labels, axes) are ignored.

    Args:
        roi: BGR canvas image (the section cropped to its DetectedRegion)

    Returns:
        Number of point markers
    """
    if roi.size == 0:
        return 0
    return count_mask_points(build_point_mask(roi))
