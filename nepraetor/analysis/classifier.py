"""
Classifier Module - Decides whether a frame shows dummy content.

Decision order:
    1. Reference above DETECTION_THRESHOLD -> real, points = reference
       (dense clouds merge into blobs, so counting is not attempted)
    2. Views disagree (coefficient of variation > MAX_VIEW_VARIATION) -> dummy
    3. Counted points off the reference by more than MATCH_TOLERANCE -> dummy
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .statistics import coefficient_of_variation


# Reference counts above this are trusted without counting points
DETECTION_THRESHOLD = 20

# Maximum spread of the per-view counts for a genuine render
MAX_VIEW_VARIATION = 0.3

# Maximum relative difference between counted points and the reference
MATCH_TOLERANCE = 0.1


class Decision(Enum):
    """Which rule settled the classification."""
    REFERENCE_ABOVE_THRESHOLD = "reference above detection threshold"
    INCONSISTENT_VIEWS = "views disagree"
    REFERENCE_MISMATCH = "count does not match reference"
    REFERENCE_MATCH = "count matches reference"


@dataclass(frozen=True)
class Classification:
    """
    Outcome of the dummy check.

    Attributes:
        is_dummy: True if the frame shows placeholder content
        points: Point count to report for the frame
        decision: Rule that produced the outcome
    """
    is_dummy: bool
    points: int
    decision: Decision


def relative_difference(points: int, reference: int) -> float:
    """
    |points - reference| / reference.

    A zero reference only matches zero points; anything else is an
    infinite difference.
    """
    if reference == 0:
        return 0.0 if points == 0 else float("inf")
    return abs(points - reference) / reference


def classify_frame(points: int, reference: int,
                   view_counts: Optional[Iterable[int]] = None) -> Classification:
    """
    Classify a frame as dummy or real.

    Args:
        points: Aggregated point count (ignored above the threshold)
        reference: Trusted reference number
        view_counts: Raw per-view point counts; the consistency check is
                     skipped when None

    Returns:
        Classification
    """
    if reference > DETECTION_THRESHOLD:
        return Classification(is_dummy=False, points=reference,
                              decision=Decision.REFERENCE_ABOVE_THRESHOLD)

    if view_counts is not None and coefficient_of_variation(view_counts) > MAX_VIEW_VARIATION:
        return Classification(is_dummy=True, points=points,
                              decision=Decision.INCONSISTENT_VIEWS)

    if relative_difference(points, reference) > MATCH_TOLERANCE:
        return Classification(is_dummy=True, points=points,
                              decision=Decision.REFERENCE_MISMATCH)

    return Classification(is_dummy=False, points=points,
                          decision=Decision.REFERENCE_MATCH)
