"""
Result Dataclasses

Per-frame output of the analysis pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .classifier import Decision
from .frame import Section
from .regions import DetectedRegion


@dataclass(frozen=True, eq=False)
class DebugArtifact:
    """Intermediate image produced by a pipeline stage."""
    tag: str           # e.g. "6_side_mask"
    image: np.ndarray  # BGR or single channel


@dataclass(frozen=True)
class ViewResult:
    """
    Externally visible result for one frame.

    Every view reports the same trusted reference number.
    """
    frame_number: int
    is_dummy: bool
    points: int
    reference_number: int

    @property
    def view_reference_counts(self) -> Dict[str, int]:
        """Reference count per view name, in section order."""
        return {section.value: self.reference_number for section in Section}

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict in stable field order."""
        return {
            "frameNumber": self.frame_number,
            "isDummy": self.is_dummy,
            "points": self.points,
            "viewReferenceCounts": self.view_reference_counts,
        }


@dataclass(frozen=True)
class SectionAnalysis:
    """
    Per-section details.

    Attributes:
        section: View this entry describes
        reading: Raw OCR reading (0 if nothing was recognized)
        raw_text: Text returned by the OCR engine
        region: Canvas bounding box, None if not found or not searched
        point_count: Points counted on the canvas, None if counting was skipped
    """
    section: Section
    reading: int
    raw_text: str = ""
    region: Optional[DetectedRegion] = None
    point_count: Optional[int] = None


@dataclass
class FrameAnalysis:
    """Complete analysis of a frame: the result plus everything behind it."""
    result: ViewResult
    sections: List[SectionAnalysis]
    trusted_reference: int
    aggregated_points: Optional[int]  # None when counting was skipped
    decision: Decision
    processing_time_ms: float
    artifacts: List[DebugArtifact] = field(default_factory=list)

    @property
    def raw_readings(self) -> Dict[Section, int]:
        """OCR reading per section."""
        return {s.section: s.reading for s in self.sections}

    @property
    def view_counts(self) -> Optional[Dict[Section, int]]:
        """Point count per section, None when counting was skipped."""
        if self.aggregated_points is None:
            return None
        return {s.section: s.point_count or 0 for s in self.sections}

    @property
    def counting_skipped(self) -> bool:
        return self.aggregated_points is None
