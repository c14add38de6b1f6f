"""
Analysis Package - Point cloud screenshot analysis.

Splits a three-view screenshot into its sections, counts the rendered
points, reconciles the printed reference count read by OCR and decides
whether the frame shows dummy content.

Public API:
    - Frame, Section, SectionSlice: Input model
    - load_frame(), split_sections(): Frame decoding and splitting
    - detect_region(), count_points(): Per-section detection
    - aggregate_counts(): Outlier-robust count aggregation
    - ReferenceRecognizer, parse_reference_text(): Reference label OCR
    - build_consensus(): Per-digit vote across the views
    - classify_frame(): Dummy decision
    - FrameAnalyzer: Full pipeline
    - ViewResult, FrameAnalysis: Results

Usage:
    from nepraetor.analysis import FrameAnalyzer, load_frame
    from nepraetor.ocr import create_engine

    analyzer = FrameAnalyzer(create_engine("tesseract"))
    analysis = analyzer.analyze(load_frame("Screenshots/frame_001.png"))

    result = analysis.result
    print(f"{result.frame_number} -> {'yes' if result.is_dummy else 'no'}")
"""

# Input model
from .frame import (
    Frame,
    FrameLoadError,
    Section,
    SectionSlice,
    frame_number_from_path,
    load_frame,
    split_sections,
)

# Detection stages
from .regions import DetectedRegion, detect_region
from .points import build_point_mask, count_points
from .statistics import aggregate_counts, coefficient_of_variation

# Reference number
from .reference import ReferenceReading, ReferenceRecognizer, parse_reference_text
from .consensus import build_consensus

# Classification
from .classifier import (
    DETECTION_THRESHOLD,
    Classification,
    Decision,
    classify_frame,
)

# Pipeline
from .context import AnalysisCancelled, AnalysisContext
from .result import DebugArtifact, FrameAnalysis, SectionAnalysis, ViewResult
from .pipeline import FrameAnalyzer

__all__ = [
    # Input model
    "Frame",
    "FrameLoadError",
    "Section",
    "SectionSlice",
    "frame_number_from_path",
    "load_frame",
    "split_sections",
    # Detection
    "DetectedRegion",
    "detect_region",
    "build_point_mask",
    "count_points",
    "aggregate_counts",
    "coefficient_of_variation",
    # Reference number
    "ReferenceReading",
    "ReferenceRecognizer",
    "parse_reference_text",
    "build_consensus",
    # Classification
    "DETECTION_THRESHOLD",
    "Classification",
    "Decision",
    "classify_frame",
    # Pipeline
    "AnalysisCancelled",
    "AnalysisContext",
    "DebugArtifact",
    "FrameAnalysis",
    "SectionAnalysis",
    "ViewResult",
    "FrameAnalyzer",
]
