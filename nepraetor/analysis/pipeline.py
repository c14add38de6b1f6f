"""
Frame Analysis Pipeline

Runs the full analysis of one screenshot:

    frame -> split into Overhead / Side / Back
          -> per section: read reference label (OCR)
          -> digit consensus -> trusted reference number
          -> if reference <= DETECTION_THRESHOLD:
                 per section: canvas region -> point mask -> point count
                 -> outlier-robust aggregation
          -> dummy classification -> ViewResult

Sections are independent until the consensus and aggregation steps, so they
can optionally run on a thread pool.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, TypeVar, Union

import cv2
import numpy as np

from ..ocr import OCREngine
from .classifier import DETECTION_THRESHOLD, classify_frame
from .consensus import build_consensus
from .context import AnalysisContext
from .frame import Frame, SectionSlice, load_frame, split_sections
from .points import build_point_mask, count_mask_points
from .reference import ReferenceReading, ReferenceRecognizer
from .regions import DetectedRegion, binarize_section, find_region
from .result import DebugArtifact, FrameAnalysis, SectionAnalysis, ViewResult
from .statistics import aggregate_counts

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Debug drawing colors (BGR)
OVERLAY_COLOR = (0, 255, 0)


@dataclass
class _SectionDetection:
    """Point detection outcome for one section."""
    region: Optional[DetectedRegion]
    point_count: int
    artifacts: List[DebugArtifact] = field(default_factory=list)


# Section passes per frame: reference reading, then point detection
STAGE_COUNT = 2


def _stage(context: Optional[AnalysisContext], index: int) -> Optional[AnalysisContext]:
    """Context reporting progress within one section pass of the frame."""
    if context is None:
        return None
    return context.subrange(index / STAGE_COUNT, 1 / STAGE_COUNT)


class FrameAnalyzer:
    """
    Analyzes point cloud screenshots.

    Holds no per-frame state: analyzing the same frame twice gives the
    same result, and one analyzer can serve many frames.

    Example:
        analyzer = FrameAnalyzer(create_engine("tesseract"))
        analysis = analyzer.analyze(load_frame("frame_001.png"))
        print(analysis.result.is_dummy, analysis.result.points)
    """

    def __init__(self, engine: OCREngine, parallel: bool = False,
                 collect_artifacts: bool = False, preprocess_ocr: bool = True):
        """
        Initialize the analyzer.

        Args:
            engine: OCR engine used to read the reference labels
            parallel: Process the three sections on a thread pool
            collect_artifacts: Keep intermediate images in FrameAnalysis.artifacts
            preprocess_ocr: Binarize and upscale label crops before OCR
        """
        self._recognizer = ReferenceRecognizer(engine, preprocess=preprocess_ocr)
        self.parallel = parallel
        self.collect_artifacts = collect_artifacts

    @property
    def engine(self) -> OCREngine:
        return self._recognizer.engine

    def analyze(self, frame: Frame, context: Optional[AnalysisContext] = None) -> FrameAnalysis:
        """
        Analyze a single frame.

        Args:
            frame: Decoded screenshot
            context: Optional cancellation/progress context

        Returns:
            FrameAnalysis with the ViewResult and per-section details

        Raises:
            AnalysisCancelled: If the context was cancelled between sections
        """
        start_time = time.perf_counter()
        slices = split_sections(frame)
        artifacts: List[DebugArtifact] = []

        if self.collect_artifacts:
            artifacts.append(DebugArtifact("1_sections", self._draw_section_lines(frame)))
            for piece in slices:
                artifacts.append(DebugArtifact(f"2_{piece.section.tag}_original", piece.image.copy()))

        # Reference number: one OCR reading per section, then digit consensus
        readings = self._map_sections(slices, self._read_reference, _stage(context, 0))
        trusted = build_consensus(r.value for r in readings)
        logger.debug(f"Frame {frame.frame_number:03d}: readings "
                     f"{[r.value for r in readings]} -> trusted {trusted}")

        if self.collect_artifacts:
            for piece, reading in zip(slices, readings):
                if not reading.crop.size:
                    continue
                tag = piece.section.tag
                artifacts.append(DebugArtifact(f"ocr_{tag}_bottom_left", reading.crop.copy()))
                if reading.prepared is not reading.crop:
                    artifacts.append(DebugArtifact(f"ocr_{tag}_prepared", reading.prepared.copy()))

        detections: List[Optional[_SectionDetection]] = [None] * len(slices)
        aggregated: Optional[int] = None

        if trusted > DETECTION_THRESHOLD:
            # Dense clouds merge into blobs; the printed count is more reliable
            classification = classify_frame(0, trusted)
        else:
            detections = self._map_sections(slices, self._detect_points, _stage(context, 1))
            view_counts = [d.point_count for d in detections]
            aggregated = aggregate_counts(view_counts)
            classification = classify_frame(aggregated, trusted, view_counts)
            for detection in detections:
                artifacts.extend(detection.artifacts)

        sections = [
            SectionAnalysis(
                section=piece.section,
                reading=reading.value,
                raw_text=reading.text,
                region=detection.region if detection else None,
                point_count=detection.point_count if detection else None,
            )
            for piece, reading, detection in zip(slices, readings, detections)
        ]

        result = ViewResult(
            frame_number=frame.frame_number,
            is_dummy=classification.is_dummy,
            points=classification.points,
            reference_number=trusted,
        )

        processing_time = (time.perf_counter() - start_time) * 1000
        logger.info(f"Frame {frame.frame_number:03d}: points={result.points}, "
                    f"reference={trusted}, dummy={result.is_dummy} "
                    f"({classification.decision.value}, {processing_time:.1f}ms)")

        return FrameAnalysis(
            result=result,
            sections=sections,
            trusted_reference=trusted,
            aggregated_points=aggregated,
            decision=classification.decision,
            processing_time_ms=processing_time,
            artifacts=artifacts,
        )

    def analyze_path(self, path: Union[str, Path], frame_number: Optional[int] = None,
                     context: Optional[AnalysisContext] = None) -> FrameAnalysis:
        """
        Load and analyze a frame file.

        Raises:
            FrameLoadError: If the file cannot be decoded
            AnalysisCancelled: If the context was cancelled between sections
        """
        return self.analyze(load_frame(path, frame_number), context)

    def _map_sections(self, slices: List[SectionSlice],
                      func: Callable[[SectionSlice], T],
                      context: Optional[AnalysisContext]) -> List[T]:
        """Apply func to every section, keeping section order."""
        if self.parallel:
            if context:
                context.check_cancelled()
            with ThreadPoolExecutor(max_workers=len(slices), thread_name_prefix="section") as pool:
                futures = [pool.submit(func, piece) for piece in slices]
                return [future.result() for future in futures]

        results = []
        for index, piece in enumerate(slices):
            if context:
                context.check_cancelled()
                context.report_progress(index / len(slices), f"Processing {piece.section.value} view...")
            results.append(func(piece))
        return results

    def _read_reference(self, piece: SectionSlice) -> ReferenceReading:
        return self._recognizer.read(piece.image, label=piece.section.value)

    def _detect_points(self, piece: SectionSlice) -> _SectionDetection:
        """Locate the canvas of a section and count its points."""
        tag = piece.section.tag
        artifacts: List[DebugArtifact] = []

        if piece.image.size == 0:
            return _SectionDetection(region=None, point_count=0)

        binary = binarize_section(piece.image)
        if self.collect_artifacts:
            artifacts.append(DebugArtifact(f"3_{tag}_binary", binary))

        region = find_region(binary)
        if region is None:
            logger.debug(f"[{piece.section.value}] No canvas region found, counting 0 points")
            return _SectionDetection(region=None, point_count=0, artifacts=artifacts)

        roi = region.crop(piece.image)
        mask = build_point_mask(roi)
        point_count = count_mask_points(mask)
        logger.debug(f"[{piece.section.value}] Canvas {region.rect}: {point_count} points")

        if self.collect_artifacts:
            artifacts.extend(self._detection_artifacts(piece.image, region, roi, mask, point_count, tag))

        return _SectionDetection(region=region, point_count=point_count, artifacts=artifacts)

    @staticmethod
    def _draw_section_lines(frame: Frame) -> np.ndarray:
        """Frame copy with the section boundaries drawn in."""
        image = frame.image.copy()
        height = frame.section_height
        for y in (height, height * 2):
            cv2.line(image, (0, y), (frame.width, y), OVERLAY_COLOR, 1)
        return image

    @staticmethod
    def _detection_artifacts(section_image: np.ndarray, region: DetectedRegion,
                             roi: np.ndarray, mask: np.ndarray,
                             point_count: int, tag: str) -> List[DebugArtifact]:
        """Debug images for the region and point stages of one section."""
        rect_debug = section_image.copy()
        cv2.rectangle(rect_debug, (region.x, region.y),
                      (region.x + region.width - 1, region.y + region.height - 1),
                      OVERLAY_COLOR, 1)

        # Paint detected point pixels green
        points_debug = roi.copy()
        points_debug[mask > 0] = OVERLAY_COLOR

        count_debug = points_debug.copy()
        cv2.putText(count_debug, f"Points: {point_count}", (10, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, OVERLAY_COLOR, 2)

        return [
            DebugArtifact(f"4_{tag}_rect", rect_debug),
            DebugArtifact(f"5_{tag}_roi", roi.copy()),
            DebugArtifact(f"6_{tag}_mask", mask),
            DebugArtifact(f"7_{tag}_points", points_debug),
            DebugArtifact(f"8_{tag}_count", count_debug),
        ]
