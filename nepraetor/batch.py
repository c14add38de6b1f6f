"""
Batch Processing Module for Nepraetor

Processes the frames of a capture session in groups of three (one logical
sample per view triple). The OCR engine is created once per batch run since
backends can be slow to initialize. A frame that cannot be loaded or
analyzed is recorded as a failure and the run continues.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .analysis import (
    AnalysisCancelled,
    AnalysisContext,
    FrameAnalyzer,
    FrameLoadError,
    ViewResult,
    frame_number_from_path,
)
from .debug import DebugArtifactWriter
from .ocr import OCREngine, create_engine
from .session import Session

logger = logging.getLogger(__name__)


# Frames per group: overhead, side and back captures of one sample
DEFAULT_BATCH_SIZE = 3


@dataclass
class FrameFailure:
    """A frame that could not be processed."""
    path: Path
    frame_number: int
    error: str


@dataclass
class BatchResult:
    """
    Outcome of a batch run.

    Attributes:
        results: Completed frames, sorted by frame number
        failures: Frames that could not be processed
        was_cancelled: True if the run stopped early
        processing_time_ms: Total time taken
    """
    results: List[ViewResult] = field(default_factory=list)
    failures: List[FrameFailure] = field(default_factory=list)
    was_cancelled: bool = False
    processing_time_ms: float = 0.0

    @property
    def processed_count(self) -> int:
        return len(self.results)

    @property
    def dummy_count(self) -> int:
        return sum(1 for r in self.results if r.is_dummy)


def order_frames(paths: Iterable[Union[str, Path]]) -> List[Tuple[int, Path]]:
    """
    Pair frame files with frame numbers, in increasing frame order.

    Files without a frame_NNN name are numbered by their position (1-based).
    """
    numbered = []
    for position, path in enumerate(paths, start=1):
        path = Path(path)
        number = frame_number_from_path(path)
        numbered.append((number if number is not None else position, path))
    numbered.sort(key=lambda item: item[0])
    return numbered


class BatchProcessor:
    """
    Runs the frame analyzer over many frame files.

    Example:
        processor = BatchProcessor(engine_type="tesseract")
        batch = processor.process_session(Session.open("Screenshots/2024-05-01_10-00-00"))
        for result in batch.results:
            print(result.frame_number, result.is_dummy)
    """

    def __init__(self, engine_type: str = "tesseract",
                 engine_config: Optional[Dict[str, Any]] = None,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 parallel: bool = False,
                 debug_dir: Optional[Union[str, Path]] = None,
                 engine: Optional[OCREngine] = None):
        """
        Initialize the processor.

        Args:
            engine_type: OCR engine to create for each run
            engine_config: Options passed to create_engine()
            batch_size: Frames per processing group
            parallel: Analyze the sections of a frame in parallel
            debug_dir: Write debug artifacts here (disabled if None)
            engine: Ready-made engine; engine_type/engine_config are ignored
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.engine_type = engine_type
        self.engine_config = dict(engine_config or {})
        self.batch_size = batch_size
        self.parallel = parallel
        self.debug_dir = Path(debug_dir) if debug_dir else None
        self._engine = engine

    def process_session(self, session: Session,
                        context: Optional[AnalysisContext] = None) -> BatchResult:
        """Process every frame file of a session."""
        return self.process(session.frame_paths(), context)

    def process(self, paths: Iterable[Union[str, Path]],
                context: Optional[AnalysisContext] = None) -> BatchResult:
        """
        Process frame files in increasing frame-number order.

        Args:
            paths: Frame image files
            context: Optional cancellation/progress context, checked
                     between frames and between sections

        Returns:
            BatchResult
        """
        start_time = time.perf_counter()
        context = context or AnalysisContext()
        frames = order_frames(paths)
        batch = BatchResult()

        if not frames:
            logger.warning("No frames to process")
            return batch

        engine = self._engine or create_engine(self.engine_type, **self.engine_config)
        analyzer = FrameAnalyzer(
            engine,
            parallel=self.parallel,
            collect_artifacts=self.debug_dir is not None,
        )
        writer = DebugArtifactWriter(self.debug_dir) if self.debug_dir else None

        total = len(frames)
        logger.info(f"Processing {total} frames with OCR engine '{engine.name}'")

        for group_start in range(0, total, self.batch_size):
            group = frames[group_start:group_start + self.batch_size]
            logger.info(f"Processing frames {group[0][0]}-{group[-1][0]}...")

            for offset, (frame_number, path) in enumerate(group):
                if context.is_cancelled():
                    batch.was_cancelled = True
                    break

                done = group_start + offset
                context.report_progress(done / total, f"Processing frame {frame_number}/{total}...")

                # Section progress fills this frame's share of the run
                frame_context = context.subrange(done / total, 1 / total)

                try:
                    analysis = analyzer.analyze_path(path, frame_number, frame_context)
                except AnalysisCancelled:
                    batch.was_cancelled = True
                    break
                except FrameLoadError as e:
                    logger.warning(f"Skipping frame {frame_number}: {e}")
                    batch.failures.append(FrameFailure(path, frame_number, str(e)))
                    continue
                except Exception as e:
                    logger.exception(f"Error processing frame {frame_number}")
                    batch.failures.append(FrameFailure(path, frame_number, str(e)))
                    continue

                batch.results.append(analysis.result)
                if writer:
                    writer.write(frame_number, analysis.artifacts)

            if batch.was_cancelled:
                logger.info("Batch processing cancelled")
                break

        batch.results.sort(key=lambda r: r.frame_number)
        batch.processing_time_ms = (time.perf_counter() - start_time) * 1000

        if not batch.was_cancelled:
            context.report_progress(1.0, "Processing complete!")
        logger.info(f"Processed {batch.processed_count}/{total} frames, "
                    f"{batch.dummy_count} dummy, {len(batch.failures)} failed "
                    f"({batch.processing_time_ms:.0f}ms)")
        return batch
