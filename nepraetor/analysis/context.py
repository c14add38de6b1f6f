"""
Analysis Context Module - Cancellation and progress for frame analysis.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional


class AnalysisCancelled(Exception):
    """Raised between sections when cancellation was requested."""


@dataclass
class AnalysisContext:
    """
    Context passed through frame and batch analysis.

    Cancellation is honoured between frames and between sections; a single
    detection step always runs to completion.

    Attributes:
        cancel_flag: Threading event for cancellation
        progress_callback: Optional callback for progress updates. May be
                           called from worker threads when sections run
                           in parallel.
        start_time: When analysis started
    """
    cancel_flag: threading.Event = field(default_factory=threading.Event)
    progress_callback: Optional[Callable[[float, str], None]] = None
    start_time: float = field(default_factory=time.time)

    def cancel(self) -> None:
        """Request cancellation."""
        self.cancel_flag.set()

    def is_cancelled(self) -> bool:
        """
        Check if cancellation was requested.

        Returns:
            True if analysis should stop
        """
        return self.cancel_flag.is_set()

    def check_cancelled(self) -> None:
        """
        Raise if cancellation was requested.

        Raises:
            AnalysisCancelled: If the cancel flag is set
        """
        if self.cancel_flag.is_set():
            raise AnalysisCancelled("Analysis cancelled")

    def report_progress(self, percent: float, message: str = "") -> None:
        """
        Report progress.

        Args:
            percent: Progress from 0.0 to 1.0
            message: Optional status message
        """
        if self.progress_callback:
            self.progress_callback(percent, message)

    def subrange(self, start: float, span: float) -> 'AnalysisContext':
        """
        Context for one step of a larger run.

        Progress reported through the returned context is mapped into
        [start, start + span] of this context's scale. Cancellation and
        start time are shared.

        Args:
            start: Where the step begins on this context's 0.0-1.0 scale
            span: Share of this context's scale taken by the step

        Returns:
            Child AnalysisContext
        """
        callback = None
        if self.progress_callback:
            parent = self.progress_callback

            def callback(percent: float, message: str) -> None:
                parent(start + min(max(percent, 0.0), 1.0) * span, message)

        return AnalysisContext(
            cancel_flag=self.cancel_flag,
            progress_callback=callback,
            start_time=self.start_time,
        )

    def elapsed_time(self) -> float:
        """Seconds elapsed since analysis started."""
        return time.time() - self.start_time
